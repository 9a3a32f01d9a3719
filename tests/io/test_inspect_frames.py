import polars as pl

from tablelog.core.actions import AddFile, Metadata, Protocol, RemoveFile
from tablelog.core.replay import VersionBatch, replay
from tablelog.core.state import TableState
from tablelog.io.inspect import active_files_frame, tombstones_frame


def make_state() -> TableState:
    return replay(
        None,
        [
            VersionBatch(
                0,
                (
                    Protocol(),
                    Metadata(id="t", partition_columns=["date", "region"]),
                    AddFile(
                        path="b.parquet",
                        partition_values={"date": "2024-01-02", "region": "eu"},
                        size=20,
                        modification_time=2,
                        data_change=True,
                        stats='{"numRecords":2}',
                    ),
                    AddFile(
                        path="a.parquet",
                        partition_values={"date": "2024-01-01"},
                        size=10,
                        modification_time=1,
                        data_change=False,
                    ),
                    RemoveFile(path="z.parquet", deletion_timestamp=99),
                    RemoveFile(path="y.parquet"),
                ),
            )
        ],
    )


def test_active_files_frame() -> None:
    df = active_files_frame(make_state())

    assert df.columns == [
        "path",
        "size",
        "modification_time",
        "data_change",
        "stats",
        "partition.date",
        "partition.region",
    ]
    assert df["path"].to_list() == ["a.parquet", "b.parquet"]
    assert df["size"].to_list() == [10, 20]
    assert df["partition.region"].to_list() == [None, "eu"]
    assert df["stats"].to_list() == [None, '{"numRecords":2}']
    assert df.schema["size"] == pl.Int64


def test_tombstones_frame() -> None:
    df = tombstones_frame(make_state())

    assert df["path"].to_list() == ["y.parquet", "z.parquet"]
    assert df["deletion_timestamp"].to_list() == [None, 99]


def test_empty_state_frames_keep_schema() -> None:
    files = active_files_frame(TableState.empty())
    tombs = tombstones_frame(TableState.empty())

    assert files.height == 0
    assert files.columns == ["path", "size", "modification_time", "data_change", "stats"]
    assert tombs.height == 0
    assert tombs.schema["deletion_timestamp"] == pl.Int64


def test_null_partition_value_is_null_in_frame() -> None:
    state = replay(
        None,
        [
            VersionBatch(
                0,
                (
                    Protocol(),
                    Metadata(id="t", partition_columns=["date"]),
                    AddFile(
                        path="part-0.parquet",
                        partition_values={"date": None},
                        size=1,
                        modification_time=0,
                        data_change=True,
                    ),
                ),
            )
        ],
    )

    assert active_files_frame(state)["partition.date"].to_list() == [None]
