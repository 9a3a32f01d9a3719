"""Tests for `tablelog.core.actions` construction rules and derivations."""

import pytest
from pydantic import ValidationError

from tablelog.core.actions import ActionKind, AddFile, Format, Metadata, Protocol, RemoveFile
from tablelog.core.errors import InvalidActionError


def make_add(path: str = "part-0.parquet", **kw) -> AddFile:
    fields = {
        "path": path,
        "partition_values": {},
        "size": 10,
        "modification_time": 1_700_000_000_000,
        "data_change": True,
    }
    fields.update(kw)
    return AddFile(**fields)


def test_add_file_rejects_empty_path() -> None:
    with pytest.raises(InvalidActionError, match="non-empty path"):
        make_add(path="")


def test_remove_file_rejects_empty_path() -> None:
    with pytest.raises(InvalidActionError):
        RemoveFile(path="", deletion_timestamp=1)


def test_actions_are_immutable() -> None:
    add = make_add()
    with pytest.raises(ValidationError):
        add.size = 99  # type: ignore[misc]
    assert add.size == 10


def test_remove_from_add_copies_path_and_uses_given_timestamp() -> None:
    add = make_add(path="date=2024-01-01/part-1.parquet", size=123)
    tomb = RemoveFile.from_add(add, 1000)

    assert tomb.path == add.path
    assert tomb.deletion_timestamp == 1000
    assert tomb.data_change is True


def test_remove_with_timestamp_respects_data_change_flag() -> None:
    tomb = make_add().remove_with_timestamp(5, data_change=False)
    assert tomb.deletion_timestamp == 5
    assert tomb.data_change is False


def test_remove_file_defaults() -> None:
    tomb = RemoveFile(path="a.parquet")
    assert tomb.deletion_timestamp is None
    assert tomb.del_timestamp == 0
    assert tomb.data_change is True


def test_protocol_defaults_and_simple_string() -> None:
    p = Protocol()
    assert (p.min_reader_version, p.min_writer_version) == (1, 2)
    assert Protocol(min_reader_version=3, min_writer_version=7).simple_string == "(3,7)"


@pytest.mark.parametrize("field", ["min_reader_version", "min_writer_version"])
def test_protocol_rejects_versions_below_one(field: str) -> None:
    with pytest.raises(ValidationError):
        Protocol(**{field: 0})


def test_protocol_accepts_wire_names() -> None:
    p = Protocol(minReaderVersion=2, minWriterVersion=5)
    assert p == Protocol(min_reader_version=2, min_writer_version=5)


def test_metadata_defaults() -> None:
    m1 = Metadata()
    m2 = Metadata()

    assert m1.id and m1.id != m2.id
    assert m1.format == Format(provider="parquet", options={})
    assert m1.partition_columns == []
    assert m1.configuration == {}
    assert m1.created_time is None


def test_metadata_parsed_schema() -> None:
    schema = (
        '{"type":"struct","fields":['
        '{"name":"id","type":"long","nullable":false,"metadata":{}},'
        '{"name":"date","type":"string","nullable":true,"metadata":{}}]}'
    )
    m = Metadata(id="t1", schema_string=schema, partition_columns=["date"])

    assert m.parsed_schema.field_names == ("id", "date")
    assert m.parsed_schema.field("id").nullable is False


def test_path_uri_splits_scheme() -> None:
    add = make_add(path="s3://bucket/table/part%20one.parquet")
    assert add.path_uri.scheme == "s3"
    assert add.path_uri.netloc == "bucket"


def test_kind_matches_envelope_field() -> None:
    assert AddFile.kind is ActionKind.ADD
    assert RemoveFile.kind is ActionKind.REMOVE
    assert Metadata.kind.value == "metaData"
    assert Protocol.kind.value == "protocol"


def test_metadata_id_is_only_generated_on_construction() -> None:
    assert Metadata.model_validate({"partitionColumns": []}).id
    assert Metadata.model_validate({"partitionColumns": []}, context={"source": "log"}).id is None
    assert Metadata(id="t1").id == "t1"


def test_actions_compare_by_value_but_are_unhashable() -> None:
    assert make_add() == make_add()
    with pytest.raises(TypeError):
        hash(make_add())
