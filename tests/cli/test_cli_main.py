from __future__ import annotations

import os
from pathlib import Path

import pytest

from tablelog.cli import main as cli_main
from tablelog.core.actions import AddFile, Metadata, Protocol
from tablelog.io.config import LogSettings
from tablelog.io.paths import checkpoint_file, delta_file
from tablelog.io.table import Table


@pytest.fixture
def table_root(tmp_path: Path, monkeypatch) -> Path:
    monkeypatch.chdir(tmp_path)
    root = tmp_path / "events"
    table = Table(LogSettings(table_root=str(root), checkpoint_interval=0))
    table.commit([Protocol(), Metadata(id="tbl-1", partition_columns=["date"])])
    table.commit(
        [
            AddFile(
                path="date=2024-01-01/part-0.parquet",
                partition_values={"date": "2024-01-01"},
                size=128,
                modification_time=0,
                data_change=True,
            )
        ]
    )
    return root


def test_versions(table_root: Path, capsys) -> None:
    assert cli_main.main(["--table-root", str(table_root), "versions"]) == 0
    assert capsys.readouterr().out.split() == ["0", "1"]


def test_show(table_root: Path, capsys) -> None:
    assert cli_main.main(["--table-root", str(table_root), "show", "--tombstones"]) == 0
    out = capsys.readouterr().out

    assert "version:   1" in out
    assert "protocol:  (1,2)" in out
    assert "table id:  tbl-1" in out
    assert "files:     1 (128 bytes)" in out
    assert "tombstones: 0" in out


def test_show_older_version(table_root: Path, capsys) -> None:
    assert cli_main.main(["--table-root", str(table_root), "show", "--version", "0"]) == 0
    assert "files:     0 (0 bytes)" in capsys.readouterr().out


def test_checkpoint(table_root: Path, capsys) -> None:
    assert cli_main.main(["--table-root", str(table_root), "checkpoint"]) == 0
    assert "version 1" in capsys.readouterr().out
    settings = LogSettings(table_root=str(table_root))
    assert os.path.exists(checkpoint_file(settings, 1))

    cli_main.main(["--table-root", str(table_root), "versions"])
    assert "1  (checkpoint)" in capsys.readouterr().out


def test_errors_exit_non_zero(tmp_path: Path, monkeypatch, capsys) -> None:
    monkeypatch.chdir(tmp_path)
    assert cli_main.main(["--table-root", str(tmp_path / "missing"), "show"]) == 1
    assert "LogStoreError" in capsys.readouterr().err


def test_corrupt_log_exits_non_zero(table_root: Path, capsys) -> None:
    settings = LogSettings(table_root=str(table_root))
    with open(delta_file(settings, 1), "ab") as fh:
        fh.write(b"\xff\n")

    assert cli_main.main(["--table-root", str(table_root), "show"]) == 1
    assert "MalformedRecordError" in capsys.readouterr().err
