"""
Log store collaborator: version listing and raw record access.

The core never touches storage; it consumes the ``LogStore`` protocol below.
``LocalLogStore`` is the file-protocol baseline used by the Table facade, the
CLI and the tests.

Notes
- Records are returned as raw JSON lines; decoding happens in tablelog.core.replay.
- LocalLogStore is single-writer: writes go tmp -> fsync -> rename and refuse to
  replace an existing version, but there is no cross-process locking and no
  conflict resolution between competing writers.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from typing import Protocol

from . import fs
from .config import LogSettings
from .errors import LogStoreError
from .paths import (
    checkpoint_file,
    checkpoint_version,
    delta_file,
    delta_version,
    last_checkpoint_file,
    log_dir,
)

logger = logging.getLogger(__name__)


class LogStore(Protocol):
    """Reads committed versions and checkpoints of one table's log."""

    def list_versions(self, start: int = 0, end: int | None = None) -> list[int]:
        """Committed versions in ``[start, end]`` (end inclusive, None = latest), ascending."""
        ...

    def read_batch(self, version: int) -> list[bytes]:
        """Raw records of ``version`` in recorded order."""
        ...

    def read_checkpoint(self, version: int) -> list[bytes]:
        """Raw records of the checkpoint taken at ``version``."""
        ...

    def latest_checkpoint(self, at_or_before: int | None = None) -> int | None:
        """Newest checkpoint version, optionally not after ``at_or_before``."""
        ...


def _read_lines(path: str) -> list[bytes]:
    # Undecoded lines; a bad byte sequence surfaces as a malformed record on decode.
    try:
        with open(path, "rb") as fh:
            return [line.rstrip(b"\r\n") for line in fh if line.strip()]
    except FileNotFoundError as exc:
        raise LogStoreError(f"log file not found: {path}") from exc


def _encode_lines(lines: Sequence[str]) -> bytes:
    return "".join(f"{line}\n" for line in lines).encode("utf-8")


class LocalLogStore:
    """
    LogStore over a local directory (``<table_root>/<log_dir_name>``).

    Args:
        settings (LogSettings): Resolves the log directory.
    """

    def __init__(self, settings: LogSettings) -> None:
        self.settings = settings

    # ---------------------------------------------------------------------
    # Read
    # ---------------------------------------------------------------------
    def list_versions(self, start: int = 0, end: int | None = None) -> list[int]:
        versions = []
        for name in fs.listdir(log_dir(self.settings)):
            v = delta_version(name)
            if v is None or v < start or (end is not None and v > end):
                continue
            versions.append(v)
        return sorted(versions)

    def read_batch(self, version: int) -> list[bytes]:
        logger.debug("reading log version %d", version)
        return _read_lines(delta_file(self.settings, version))

    def read_checkpoint(self, version: int) -> list[bytes]:
        logger.debug("reading checkpoint at version %d", version)
        return _read_lines(checkpoint_file(self.settings, version))

    def latest_checkpoint(self, at_or_before: int | None = None) -> int | None:
        """
        Newest checkpoint version, optionally bounded by ``at_or_before``.

        Notes:
            The ``_last_checkpoint`` pointer is consulted first; the directory is
            listed when the pointer is missing, unreadable or beyond the bound.
        """
        pointer = self._read_last_checkpoint()
        if pointer is not None and (at_or_before is None or pointer <= at_or_before):
            if fs.exists(checkpoint_file(self.settings, pointer)):
                return pointer
        found = [
            v
            for v in map(checkpoint_version, fs.listdir(log_dir(self.settings)))
            if v is not None and (at_or_before is None or v <= at_or_before)
        ]
        return max(found) if found else None

    def _read_last_checkpoint(self) -> int | None:
        path = last_checkpoint_file(self.settings)
        if not fs.exists(path):
            return None
        try:
            with open(path, encoding="utf-8") as fh:
                return int(json.load(fh)["version"])
        except (OSError, ValueError, KeyError, TypeError):
            logger.warning("ignoring unreadable checkpoint pointer %s", path)
            return None

    # ---------------------------------------------------------------------
    # Write
    # ---------------------------------------------------------------------
    def write_batch(self, version: int, lines: Sequence[str]) -> str:
        """
        Persist the records of a new version.

        Returns:
            str: Path of the written file.

        Raises:
            LogStoreError: If the version already exists.
        """
        path = delta_file(self.settings, version)
        if fs.exists(path):
            raise LogStoreError(f"log version {version} already exists")
        fs.makedirs(log_dir(self.settings))
        fs.write_atomic(path, _encode_lines(lines))
        return path

    def write_checkpoint(self, version: int, lines: Sequence[str]) -> str:
        """Persist checkpoint records for ``version`` and point ``_last_checkpoint`` at it."""
        if not fs.exists(delta_file(self.settings, version)):
            raise LogStoreError(f"cannot checkpoint missing log version {version}")
        path = checkpoint_file(self.settings, version)
        fs.write_atomic(path, _encode_lines(lines))
        pointer = json.dumps({"version": version, "size": len(lines)}).encode("utf-8")
        fs.write_atomic(last_checkpoint_file(self.settings), pointer)
        return path
