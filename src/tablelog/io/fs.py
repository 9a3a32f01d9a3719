"""
Filesystem helpers for tablelog.io (file protocol baseline).

Responsibilities
- Provide a minimal stdlib-only abstraction for the operations the local log store
  needs: directory creation, safe write handles, fsync, atomic renames, listing.
- Establish the write path for log files: tmp write -> fsync -> atomic rename.

Notes
- Atomicity via os.replace is guaranteed only when src and dst reside on the same filesystem.
- All helpers are synchronous; the local store is single-writer and does no locking.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager
from typing import BinaryIO


def exists(path: str) -> bool:
    return os.path.exists(path)


def makedirs(path: str, exist_ok: bool = True) -> None:
    """Create directories recursively (thin wrapper around os.makedirs)."""
    os.makedirs(path, exist_ok=exist_ok)


@contextmanager
def open_write(path: str) -> Iterator[BinaryIO]:
    """
    Open a file for binary write as a context manager.

    Args:
        path (str): Destination path to open in write-binary mode.

    Yields:
        BinaryIO: A writable handle supporting .flush() and .fileno().

    Notes:
        Caller is responsible for the atomic os.replace of the temporary file to its final path.
    """
    fh = open(path, "wb")
    try:
        yield fh
    finally:
        fh.close()


def fsync_file(fh: BinaryIO) -> None:
    """Flush and fsync an open file handle."""
    fh.flush()
    os.fsync(fh.fileno())


def rename_atomic(src: str, dst: str) -> None:
    """
    Atomically rename src -> dst on the same filesystem.

    Notes:
        Uses os.replace; callers keep tmp and final paths in the same directory.
    """
    os.replace(src, dst)


def write_atomic(path: str, payload: bytes) -> None:
    """Write ``payload`` to ``path`` via ``<path>.tmp``, fsync, then atomic rename."""
    tmp_path = path + ".tmp"
    try:
        with open_write(tmp_path) as fh:
            fh.write(payload)
            fsync_file(fh)
        rename_atomic(tmp_path, path)
    finally:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)


def listdir(path: str) -> list[str]:
    """
    List entry names in a directory (non-recursive).

    Returns:
        list[str]: Entry names; [] if the directory does not exist.
    """
    try:
        return os.listdir(path)
    except FileNotFoundError:
        return []
