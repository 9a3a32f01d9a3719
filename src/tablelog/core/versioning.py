"""
Protocol gate and log-version helpers.

Compares a table's declared minimum reader/writer versions against the versions
an implementation supports, before any state is returned to a caller and before
a new log version is constructed. This module is zero-IO.

Notes:
    - Supported versions are passed in explicitly (SupportedVersions); there is no
      process-wide "current version" consulted by the gate.
    - Read and write checks are independent: a table may be writable but not
      readable by the same implementation, and vice versa.
    - The gate is hard: a violation is never retried or downgraded here; the
      caller has to upgrade.

Examples:
    >>> from tablelog.core.actions import Protocol
    >>> from tablelog.core.versioning import SupportedVersions, can_read, can_write
    >>> impl = SupportedVersions(reader_version=1, writer_version=2)
    >>> table = Protocol(min_reader_version=3, min_writer_version=2)
    >>> (can_read(table, impl), can_write(table, impl))
    (False, True)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from .actions import Protocol
from .constants import READER_VERSION, WRITER_VERSION
from .errors import UnsupportedProtocolError

__all__ = [
    "Operation",
    "SupportedVersions",
    "can_read",
    "can_write",
    "check_read",
    "check_write",
    "check_protocol",
    "is_next_version",
]

Operation = Literal["read", "write"]


@dataclass(frozen=True)
class SupportedVersions:
    """
    Highest protocol versions an implementation can read and write.

    Attributes:
        reader_version (int): Supported reader version (>= 1).
        writer_version (int): Supported writer version (>= 1).

    Raises:
        ValueError: If any component is below 1.
    """

    reader_version: int = READER_VERSION
    writer_version: int = WRITER_VERSION

    def __post_init__(self) -> None:
        if self.reader_version < 1:
            raise ValueError(f"reader_version must be >= 1, got {self.reader_version}")
        if self.writer_version < 1:
            raise ValueError(f"writer_version must be >= 1, got {self.writer_version}")


def can_read(table: Protocol, supported: SupportedVersions) -> bool:
    return table.min_reader_version <= supported.reader_version


def can_write(table: Protocol, supported: SupportedVersions) -> bool:
    return table.min_writer_version <= supported.writer_version


def check_read(table: Protocol, supported: SupportedVersions) -> None:
    """
    Permit a read only if the table's min reader version is supported.

    Raises:
        UnsupportedProtocolError: With bound "reader" and the excess over support.
    """
    if not can_read(table, supported):
        raise UnsupportedProtocolError(
            "reader", required=table.min_reader_version, supported=supported.reader_version
        )


def check_write(table: Protocol, supported: SupportedVersions) -> None:
    """
    Permit appending a version only if the table's min writer version is supported.

    Raises:
        UnsupportedProtocolError: With bound "writer" and the excess over support.
    """
    if not can_write(table, supported):
        raise UnsupportedProtocolError(
            "writer", required=table.min_writer_version, supported=supported.writer_version
        )


def check_protocol(
    table: Protocol, supported: SupportedVersions, operation: Operation = "read"
) -> None:
    """
    Gate ``operation`` on ``table`` for an implementation supporting ``supported``.

    Args:
        table (Protocol): The table's current Protocol action.
        supported (SupportedVersions): Versions this implementation supports.
        operation (Literal["read", "write"]): Operation being attempted.

    Returns:
        None: When the operation is permitted.

    Raises:
        UnsupportedProtocolError: If the relevant bound is exceeded.
        ValueError: If operation is not "read" or "write".
    """
    if operation == "read":
        check_read(table, supported)
    elif operation == "write":
        check_write(table, supported)
    else:
        raise ValueError(f"operation must be 'read' or 'write', got {operation!r}")


def is_next_version(candidate: int, current: int) -> bool:
    """
    Determine whether ``candidate`` immediately follows ``current`` in the log.

    Examples:
        >>> from tablelog.core.versioning import is_next_version
        >>> is_next_version(3, 2), is_next_version(4, 2), is_next_version(2, 2)
        (True, False, False)
    """
    return candidate == current + 1
