"""
Core exception types raised by action validation, decoding, replay, and the protocol gate.

Provides typed exceptions for core-domain failures:
- InvalidActionError for malformed action content (e.g., an empty file path).
- MalformedRecordError for records that cannot be parsed into an envelope at all.
- VersionGapError for batches supplied out of order or with a missing version.
- UnsupportedProtocolError when a table requires a newer reader/writer.
- IncompleteStateError when a state lacks the Metadata/Protocol an operation needs.

Notes:
    - None of these subclass ValueError. Pydantic wraps ValueError raised inside
      validators into ValidationError; these are re-raised unchanged instead.
    - Nothing here is recovered locally by the core; callers decide.

Examples:
    Catch a protocol violation and inspect the exceeded bound.

    >>> from tablelog.core.errors import UnsupportedProtocolError
    >>> err = UnsupportedProtocolError("reader", required=3, supported=1)
    >>> (err.bound, err.excess)
    ('reader', 2)
"""

from __future__ import annotations

__all__ = [
    "TableLogError",
    "InvalidActionError",
    "MalformedRecordError",
    "VersionGapError",
    "UnsupportedProtocolError",
    "IncompleteStateError",
]


class TableLogError(Exception):
    """Base class for all tablelog core failures."""


class InvalidActionError(TableLogError):
    """Malformed action content; raised at construction or decode time, never repaired."""


class MalformedRecordError(TableLogError):
    """
    A log record could not be parsed into an action envelope.

    Attributes:
        version (int | None): Log version of the batch holding the record, when known.
        line (int | None): Zero-based index of the record within its batch, when known.
    """

    def __init__(self, message: str, *, version: int | None = None, line: int | None = None) -> None:
        self.version = version
        self.line = line
        if version is not None:
            where = f"version {version}" if line is None else f"version {version}, record {line}"
            message = f"{message} ({where})"
        super().__init__(message)


class VersionGapError(TableLogError):
    """
    Supplied batches are not contiguous and strictly increasing.

    Attributes:
        expected (int): Version the replay needed next.
        actual (int): Version that was supplied instead.
    """

    def __init__(self, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"expected log version {expected}, got {actual}")


class UnsupportedProtocolError(TableLogError):
    """
    The implementation's supported versions are below the table's declared minimum.

    Attributes:
        bound (str): Which bound was exceeded ("reader" or "writer").
        required (int): Minimum version declared by the table.
        supported (int): Version supported by this implementation.
        excess (int): How far the requirement exceeds support (required - supported).
    """

    def __init__(self, bound: str, *, required: int, supported: int) -> None:
        self.bound = bound
        self.required = required
        self.supported = supported
        self.excess = required - supported
        super().__init__(
            f"table requires min {bound} version {required} but this implementation "
            f"supports {supported} (exceeded by {self.excess}); upgrade required"
        )


class IncompleteStateError(TableLogError):
    """A table state lacks the Metadata or Protocol action an operation depends on."""
