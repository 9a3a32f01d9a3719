"""
Custom exceptions for the tablelog.io module.

Purpose
- Provide IO-layer specific error types that map cleanly to responsibilities in tablelog.io.
- Keep tablelog.core as the source of truth for action/replay/protocol errors
  (see tablelog.core.errors); those propagate through this layer unchanged.

Source of truth and boundaries
- tablelog.core.errors.* are raised by decoding, replay and the protocol gate.
- tablelog.io raises LogIo* errors for filesystem/layout concerns:
  - LogConfigError: invalid or unsupported configuration.
  - LogStoreError: missing, duplicate or unreadable log files.

Notes
- These exceptions do not perform any IO and are stdlib-only.
"""

from __future__ import annotations


class LogIoError(Exception):
    """
    Base class for IO-related errors in tablelog.io.

    Notes:
        Use this as a catch-all for IO-layer failures, distinct from tablelog.core errors.
    """


class LogConfigError(LogIoError):
    """
    Raised when log settings are invalid.

    Examples:
        - Empty log directory name
        - Negative checkpoint interval or retention
    """


class LogStoreError(LogIoError):
    """
    Raised when the log store cannot satisfy a read or write.

    Notes:
        Includes reading a version that does not exist and writing a version that
        already exists (the local store is single-writer and never overwrites).
    """
