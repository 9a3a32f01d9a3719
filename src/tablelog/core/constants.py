"""
tablelog core defaults.

Defines the protocol versions this implementation understands and the
log-layout and retention defaults consumed by the IO layer. This module is
zero-IO and uses only the Python standard library.

Notes:
    - READER_VERSION / WRITER_VERSION are defaults only. The protocol gate
      always receives the supported versions explicitly (see
      tablelog.core.versioning.SupportedVersions) so callers can exercise
      other configurations without touching module state.
    - tablelog.io.config.LogSettings consumes the remaining values.
"""

from __future__ import annotations

__all__ = [
    "READER_VERSION",
    "WRITER_VERSION",
    "DEFAULT_FORMAT_PROVIDER",
    "DEFAULT_TOMBSTONE_RETENTION_MS",
    "DEFAULT_CHECKPOINT_INTERVAL",
    "DEFAULT_STATE_CACHE_SIZE",
    "VERSION_DIGITS",
]

# Highest protocol versions this implementation can read and write.
READER_VERSION: int = 1
WRITER_VERSION: int = 2

DEFAULT_FORMAT_PROVIDER: str = "parquet"

# Tombstones older than this window may be dropped from checkpoints.
DEFAULT_TOMBSTONE_RETENTION_MS: int = 7 * 24 * 60 * 60 * 1000

# Write a checkpoint every N committed versions (0 disables).
DEFAULT_CHECKPOINT_INTERVAL: int = 10

# Number of computed TableState values kept by the Table facade.
DEFAULT_STATE_CACHE_SIZE: int = 8

# Version numbers in log file names are zero-padded to this width.
VERSION_DIGITS: int = 20
