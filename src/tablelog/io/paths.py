"""
Path and layout helpers for tablelog.io.

Overview (file protocol baseline)
- <table_root>/<log_dir_name>/00000000000000000007.json             (one envelope per line)
- <table_root>/<log_dir_name>/00000000000000000010.checkpoint.json  (checkpoint records)
- <table_root>/<log_dir_name>/_last_checkpoint                       ({"version": N, "size": records})

Source of truth
- Zero-padding width: tablelog.core.constants.VERSION_DIGITS.

Import DAG discipline
- stdlib + tablelog.io.config only.
"""

from __future__ import annotations

import os
import re
from typing import Final

from tablelog.core.constants import VERSION_DIGITS

from .config import LogSettings

_DELTA_RE: Final[re.Pattern[str]] = re.compile(rf"^(\d{{{VERSION_DIGITS}}})\.json$")
_CHECKPOINT_RE: Final[re.Pattern[str]] = re.compile(rf"^(\d{{{VERSION_DIGITS}}})\.checkpoint\.json$")
_LAST_CHECKPOINT_NAME: Final[str] = "_last_checkpoint"


def format_version(version: int) -> str:
    """
    Zero-pad a log version, e.g. 7 -> '00000000000000000007'.

    Raises:
        ValueError: If version < 0.
    """
    if version < 0:
        raise ValueError("version must be >= 0")
    return f"{version:0{VERSION_DIGITS}d}"


def log_dir(settings: LogSettings) -> str:
    return os.path.join(settings.table_root, settings.log_dir_name)


def delta_file(settings: LogSettings, version: int) -> str:
    """Path of the batch file for ``version``."""
    return os.path.join(log_dir(settings), f"{format_version(version)}.json")


def checkpoint_file(settings: LogSettings, version: int) -> str:
    """Path of the checkpoint file taken at ``version``."""
    return os.path.join(log_dir(settings), f"{format_version(version)}.checkpoint.json")


def last_checkpoint_file(settings: LogSettings) -> str:
    return os.path.join(log_dir(settings), _LAST_CHECKPOINT_NAME)


def delta_version(name: str) -> int | None:
    """
    Parse the version from a batch file name.

    Returns:
        int | None: The version, or None if ``name`` is not a batch file.
    """
    m = _DELTA_RE.match(name)
    return int(m.group(1)) if m else None


def checkpoint_version(name: str) -> int | None:
    """Parse the version from a checkpoint file name, or None if it is not one."""
    m = _CHECKPOINT_RE.match(name)
    return int(m.group(1)) if m else None
