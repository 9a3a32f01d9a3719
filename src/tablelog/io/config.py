"""
Configuration for the tablelog.io module.

Defines LogSettings, a frozen dataclass carrying runtime configuration for the
local log store and the Table facade. Defaults are sourced from
tablelog.core.constants (the single source of truth).

Source of truth
- tablelog.core.constants.READER_VERSION, WRITER_VERSION, DEFAULT_* values
- Protocol gate inputs are built by LogSettings.supported_versions()

Import DAG discipline
- Depends only on stdlib and tablelog.core.
- Does not import tablelog.cli.

Notes
- Precedence for loaders: environment > TOML > defaults.
- Unparseable values are ignored and the previous value is kept.
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from tablelog.core.constants import (
    DEFAULT_CHECKPOINT_INTERVAL,
    DEFAULT_STATE_CACHE_SIZE,
    DEFAULT_TOMBSTONE_RETENTION_MS,
    READER_VERSION,
    WRITER_VERSION,
)
from tablelog.core.versioning import SupportedVersions

from .errors import LogConfigError

_INT_KEYS = (
    "reader_version",
    "writer_version",
    "tombstone_retention_ms",
    "checkpoint_interval",
    "state_cache_size",
)
_STR_KEYS = ("table_root", "log_dir_name")


@dataclass(frozen=True)
class LogSettings:
    """
    Runtime settings for the tablelog.io layer.

    Attributes:
        table_root (str): Table directory; the log lives beneath it.
        log_dir_name (str): Name of the log directory under table_root.
        reader_version (int): Highest reader protocol version this process supports.
        writer_version (int): Highest writer protocol version this process supports.
        tombstone_retention_ms (int): Tombstones older than this (relative to the
            checkpoint's ``now_ms``) are dropped from checkpoints.
        checkpoint_interval (int): Write a checkpoint every N versions (0 disables).
        state_cache_size (int): Number of computed states kept per Table.

    Raises:
        LogConfigError: If a value is out of range.

    Examples:
        >>> from tablelog.io import LogSettings
        >>> LogSettings(table_root="tbl", checkpoint_interval=5)  # doctest: +ELLIPSIS
        LogSettings(...)
    """

    table_root: str = "."
    log_dir_name: str = "_delta_log"
    reader_version: int = READER_VERSION
    writer_version: int = WRITER_VERSION
    tombstone_retention_ms: int = DEFAULT_TOMBSTONE_RETENTION_MS
    checkpoint_interval: int = DEFAULT_CHECKPOINT_INTERVAL
    state_cache_size: int = DEFAULT_STATE_CACHE_SIZE

    def __post_init__(self) -> None:
        if not self.log_dir_name:
            raise LogConfigError("log_dir_name must be non-empty")
        if self.reader_version < 1 or self.writer_version < 1:
            raise LogConfigError("reader_version and writer_version must be >= 1")
        if self.tombstone_retention_ms < 0:
            raise LogConfigError("tombstone_retention_ms must be >= 0")
        if self.checkpoint_interval < 0:
            raise LogConfigError("checkpoint_interval must be >= 0")
        if self.state_cache_size < 0:
            raise LogConfigError("state_cache_size must be >= 0")

    def supported_versions(self) -> SupportedVersions:
        """Versions handed to the protocol gate for reads and commits."""
        return SupportedVersions(
            reader_version=self.reader_version, writer_version=self.writer_version
        )

    # Configuration loaders (env/TOML) with precedence: env > TOML > defaults.

    @classmethod
    def _apply_mapping(cls, base: LogSettings, cfg: dict[str, Any] | None) -> LogSettings:
        """Apply a loose config mapping onto LogSettings, returning a new instance."""
        if not isinstance(cfg, dict):
            return base

        s = base
        for key in _STR_KEYS + _INT_KEYS:
            if key not in cfg or isinstance(cfg[key], bool):
                continue
            try:
                value = cfg[key] if key in _STR_KEYS else int(cfg[key])
                if key in _STR_KEYS and not isinstance(value, str):
                    continue
                s = replace(s, **{key: value})
            except (TypeError, ValueError, LogConfigError):
                # Unparseable or out-of-range values keep the previous setting.
                pass
        return s

    @classmethod
    def from_env(cls, base: LogSettings | None = None, prefix: str = "TABLELOG_") -> LogSettings:
        """
        Build LogSettings from environment variables. Precedence is env > base (if provided) > defaults.

        Recognized variables:
            - TABLELOG_TABLE_ROOT
            - TABLELOG_LOG_DIR_NAME
            - TABLELOG_READER_VERSION
            - TABLELOG_WRITER_VERSION
            - TABLELOG_TOMBSTONE_RETENTION_MS
            - TABLELOG_CHECKPOINT_INTERVAL
            - TABLELOG_STATE_CACHE_SIZE
        """
        s = base or cls()
        mapping: dict[str, Any] = {}
        for key in _STR_KEYS + _INT_KEYS:
            v = os.getenv(prefix + key.upper())
            if v:
                mapping[key] = v
        return cls._apply_mapping(s, mapping)

    @classmethod
    def from_toml(cls, path: str | os.PathLike[str] | None = None) -> LogSettings:
        """
        Build LogSettings from a TOML file.

        Search order when `path` is None:
            1) ./tablelog.toml (with either top-level [log] or direct keys)
            2) ./pyproject.toml under [tool.tablelog.log]

        Returns defaults if no file is present or none of them parses.
        """
        s = cls()

        def _load_toml(p: Path) -> dict[str, Any] | None:
            try:
                with p.open("rb") as fh:
                    return tomllib.load(fh)
            except (OSError, tomllib.TOMLDecodeError):
                return None

        cand: list[Path] = []
        if path is not None:
            cand.append(Path(path))
        else:
            cand.append(Path.cwd() / "tablelog.toml")
            cand.append(Path.cwd() / "pyproject.toml")

        cfg: dict[str, Any] | None = None
        for p in cand:
            if not p.exists():
                continue
            data = _load_toml(p)
            if not isinstance(data, dict):
                continue
            if p.name == "pyproject.toml":
                tool = data.get("tool", {})
                cfg = tool.get("tablelog", {}).get("log", {}) if isinstance(tool, dict) else None
            elif isinstance(data.get("log"), dict):
                cfg = data["log"]
            else:
                cfg = data
            if cfg:
                break

        return cls._apply_mapping(s, cfg)

    @classmethod
    def load(cls, path: str | os.PathLike[str] | None = None) -> LogSettings:
        """
        Load LogSettings applying precedence: environment > TOML > defaults.

        Args:
            path: Optional explicit TOML path. If None, search defaults (tablelog.toml, pyproject.toml).

        Returns:
            LogSettings
        """
        s = cls.from_toml(path)
        s = cls.from_env(base=s)
        return s
