"""
Table facade for tablelog.io.

Binds LogSettings and a log store to snapshot/commit/checkpoint operations. All
reconciliation is delegated to tablelog.core.replay and every returned state or
new version passes the protocol gate in tablelog.core.versioning first.

Source of truth
- Actions and envelopes: tablelog.core.actions / tablelog.core.serde
- Replay and checkpoint seeding: tablelog.core.replay
- Protocol gate: tablelog.core.versioning (supported versions from LogSettings)

Notes
- Computed states are cached per version in a bounded LRU guarded by a lock.
  The fold itself runs outside the lock; states are immutable, so a cached
  state can be handed to several callers.
- Single-writer: commit() assumes no other process appends concurrently.
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from collections.abc import Sequence
from typing import Protocol as TypingProtocol

from tablelog.core.actions import Action, Metadata, Protocol
from tablelog.core.errors import IncompleteStateError
from tablelog.core.replay import VersionBatch, advance, checkpoint_state, decode_batch, replay
from tablelog.core.serde import to_json
from tablelog.core.state import TableState
from tablelog.core.versioning import check_read, check_write

from .config import LogSettings
from .errors import LogStoreError
from .log_store import LocalLogStore, LogStore

logger = logging.getLogger(__name__)


class WritableLogStore(LogStore, TypingProtocol):
    """LogStore that can also persist new versions and checkpoints."""

    def write_batch(self, version: int, lines: Sequence[str]) -> str: ...

    def write_checkpoint(self, version: int, lines: Sequence[str]) -> str: ...


class Table:
    """
    Facade over one table's transaction log.

    Args:
        settings (LogSettings): Layout, supported protocol versions, retention and cache size.
        store (WritableLogStore | None): Log store; defaults to LocalLogStore(settings).

    Examples:
        >>> from tablelog.core.actions import Metadata, Protocol
        >>> from tablelog.io import LogSettings, Table
        >>> table = Table(LogSettings(table_root="tbl"))  # doctest: +SKIP
        >>> table.commit([Protocol(), Metadata(id="t")])  # doctest: +SKIP
        0
    """

    def __init__(self, settings: LogSettings, store: WritableLogStore | None = None) -> None:
        self.settings = settings
        self.store: WritableLogStore = store if store is not None else LocalLogStore(settings)
        self._cache: OrderedDict[int, TableState] = OrderedDict()
        self._lock = threading.Lock()

    def latest_version(self) -> int:
        """Newest committed version, or -1 for an empty log."""
        versions = self.store.list_versions()
        return versions[-1] if versions else -1

    # ---------------------------------------------------------------------
    # Read
    # ---------------------------------------------------------------------
    def snapshot(self, version: int | None = None) -> TableState:
        """
        State of the table at ``version`` (latest when None), gated for reading.

        Raises:
            LogStoreError: If the table is empty or ``version`` was never committed.
            VersionGapError: If the store is missing an intermediate version.
            MalformedRecordError / InvalidActionError: If a record cannot be decoded.
            IncompleteStateError: If no Protocol action exists up to ``version``.
            UnsupportedProtocolError: If the table requires a newer reader.
        """
        state = self._state(version)
        check_read(state.require_protocol(), self.settings.supported_versions())
        return state

    def _state(self, version: int | None) -> TableState:
        target = self.latest_version() if version is None else version
        if target < 0:
            raise LogStoreError("table has no committed versions")
        cached = self._cache_get(target)
        if cached is not None:
            return cached
        state = self._load(target)
        self._cache_put(state)
        return state

    def _load(self, target: int) -> TableState:
        seed = self._nearest_cached(target)
        cp = self.store.latest_checkpoint(at_or_before=target)
        if cp is not None and (seed is None or cp > seed.version):
            records = self.store.read_checkpoint(cp)
            seed = checkpoint_state(decode_batch(cp, records).actions, cp)
        start = seed.version + 1 if seed is not None else 0
        versions = self.store.list_versions(start=start, end=target)
        logger.debug(
            "replaying versions %d..%d from %s",
            start,
            target,
            f"seed at {seed.version}" if seed is not None else "scratch",
        )
        batches = (decode_batch(v, self.store.read_batch(v)) for v in versions)
        state = replay(seed, batches)
        if state.version != target:
            raise LogStoreError(f"log version {target} not found (latest read {state.version})")
        return state

    # ---------------------------------------------------------------------
    # Write
    # ---------------------------------------------------------------------
    def commit(self, actions: Sequence[Action]) -> int:
        """
        Append ``actions`` as the next log version.

        Args:
            actions (Sequence[Action]): Actions in the order they must be replayed.

        Returns:
            int: The committed version.

        Raises:
            IncompleteStateError: If version 0 lacks a Protocol or Metadata action.
            UnsupportedProtocolError: If the current or a newly committed Protocol
                requires a newer writer.
            LogStoreError: If the version already exists (concurrent writer).
        """
        supported = self.settings.supported_versions()
        latest = self.latest_version()
        if latest < 0:
            if not any(isinstance(a, Protocol) for a in actions) or not any(
                isinstance(a, Metadata) for a in actions
            ):
                raise IncompleteStateError("version 0 must contain Protocol and Metadata actions")
            current = TableState.empty()
        else:
            current = self._state(latest)
            check_write(current.require_protocol(), supported)
        for action in actions:
            if isinstance(action, Protocol):
                check_write(action, supported)

        version = latest + 1
        new_state = advance(current, VersionBatch(version=version, actions=tuple(actions)))
        self.store.write_batch(version, [to_json(a) for a in actions])
        self._cache_put(new_state)
        logger.info("committed version %d (%d actions)", version, len(actions))

        interval = self.settings.checkpoint_interval
        if interval and version > 0 and version % interval == 0:
            self.checkpoint(version)
        return version

    def checkpoint(self, version: int | None = None, now_ms: int | None = None) -> int:
        """
        Write a checkpoint of the state at ``version`` (latest when None).

        Args:
            version (int | None): Version to checkpoint.
            now_ms (int | None): Current time in epoch milliseconds. When given,
                tombstones older than ``now_ms - tombstone_retention_ms`` are left out.

        Returns:
            int: The checkpointed version.
        """
        state = self._state(version)
        check_write(state.require_protocol(), self.settings.supported_versions())
        if now_ms is not None:
            state = state.expire_tombstones(now_ms - self.settings.tombstone_retention_ms)
        lines = [to_json(a) for a in state.to_actions()]
        self.store.write_checkpoint(state.version, lines)
        logger.info("wrote checkpoint at version %d (%d records)", state.version, len(lines))
        return state.version

    # ---------------------------------------------------------------------
    # State cache
    # ---------------------------------------------------------------------
    def _cache_get(self, version: int) -> TableState | None:
        with self._lock:
            state = self._cache.get(version)
            if state is not None:
                self._cache.move_to_end(version)
            return state

    def _cache_put(self, state: TableState) -> None:
        size = self.settings.state_cache_size
        if size <= 0:
            return
        with self._lock:
            self._cache[state.version] = state
            self._cache.move_to_end(state.version)
            while len(self._cache) > size:
                self._cache.popitem(last=False)

    def _nearest_cached(self, target: int) -> TableState | None:
        with self._lock:
            below = [v for v in self._cache if v <= target]
            return self._cache[max(below)] if below else None
