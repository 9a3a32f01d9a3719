"""
Replay engine: fold ordered version batches of actions into a TableState.

Responsibilities
- Decode a version's raw records into a VersionBatch, all-or-nothing.
- Apply batches in strictly increasing, gapless version order, actions in recorded order.
- Seed from a checkpoint state; replaying from a checkpoint equals replaying from version 0.

Reconciliation rules (per action, in log order)
- AddFile:    active_files[path] = add; tombstones.pop(path)
- RemoveFile: tombstones[path] = remove; active_files.pop(path)
- Metadata:   metadata = action (last write wins)
- Protocol:   protocol = action (last write wins)
- None:       no-op (record with no known envelope field)

Notes
- Pure and synchronous: the seed is never mutated, nothing is shared between
  calls, and no I/O happens here, so concurrent replays need no coordination.
- A gap or out-of-order batch raises VersionGapError before any of its actions apply.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from .actions import Action, AddFile, Metadata, Protocol, RemoveFile
from .errors import InvalidActionError, MalformedRecordError, VersionGapError
from .serde import decode
from .state import TableState
from .versioning import is_next_version

__all__ = [
    "VersionBatch",
    "decode_batch",
    "replay",
    "advance",
    "checkpoint_state",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VersionBatch:
    """
    Actions committed together as one log version.

    Attributes:
        version (int): Log version (>= 0).
        actions (tuple[Action | None, ...]): Decoded actions in recorded order;
            None entries are no-op records.
    """

    version: int
    actions: tuple[Action | None, ...] = ()


def decode_batch(version: int, records: Iterable[str | bytes | dict[str, Any]]) -> VersionBatch:
    """
    Decode every record of one version; a single bad record rejects the whole batch.

    Args:
        version (int): Log version the records belong to.
        records (Iterable): Raw JSON lines (or parsed envelopes) in recorded order.

    Returns:
        VersionBatch: Decoded batch.

    Raises:
        MalformedRecordError: If a record is not a JSON object (carries version and line).
        InvalidActionError: If a record's payload is invalid; the message names version and line.
    """
    actions: list[Action | None] = []
    for line, record in enumerate(records):
        try:
            actions.append(decode(record))
        except MalformedRecordError as exc:
            raise MalformedRecordError(str(exc), version=version, line=line) from exc
        except InvalidActionError as exc:
            raise InvalidActionError(f"{exc} (version {version}, record {line})") from exc
    return VersionBatch(version=version, actions=tuple(actions))


class _Fold:
    """Working copy of a state while batches are applied."""

    def __init__(self, seed: TableState) -> None:
        self.version = seed.version
        self.active: dict[str, AddFile] = dict(seed.active_files)
        self.tombstones: dict[str, RemoveFile] = dict(seed.tombstones)
        self.metadata = seed.metadata
        self.protocol = seed.protocol

    def apply_batch(self, batch: VersionBatch) -> None:
        if not is_next_version(batch.version, self.version):
            raise VersionGapError(expected=self.version + 1, actual=batch.version)
        for action in batch.actions:
            self.apply(action)
        self.version = batch.version
        logger.debug(
            "applied version %d (%d actions, %d active files)",
            batch.version,
            len(batch.actions),
            len(self.active),
        )

    def apply(self, action: Action | None) -> None:
        if action is None:
            return
        if isinstance(action, AddFile):
            self.active[action.path] = action
            self.tombstones.pop(action.path, None)
        elif isinstance(action, RemoveFile):
            self.tombstones[action.path] = action
            self.active.pop(action.path, None)
        elif isinstance(action, Metadata):
            self.metadata = action
        elif isinstance(action, Protocol):
            self.protocol = action
        else:
            raise TypeError(f"unknown action type {type(action).__name__}")

    def result(self) -> TableState:
        return TableState(
            version=self.version,
            active_files=self.active,
            tombstones=self.tombstones,
            metadata=self.metadata,
            protocol=self.protocol,
        )


def replay(
    seed: TableState | None,
    batches: Iterable[VersionBatch],
    *,
    start: int = 0,
) -> TableState:
    """
    Fold version batches into a TableState.

    Args:
        seed (TableState | None): State at the version before the first batch (e.g.,
            from a checkpoint). When None, replay starts from an empty state at
            version ``start - 1``.
        batches (Iterable[VersionBatch]): Batches in increasing version order.
        start (int): First expected version when no seed is given (default 0).

    Returns:
        TableState: State after the last batch; a fresh state equal to the seed when
            no batches are given.

    Raises:
        VersionGapError: If a batch's version is not exactly one past the current state.
        TypeError: If a batch holds something other than an action or None.

    Examples:
        >>> from tablelog.core.actions import Protocol
        >>> from tablelog.core.replay import VersionBatch, replay
        >>> replay(None, [VersionBatch(0, (Protocol(),))]).version
        0
    """
    initial = seed if seed is not None else TableState.empty(version=start - 1)
    fold = _Fold(initial)
    for batch in batches:
        fold.apply_batch(batch)
    return fold.result()


def advance(state: TableState, batch: VersionBatch) -> TableState:
    """Apply exactly one batch on top of ``state`` (incremental replay)."""
    return replay(state, [batch])


def checkpoint_state(actions: Sequence[Action | None], version: int) -> TableState:
    """
    Rebuild the state stored in a checkpoint taken at ``version``.

    Args:
        actions (Sequence[Action | None]): Decoded checkpoint records.
        version (int): Version the checkpoint was taken at.

    Returns:
        TableState: Seed suitable for ``replay`` of versions after ``version``.
    """
    fold = _Fold(TableState.empty(version=version))
    for action in actions:
        fold.apply(action)
    return fold.result()
