"""
Materialized table state produced by replaying the action log.

TableState is a derived value: it is never persisted as one record, but a
checkpoint stores it as a batch of actions (see ``TableState.to_actions``).

Notes:
    - Frozen dataclass; replay always builds fresh dicts, so a state handed to a
      caller is never mutated by later replays.
    - active_files and tombstones are keyed by path and disjoint: an AddFile
      clears the path's tombstone and a RemoveFile clears its active entry.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .actions import Action, AddFile, Metadata, Protocol, RemoveFile
from .errors import IncompleteStateError
from .hashing import hash_record
from .serde import encode

__all__ = ["TableState"]


@dataclass(frozen=True)
class TableState:
    """
    Table state as of one log version.

    Attributes:
        version (int): Last applied log version (-1 before version 0).
        active_files (dict[str, AddFile]): Live files by path.
        tombstones (dict[str, RemoveFile]): Logically deleted files by path, kept for
            the retention window.
        metadata (Metadata | None): Most recent Metadata in log order.
        protocol (Protocol | None): Most recent Protocol in log order.
    """

    version: int
    active_files: dict[str, AddFile] = field(default_factory=dict)
    tombstones: dict[str, RemoveFile] = field(default_factory=dict)
    metadata: Metadata | None = None
    protocol: Protocol | None = None

    @classmethod
    def empty(cls, version: int = -1) -> TableState:
        return cls(version=version)

    @property
    def num_files(self) -> int:
        return len(self.active_files)

    @property
    def size_in_bytes(self) -> int:
        return sum(a.size for a in self.active_files.values())

    def require_metadata(self) -> Metadata:
        if self.metadata is None:
            raise IncompleteStateError(f"no Metadata action found up to version {self.version}")
        return self.metadata

    def require_protocol(self) -> Protocol:
        if self.protocol is None:
            raise IncompleteStateError(f"no Protocol action found up to version {self.version}")
        return self.protocol

    def expire_tombstones(self, cutoff_ms: int) -> TableState:
        """
        Drop tombstones deleted before ``cutoff_ms``.

        Args:
            cutoff_ms (int): Epoch milliseconds; tombstones with
                ``del_timestamp < cutoff_ms`` are removed.

        Returns:
            TableState: New state; the receiver is unchanged.
        """
        kept = {p: r for p, r in self.tombstones.items() if r.del_timestamp >= cutoff_ms}
        return TableState(
            version=self.version,
            active_files=dict(self.active_files),
            tombstones=kept,
            metadata=self.metadata,
            protocol=self.protocol,
        )

    def to_actions(self) -> list[Action]:
        """
        Flatten the state into checkpoint records.

        Returns:
            list[Action]: Protocol, Metadata, one AddFile per active path and one
            RemoveFile per retained tombstone, paths in sorted order.

        Raises:
            IncompleteStateError: If Protocol or Metadata is missing.
        """
        out: list[Action] = [self.require_protocol(), self.require_metadata()]
        out.extend(self.active_files[p] for p in sorted(self.active_files))
        out.extend(self.tombstones[p] for p in sorted(self.tombstones))
        return out

    def fingerprint(self) -> str:
        """SHA-256 over the version and the canonical encoding of every action in the state."""
        records: list[dict] = []
        if self.protocol is not None:
            records.append(encode(self.protocol))
        if self.metadata is not None:
            records.append(encode(self.metadata))
        records.extend(encode(self.active_files[p]) for p in sorted(self.active_files))
        records.extend(encode(self.tombstones[p]) for p in sorted(self.tombstones))
        return hash_record({"version": self.version, "actions": records})
