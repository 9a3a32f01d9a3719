import pytest

from tablelog.core.actions import AddFile, Metadata, Protocol, RemoveFile
from tablelog.core.errors import IncompleteStateError
from tablelog.core.state import TableState


def make_state() -> TableState:
    adds = {
        p: AddFile(path=p, partition_values={}, size=s, modification_time=0, data_change=True)
        for p, s in [("b", 5), ("a", 7)]
    }
    tombs = {
        "old": RemoveFile(path="old", deletion_timestamp=100),
        "new": RemoveFile(path="new", deletion_timestamp=5_000),
        "undated": RemoveFile(path="undated"),
    }
    return TableState(
        version=3,
        active_files=adds,
        tombstones=tombs,
        metadata=Metadata(id="t"),
        protocol=Protocol(),
    )


def test_counts_and_sizes() -> None:
    state = make_state()
    assert state.num_files == 2
    assert state.size_in_bytes == 12


def test_to_actions_orders_checkpoint_records() -> None:
    actions = make_state().to_actions()

    assert actions[0] == Protocol()
    assert actions[1] == Metadata(id="t")
    assert [a.path for a in actions[2:4]] == ["a", "b"]
    assert [a.path for a in actions[4:]] == ["new", "old", "undated"]


def test_expire_tombstones_keeps_recent_ones() -> None:
    state = make_state()
    pruned = state.expire_tombstones(1_000)

    assert set(pruned.tombstones) == {"new"}
    assert pruned.active_files == state.active_files
    assert len(state.tombstones) == 3


def test_incomplete_state_is_reported() -> None:
    empty = TableState.empty()
    with pytest.raises(IncompleteStateError, match="Protocol"):
        empty.require_protocol()
    with pytest.raises(IncompleteStateError, match="Metadata"):
        empty.require_metadata()
    with pytest.raises(IncompleteStateError):
        empty.to_actions()


def test_fingerprint_tracks_content_and_version() -> None:
    state = make_state()
    assert state.fingerprint() == make_state().fingerprint()
    assert state.fingerprint() != state.expire_tombstones(1_000).fingerprint()
    assert state.fingerprint() != TableState(
        version=4,
        active_files=state.active_files,
        tombstones=state.tombstones,
        metadata=state.metadata,
        protocol=state.protocol,
    ).fingerprint()
