"""
Tests for the versioned in-memory room store.
"""

import pytest

from valuecards_engine.errors import (
    InvalidSnapshot, NotYourTurn, RoomAlreadyExists, RoomNotFound, TransactionConflict
)
from valuecards_engine.store import InMemoryRoomStore


@pytest.fixture
def store():
    ticks = iter(range(100, 10_000))
    return InMemoryRoomStore(max_retries=3, clock=lambda: float(next(ticks)))


def test_create_and_get(store, make_room):
    created = store.create(make_room())

    assert created.version == 1
    assert created.updated_at == 100.0
    assert store.get("ROOM1") == created
    assert "ROOM1" in store


def test_create_duplicate_code(store, make_room):
    store.create(make_room())
    with pytest.raises(RoomAlreadyExists):
        store.create(make_room())


def test_get_missing_room(store):
    with pytest.raises(RoomNotFound):
        store.get("NOPE")
    with pytest.raises(RoomNotFound):
        store.transactionally("NOPE", lambda room: {"turn_index": 1})


def test_documents_are_camel_case(store, make_room):
    store.create(make_room())
    document = store.get_document("ROOM1")

    assert document["hostId"] == "a"
    assert document["activePlayerId"] == "a"
    assert document["discardLogs"] == {"a": [], "b": []}
    assert "host_id" not in document


def test_transaction_commits_and_bumps_version(store, make_room):
    store.create(make_room())

    room = store.transactionally("ROOM1", lambda room: {"turn_index": room.turn_index + 1})

    assert room.turn_index == 1
    assert room.version == 2
    assert store.get("ROOM1") == room


def test_empty_patch_does_not_commit(store, make_room):
    store.create(make_room())

    room = store.transactionally("ROOM1", lambda room: None)
    assert room.version == 1
    room = store.transactionally("ROOM1", lambda room: {})
    assert room.version == 1


def test_conflicting_write_is_retried(store, make_room):
    """A write landing between read and commit forces a re-run on fresh state."""
    store.create(make_room())
    seen_versions = []

    def bump(room):
        seen_versions.append(room.version)
        if len(seen_versions) == 1:
            store.transactionally("ROOM1", lambda inner: {"turn_index": inner.turn_index + 10})
        return {"turn_index": room.turn_index + 1}

    room = store.transactionally("ROOM1", bump)

    assert seen_versions == [1, 2]
    assert room.turn_index == 11
    assert room.version == 3


def test_retries_are_bounded(store, make_room):
    store.create(make_room())
    calls = []

    def always_conflicting(room):
        calls.append(room.version)
        store.transactionally("ROOM1", lambda inner: {"turn_index": inner.turn_index + 1})
        return {"turn_phase": "discard"}

    with pytest.raises(TransactionConflict):
        store.transactionally("ROOM1", always_conflicting)

    assert len(calls) == 3
    # Only the interfering writes landed
    assert store.get("ROOM1").turn_phase == "draw"
    assert store.get("ROOM1").turn_index == 3


def test_errors_from_transaction_propagate(store, make_room):
    store.create(make_room())
    calls = []

    def reject(room):
        calls.append(room)
        raise NotYourTurn("no")

    with pytest.raises(NotYourTurn):
        store.transactionally("ROOM1", reject)

    assert len(calls) == 1
    assert store.get("ROOM1").version == 1


def test_room_deleted_mid_transaction(store, make_room):
    store.create(make_room())

    def delete_then_patch(room):
        store.delete("ROOM1")
        return {"turn_index": 1}

    with pytest.raises(RoomNotFound):
        store.transactionally("ROOM1", delete_then_patch)


def test_invalid_document_is_rejected(store):
    store.put_document("BAD", {"code": "BAD", "status": "paused"})
    with pytest.raises(InvalidSnapshot):
        store.get("BAD")
