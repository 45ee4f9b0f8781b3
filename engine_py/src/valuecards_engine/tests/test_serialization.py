"""
Tests for room snapshots, sanitization and client diffs.
"""

import pytest

from valuecards_engine.diff import apply_patch, compute_diff, should_send_full_state
from valuecards_engine.errors import InvalidSnapshot
from valuecards_engine.models import DiscardLogEntry
from valuecards_engine.serialization import room_from_snapshot, room_to_dict, sanitize_state


def test_snapshot_round_trip(make_room):
    room = make_room(
        discards={"a": [12], "b": []},
        discard_logs={"a": [DiscardLogEntry(card_id=12, card_from="discard", delay_sec=2.5, turn_index=0)], "b": []},
        version=4,
    )
    assert room_from_snapshot(room_to_dict(room)) == room


def test_snapshot_accepts_stored_documents():
    """Stored documents are camelCase; missing optional fields get defaults."""
    room = room_from_snapshot({
        "code": "ROOM9",
        "hostId": "h",
        "status": "finished",
        "cardCount": 10,
        "players": {"h": {"name": "Host"}},
        "hands": {"h": [0, 1, 2, 3, 4]},
        "discardLogs": {"h": [{"cardId": 7, "cardFrom": "deck", "delaySec": 1, "turnIndex": 3.0}]},
    })

    assert room.host_id == "h"
    assert room.players["h"].name == "Host"
    assert room.discard_logs["h"][0] == DiscardLogEntry(card_id=7, card_from="deck", delay_sec=1, turn_index=3)
    assert room.picked_up == {}
    assert room.turn_phase == "draw"


@pytest.mark.parametrize("document", [
    {"hostId": "h"},
    {"code": "X", "hostId": "h", "status": "paused"},
    {"code": "X", "hostId": "h", "deck": ["ace"]},
    {"code": "X", "hostId": "h", "turnPhase": "trade"},
    {"code": "X", "hostId": "h", "discardLogs": {"h": [{"cardId": 1, "cardFrom": "hand"}]}},
])
def test_snapshot_rejects_malformed_documents(document):
    with pytest.raises(InvalidSnapshot):
        room_from_snapshot(document)


def test_sanitize_hides_other_hands(make_room):
    room = make_room(discard_logs={"a": [DiscardLogEntry(card_id=3)], "b": []})
    state = sanitize_state(room, "a")

    assert state["hand"] == [0, 1, 2, 3, 4]
    assert state["handCounts"] == {"a": 5, "b": 5}
    assert state["deckCount"] == 2
    assert "deck" not in state
    assert "hands" not in state
    assert "discardLogs" not in state


def test_sanitize_for_spectator(make_room):
    state = sanitize_state(make_room(), None)
    assert "hand" not in state


def test_sanitize_reveals_hands_when_finished(make_room):
    state = sanitize_state(make_room(status="finished", deck=[]), "b")
    assert state["hands"] == {"a": [0, 1, 2, 3, 4], "b": [5, 6, 7, 8, 9]}


def test_diff_only_contains_changed_fields(make_room):
    old = make_room()
    new = apply_patch(old, {"deck": [11], "hands": {"a": [0, 1, 2, 3, 4, 10], "b": [5, 6, 7, 8, 9]},
                            "turn_phase": "discard", "version": 2})

    ops = compute_diff(old, new, "a")
    paths = {op["path"] for op in ops}

    assert paths == {"/deckCount", "/handCounts", "/hand", "/turnPhase", "/version"}
    assert all(op["op"] == "replace" for op in ops)
    assert not should_send_full_state(ops)

    new_view = sanitize_state(new, "a")
    for op in ops:
        assert op["value"] == new_view[op["path"].lstrip("/")]


def test_diff_adds_revealed_hands_when_finished(make_room):
    old = make_room(deck=[])
    new = apply_patch(old, {"status": "finished"})

    ops = compute_diff(old, new, "b")

    assert {"op": "add", "path": "/hands", "value": {"a": [0, 1, 2, 3, 4], "b": [5, 6, 7, 8, 9]}} in ops
    assert {"op": "replace", "path": "/status", "value": "finished"} in ops


def test_diff_of_first_state_is_empty(make_room):
    assert compute_diff(None, make_room(), "a") == []


def test_apply_patch_rejects_unknown_fields(make_room):
    with pytest.raises(ValueError):
        apply_patch(make_room(), {"score": 1})


def test_apply_patch_copies_values(make_room):
    room = make_room()
    deck = [11]
    patched = apply_patch(room, {"deck": deck})
    deck.append(99)

    assert patched.deck == [11]
    assert room.deck == [10, 11]
