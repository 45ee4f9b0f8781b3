"""
State serialization and sanitization utilities.

Rooms are stored as loosely-typed camelCase documents. They are validated
and converted into the typed Room as soon as they are read, so the engine
never sees raw store data.
"""

from dataclasses import asdict
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from .errors import InvalidSnapshot
from .models import DiscardLogEntry, PlayerAnalysis, Room, RoomPlayer


class _SnapshotModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PlayerSnapshot(_SnapshotModel):
    name: str
    joined_at: Optional[float] = None


class DiscardLogSnapshot(_SnapshotModel):
    card_id: int
    card_from: Literal['deck', 'discard'] = 'deck'
    delay_sec: float = 0
    turn_index: Optional[float] = None


class RoomSnapshot(_SnapshotModel):
    code: str = Field(..., min_length=1)
    host_id: str
    status: Literal['waiting', 'playing', 'finished'] = 'waiting'
    card_count: int = Field(default=0, ge=0)
    players: Dict[str, PlayerSnapshot] = Field(default_factory=dict)
    deck: List[int] = Field(default_factory=list)
    hands: Dict[str, List[int]] = Field(default_factory=dict)
    discards: Dict[str, List[int]] = Field(default_factory=dict)
    discard_logs: Dict[str, List[DiscardLogSnapshot]] = Field(default_factory=dict)
    picked_up: Dict[str, List[int]] = Field(default_factory=dict)
    turn_order: List[str] = Field(default_factory=list)
    active_player_id: Optional[str] = None
    turn_index: int = Field(default=0, ge=0)
    turn_phase: Literal['draw', 'discard'] = 'draw'
    turn_timer_seconds: Optional[int] = None
    version: int = Field(default=0, ge=0)
    started_at: Optional[float] = None
    updated_at: Optional[float] = None


def _turn_index_out(value: Optional[float]):
    if value is not None and float(value).is_integer():
        return int(value)
    return value


def room_from_snapshot(data: Dict[str, Any]) -> Room:
    """
    Validate a stored room document and convert it into a Room.

    Raises:
        InvalidSnapshot: If the document does not match the room schema
    """
    try:
        snapshot = RoomSnapshot.model_validate(data)
    except ValidationError as e:
        raise InvalidSnapshot(f"Invalid room snapshot: {e}")

    return Room(
        code=snapshot.code,
        host_id=snapshot.host_id,
        status=snapshot.status,
        card_count=snapshot.card_count,
        players={
            player_id: RoomPlayer(name=player.name, joined_at=player.joined_at)
            for player_id, player in snapshot.players.items()
        },
        deck=list(snapshot.deck),
        hands={player_id: list(cards) for player_id, cards in snapshot.hands.items()},
        discards={player_id: list(cards) for player_id, cards in snapshot.discards.items()},
        discard_logs={
            player_id: [
                DiscardLogEntry(
                    card_id=entry.card_id,
                    card_from=entry.card_from,
                    delay_sec=entry.delay_sec,
                    turn_index=_turn_index_out(entry.turn_index),
                )
                for entry in entries
            ]
            for player_id, entries in snapshot.discard_logs.items()
        },
        picked_up={player_id: list(cards) for player_id, cards in snapshot.picked_up.items()},
        turn_order=list(snapshot.turn_order),
        active_player_id=snapshot.active_player_id,
        turn_index=snapshot.turn_index,
        turn_phase=snapshot.turn_phase,
        turn_timer_seconds=snapshot.turn_timer_seconds,
        version=snapshot.version,
        started_at=snapshot.started_at,
        updated_at=snapshot.updated_at,
    )


def log_entry_to_dict(entry: DiscardLogEntry) -> Dict[str, Any]:
    return {
        "cardId": entry.card_id,
        "cardFrom": entry.card_from,
        "delaySec": entry.delay_sec,
        "turnIndex": entry.turn_index,
    }


def room_to_dict(room: Room) -> Dict[str, Any]:
    """Convert a Room into its stored camelCase document form."""
    return {
        "code": room.code,
        "hostId": room.host_id,
        "status": room.status,
        "cardCount": room.card_count,
        "players": {
            player_id: {"name": player.name, "joinedAt": player.joined_at}
            for player_id, player in room.players.items()
        },
        "deck": list(room.deck),
        "hands": {player_id: list(cards) for player_id, cards in room.hands.items()},
        "discards": {player_id: list(cards) for player_id, cards in room.discards.items()},
        "discardLogs": {
            player_id: [log_entry_to_dict(entry) for entry in entries]
            for player_id, entries in room.discard_logs.items()
        },
        "pickedUp": {player_id: list(cards) for player_id, cards in room.picked_up.items()},
        "turnOrder": list(room.turn_order),
        "activePlayerId": room.active_player_id,
        "turnIndex": room.turn_index,
        "turnPhase": room.turn_phase,
        "turnTimerSeconds": room.turn_timer_seconds,
        "version": room.version,
        "startedAt": room.started_at,
        "updatedAt": room.updated_at,
    }


def sanitize_state(room: Room, viewer_id: Optional[str] = None) -> Dict[str, Any]:
    """
    Sanitize room state for transmission to clients.

    Args:
        room: Room state to sanitize
        viewer_id: ID of the player viewing the state (to show their cards)

    Returns:
        Sanitized state dictionary safe for JSON transmission
    """
    sanitized = {
        "code": room.code,
        "hostId": room.host_id,
        "status": room.status,
        "cardCount": room.card_count,
        "version": room.version,
        "players": {
            player_id: {"name": player.name, "joinedAt": player.joined_at}
            for player_id, player in room.players.items()
        },
        "deckCount": len(room.deck),
        "handCounts": {player_id: len(cards) for player_id, cards in room.hands.items()},
        "discards": {player_id: list(cards) for player_id, cards in room.discards.items()},
        "turnOrder": list(room.turn_order),
        "activePlayerId": room.active_player_id,
        "turnIndex": room.turn_index,
        "turnPhase": room.turn_phase,
        "turnTimerSeconds": room.turn_timer_seconds,
    }

    # Show full hand only to the viewer
    if viewer_id is not None and viewer_id in room.hands:
        sanitized["hand"] = list(room.hands[viewer_id])

    # Everyone sees the full final hands once the game is over
    if room.status == "finished":
        sanitized["hands"] = {player_id: list(cards) for player_id, cards in room.hands.items()}

    return sanitized


def analysis_to_dict(analysis: PlayerAnalysis) -> Dict[str, Any]:
    """Serialize an analysis result for API responses."""
    return asdict(analysis)
