"""
WebSocket event models and validation.
"""

import time
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, ValidationError


class EventType(str, Enum):
    """Inbound event types."""
    CREATE = "create"
    JOIN = "join"
    START = "start"
    DRAW_DECK = "draw_deck"
    DRAW_DISCARD = "draw_discard"
    DISCARD = "discard"
    SKIP = "skip"
    REQUEST_STATE = "request_state"


class OutboundEventType(str, Enum):
    """Outbound event types."""
    JOIN_SUCCESS = "join_success"
    STATE_FULL = "state_full"
    STATE_PATCH = "state_patch"
    ERROR = "error"


class ErrorCode(str, Enum):
    """Error codes produced by the server itself (game errors carry their own codes)."""
    INVALID_EVENT = "INVALID_EVENT"
    ACTION_NOT_ALLOWED = "ACTION_NOT_ALLOWED"
    INTERNAL = "INTERNAL"


# Inbound event models
class BaseEvent(BaseModel):
    """Base event model."""
    type: EventType


class CreateEvent(BaseEvent):
    """Create a room and join it as host."""
    type: EventType = EventType.CREATE
    room_code: str = Field(..., min_length=1, max_length=20)
    name: str = Field(..., min_length=1, max_length=30)
    card_count: Optional[int] = Field(default=None, ge=1)


class JoinEvent(BaseEvent):
    """Join room event; a known player_id rejoins as that player."""
    type: EventType = EventType.JOIN
    room_code: str = Field(..., min_length=1, max_length=20)
    name: str = Field(..., min_length=1, max_length=30)
    player_id: Optional[str] = Field(default=None, min_length=1, max_length=64)


class StartEvent(BaseEvent):
    """Start game event (host only)."""
    type: EventType = EventType.START


class DrawDeckEvent(BaseEvent):
    """Draw the top card of the deck."""
    type: EventType = EventType.DRAW_DECK


class DrawDiscardEvent(BaseEvent):
    """Take a card from a player's discard pile."""
    type: EventType = EventType.DRAW_DISCARD
    from_player_id: str = Field(..., min_length=1)
    card_index: int = Field(..., ge=0)
    expected_card_id: Optional[int] = Field(default=None, ge=0)


class DiscardEvent(BaseEvent):
    """Discard a card and end the turn."""
    type: EventType = EventType.DISCARD
    card_id: int = Field(..., ge=0)
    delay_sec: Optional[float] = Field(default=None, ge=0)


class SkipEvent(BaseEvent):
    """Skip the active player (host only)."""
    type: EventType = EventType.SKIP


class RequestStateEvent(BaseEvent):
    """Request full state event."""
    type: EventType = EventType.REQUEST_STATE


# Union type for all inbound events
InboundEvent = Union[
    CreateEvent,
    JoinEvent,
    StartEvent,
    DrawDeckEvent,
    DrawDiscardEvent,
    DiscardEvent,
    SkipEvent,
    RequestStateEvent,
]


# Outbound event models
class JoinSuccessEvent(BaseModel):
    """Join success confirmation event."""
    type: OutboundEventType = OutboundEventType.JOIN_SUCCESS
    player_id: str
    room_code: str
    timestamp: float


class StateFullEvent(BaseModel):
    """Full state event."""
    type: OutboundEventType = OutboundEventType.STATE_FULL
    state: Dict[str, Any]
    timestamp: float


class PatchOperation(BaseModel):
    """JSON Patch operation."""
    op: str = Field(..., pattern="^(replace|add|remove)$")
    path: str
    value: Optional[Any] = None


class StatePatchEvent(BaseModel):
    """State patch event."""
    type: OutboundEventType = OutboundEventType.STATE_PATCH
    version: int
    ops: List[PatchOperation]
    timestamp: float


class ErrorEvent(BaseModel):
    """Error event."""
    type: OutboundEventType = OutboundEventType.ERROR
    code: str
    message: str
    timestamp: float


EVENT_MAP = {
    EventType.CREATE: CreateEvent,
    EventType.JOIN: JoinEvent,
    EventType.START: StartEvent,
    EventType.DRAW_DECK: DrawDeckEvent,
    EventType.DRAW_DISCARD: DrawDiscardEvent,
    EventType.DISCARD: DiscardEvent,
    EventType.SKIP: SkipEvent,
    EventType.REQUEST_STATE: RequestStateEvent,
}


def parse_inbound_event(data: Dict[str, Any]) -> InboundEvent:
    """
    Parse raw event data into appropriate event model.

    Args:
        data: Raw event data from WebSocket

    Returns:
        Parsed event model

    Raises:
        ValueError: If event type is invalid or data is malformed
    """
    if not isinstance(data, dict):
        raise ValueError("Event must be a JSON object")

    event_type = data.get("type")
    if not event_type:
        raise ValueError("Missing event type")

    try:
        event_type = EventType(event_type)
    except ValueError:
        raise ValueError(f"Invalid event type: {event_type}")

    try:
        return EVENT_MAP[event_type](**data)
    except ValidationError as e:
        raise ValueError(f"Invalid event data: {e}")


def create_error_event(code: str, message: str) -> ErrorEvent:
    """Create an error event."""
    return ErrorEvent(
        code=code.value if isinstance(code, ErrorCode) else code,
        message=message,
        timestamp=time.time()
    )


def create_join_success_event(player_id: str, room_code: str) -> JoinSuccessEvent:
    """Create a join success event."""
    return JoinSuccessEvent(
        player_id=player_id,
        room_code=room_code,
        timestamp=time.time()
    )


def create_state_full_event(state: Dict[str, Any]) -> StateFullEvent:
    """Create a full state event."""
    return StateFullEvent(
        state=state,
        timestamp=time.time()
    )


def create_state_patch_event(version: int, ops: List[Dict]) -> StatePatchEvent:
    """Create a state patch event."""
    return StatePatchEvent(
        version=version,
        ops=[PatchOperation(**op) for op in ops],
        timestamp=time.time()
    )
