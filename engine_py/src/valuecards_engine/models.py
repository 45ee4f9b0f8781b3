"""Game models and data structures"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional

CardId = int
RoomStatus = Literal['waiting', 'playing', 'finished']
TurnPhase = Literal['draw', 'discard']
CardFrom = Literal['deck', 'discard']

# Changed Room fields only, keyed by Room attribute name
RoomPatch = Dict[str, Any]


@dataclass
class RoomPlayer:
    name: str
    joined_at: Optional[float] = None


@dataclass
class DiscardLogEntry:
    card_id: CardId
    card_from: CardFrom = 'deck'
    delay_sec: float = 0
    turn_index: Optional[float] = None  # may be missing in stored logs

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DiscardLogEntry':
        """Build an entry from a stored mapping (camelCase or snake_case keys)."""
        def pick(camel: str, snake: str, default=None):
            if camel in data:
                return data[camel]
            return data.get(snake, default)

        return cls(
            card_id=pick('cardId', 'card_id'),
            card_from=pick('cardFrom', 'card_from', 'deck'),
            delay_sec=pick('delaySec', 'delay_sec', 0),
            turn_index=pick('turnIndex', 'turn_index'),
        )


@dataclass
class Room:
    code: str
    host_id: str
    status: RoomStatus = 'waiting'
    card_count: int = 0
    players: Dict[str, RoomPlayer] = field(default_factory=dict)
    deck: List[CardId] = field(default_factory=list)  # index 0 is the top
    hands: Dict[str, List[CardId]] = field(default_factory=dict)
    discards: Dict[str, List[CardId]] = field(default_factory=dict)  # last element is the top
    discard_logs: Dict[str, List[DiscardLogEntry]] = field(default_factory=dict)
    picked_up: Dict[str, List[CardId]] = field(default_factory=dict)  # hand cards taken from a pile
    turn_order: List[str] = field(default_factory=list)
    active_player_id: Optional[str] = None
    turn_index: int = 0
    turn_phase: TurnPhase = 'draw'
    turn_timer_seconds: Optional[int] = None
    version: int = 0
    started_at: Optional[float] = None
    updated_at: Optional[float] = None


@dataclass
class DiscardScore:
    card_id: CardId
    score: float


@dataclass
class AxisBreakdown:
    base_axis: float
    base_abs: float
    aux_axis: float
    aux_abs: float
    total_axis: float
    total_abs: float


@dataclass
class AxisResult:
    axis: str
    score100: int  # 100 = left pole, 0 = right pole
    ratio: float  # -1..+1, positive leans to the left pole
    confidence: float  # 0..1
    breakdown: AxisBreakdown


@dataclass
class PlayerAnalysis:
    player_id: str
    player_name: str
    final_hand: List[CardId]
    discard_scores: List[DiscardScore]
    axes: Dict[str, AxisResult]
