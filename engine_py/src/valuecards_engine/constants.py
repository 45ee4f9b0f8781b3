"""Game constants"""

from typing import Dict, List

# Room status
STATUS_WAITING = "waiting"
STATUS_PLAYING = "playing"
STATUS_FINISHED = "finished"
ROOM_STATUSES = (STATUS_WAITING, STATUS_PLAYING, STATUS_FINISHED)

# Turn phases
PHASE_DRAW = "draw"
PHASE_DISCARD = "discard"
TURN_PHASES = (PHASE_DRAW, PHASE_DISCARD)

# Where a discarded card was acquired from
FROM_DECK = "deck"
FROM_DISCARD = "discard"
CARD_SOURCES = (FROM_DECK, FROM_DISCARD)

CARDS_PER_PLAYER = 5

# Discard score combine policies
COMBINE_SUM = "sum"
COMBINE_MAX = "max"
COMBINE_LAST = "last"
COMBINE_POLICIES = (COMBINE_SUM, COMBINE_MAX, COMBINE_LAST)

# Value axes; score100 = 100 means fully toward the left pole
AXES: List[str] = ["ES", "AC", "DW", "LI"]
LEFT_POLE: Dict[str, str] = {"ES": "E", "AC": "A", "DW": "D", "LI": "L"}
RIGHT_POLE: Dict[str, str] = {"ES": "S", "AC": "C", "DW": "W", "LI": "I"}
POLES = tuple(LEFT_POLE.values()) + tuple(RIGHT_POLE.values())
