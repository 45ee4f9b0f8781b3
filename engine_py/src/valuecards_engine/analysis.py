"""
Post-game analysis for one player of a finished room.
"""

import logging
from typing import Optional

from .axis_scoring import AxisScoringOptions, compute_axis_scores
from .catalog import CardCatalog
from .constants import CARDS_PER_PLAYER, COMBINE_LAST, STATUS_FINISHED
from .discard_scoring import score_discard_logs_sorted, to_discard_scores
from .errors import GameNotFinished, PlayerNotFound
from .models import PlayerAnalysis, Room

logger = logging.getLogger(__name__)


def analyze_player(
    room: Room,
    player_id: str,
    catalog: CardCatalog,
    axis_options: Optional[AxisScoringOptions] = None,
    combine: str = COMBINE_LAST,
    allow_missing_turn_index: bool = False
) -> PlayerAnalysis:
    """
    Score a player's discards, then blend them with the final hand into axis scores.

    Reads the room only; the result is never written back into game fields.
    """
    if room.status != STATUS_FINISHED:
        raise GameNotFinished(f"Room {room.code} is not finished (current: {room.status})")
    player = room.players.get(player_id)
    if player is None:
        raise PlayerNotFound(f"Player {player_id} is not in room {room.code}")

    final_hand = list(room.hands.get(player_id, []))[:CARDS_PER_PLAYER]
    score_map = score_discard_logs_sorted(
        room.discard_logs.get(player_id, []),
        combine=combine,
        allow_missing_turn_index=allow_missing_turn_index,
    )
    discard_scores = to_discard_scores(score_map)
    axes = compute_axis_scores(final_hand, discard_scores, catalog, axis_options)

    logger.info(
        f"Analyzed {player_id} in room {room.code}: "
        + ", ".join(f"{axis}={result.score100}" for axis, result in axes.items())
    )

    return PlayerAnalysis(
        player_id=player_id,
        player_name=player.name,
        final_hand=final_hand,
        discard_scores=discard_scores,
        axes=axes,
    )
