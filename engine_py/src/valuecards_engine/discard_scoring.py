"""
Reluctance scores from a player's discard log.

A card kept until late in the game, or held for a long time before being let
go, was costly for the player to part with. Ranks come from the chronological
order of discards; deck-drawn cards are weighted by deliberation time, cards
picked up from a pile by how late they were discarded.
"""

import math
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from .constants import COMBINE_LAST, COMBINE_MAX, COMBINE_POLICIES, COMBINE_SUM, FROM_DECK
from .errors import InvalidCardId, InvalidTurnIndex
from .models import CardId, DiscardLogEntry, DiscardScore

LogEntryLike = Union[DiscardLogEntry, Mapping[str, Any]]


def finite_number(value: Any) -> Optional[float]:
    """Return ``value`` as a float, or None if it is missing or not finite."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def coerce_card_id(value: Any) -> CardId:
    """Accept integral numbers (or numeric strings) as card ids."""
    number = finite_number(value)
    if number is None or not number.is_integer():
        raise InvalidCardId(f"Invalid card id: {value!r}")
    return int(number)


def delay_curve(delay_rate: float) -> float:
    """Concave map of [0, 1] onto [0, 1]; longer deliberation has diminishing returns."""
    if not math.isfinite(delay_rate) or delay_rate <= 0:
        return 0.0
    return (5 * delay_rate) / (4 * delay_rate + 1)


def _to_entry(entry: LogEntryLike) -> DiscardLogEntry:
    if isinstance(entry, DiscardLogEntry):
        return entry
    return DiscardLogEntry.from_dict(entry)


def sort_discard_logs(
    discard_logs: Iterable[LogEntryLike],
    allow_missing_turn_index: bool = False
) -> List[DiscardLogEntry]:
    """
    Sort log entries by turn index, ascending.

    Entries without a finite turn index are an error unless
    ``allow_missing_turn_index`` is set; then they go after every valid entry
    and keep their original relative order.
    """
    entries = [_to_entry(entry) for entry in discard_logs]

    if not allow_missing_turn_index:
        for entry in entries:
            if finite_number(entry.turn_index) is None:
                raise InvalidTurnIndex(
                    f"Invalid turnIndex {entry.turn_index!r} for card {entry.card_id!r}"
                )

    def sort_key(entry: DiscardLogEntry):
        turn_index = finite_number(entry.turn_index)
        if turn_index is None:
            return (1, 0.0)
        return (0, turn_index)

    # sorted() is stable, so equal keys keep insertion order
    return sorted(entries, key=sort_key)


def score_discard_logs_sorted(
    discard_logs: Iterable[LogEntryLike],
    combine: str = COMBINE_LAST,
    allow_missing_turn_index: bool = False
) -> Dict[CardId, float]:
    """
    Compute a reluctance score per card id from one player's discard log.

    Args:
        discard_logs: Entries in any order
        combine: How repeated card ids merge: "sum", "max" or "last"
        allow_missing_turn_index: Tolerate entries without a finite turn index

    Returns:
        Mapping of card id to score
    """
    if combine not in COMBINE_POLICIES:
        raise ValueError(f"Unknown combine policy: {combine}")

    ordered = sort_discard_logs(discard_logs, allow_missing_turn_index)
    if not ordered:
        return {}

    max_delay = 0.0
    for entry in ordered:
        delay = finite_number(entry.delay_sec)
        if delay is not None and delay > max_delay:
            max_delay = delay

    max_index = len(ordered)
    by_card_id: Dict[CardId, float] = {}

    for rank, entry in enumerate(ordered, start=1):
        if entry.card_from == FROM_DECK:
            delay = max(0.0, finite_number(entry.delay_sec) or 0.0)
            delay_rate = delay / max_delay if max_delay > 0 else 0.0
            score = rank * delay_curve(delay_rate)
        else:
            score = (rank * rank) / max_index

        card_id = coerce_card_id(entry.card_id)

        if card_id not in by_card_id:
            by_card_id[card_id] = score
        elif combine == COMBINE_SUM:
            by_card_id[card_id] += score
        elif combine == COMBINE_MAX:
            by_card_id[card_id] = max(by_card_id[card_id], score)
        else:
            by_card_id[card_id] = score

    return by_card_id


def to_discard_scores(scores: Mapping[CardId, float]) -> List[DiscardScore]:
    """Flatten a score mapping into a list, ordered by card id."""
    return [DiscardScore(card_id=card_id, score=score) for card_id, score in sorted(scores.items())]
