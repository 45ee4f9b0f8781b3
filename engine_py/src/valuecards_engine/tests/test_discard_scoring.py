"""
Tests for discard log reluctance scoring.
"""

import math
import random

import pytest

from valuecards_engine.discard_scoring import (
    delay_curve, score_discard_logs_sorted, sort_discard_logs, to_discard_scores
)
from valuecards_engine.errors import DataError, InvalidCardId, InvalidTurnIndex
from valuecards_engine.models import DiscardLogEntry, DiscardScore


def entry(card_id, turn_index, card_from="deck", delay_sec=0):
    return DiscardLogEntry(card_id=card_id, card_from=card_from, delay_sec=delay_sec, turn_index=turn_index)


def test_worked_example():
    """Deck card at rank 1 with the longest delay, pile card at rank 2."""
    logs = [
        {"cardFrom": "deck", "cardId": 1, "delaySec": 10, "turnIndex": 0},
        {"cardFrom": "discard", "cardId": 2, "delaySec": 0, "turnIndex": 1},
    ]
    scores = score_discard_logs_sorted(logs)
    assert scores == {1: pytest.approx(1.0), 2: pytest.approx(2.0)}


def test_delay_curve():
    assert delay_curve(0) == 0
    assert delay_curve(-0.5) == 0
    assert delay_curve(float("nan")) == 0
    assert delay_curve(1) == pytest.approx(1.0)
    assert delay_curve(0.25) == pytest.approx(0.625)
    # concave: above the diagonal inside (0, 1)
    assert delay_curve(0.5) > 0.5


def test_scores_ignore_input_order():
    logs = [
        entry(3, 0, delay_sec=4),
        entry(7, 2, card_from="discard"),
        entry(5, 4, delay_sec=9),
        entry(1, 6, delay_sec=1),
        entry(8, 8, card_from="discard"),
    ]
    expected = score_discard_logs_sorted(logs)

    rng = random.Random(11)
    for _ in range(10):
        shuffled = list(logs)
        rng.shuffle(shuffled)
        assert score_discard_logs_sorted(shuffled) == expected


def test_rank_formulas():
    logs = [
        entry(10, 0, delay_sec=5),       # rank 1, rate 0.5
        entry(11, 1, card_from="discard"),  # rank 2 of 3
        entry(12, 2, delay_sec=10),      # rank 3, rate 1
    ]
    scores = score_discard_logs_sorted(logs)

    assert scores[10] == pytest.approx(1 * (2.5 / 3))
    assert scores[11] == pytest.approx(4 / 3)
    assert scores[12] == pytest.approx(3.0)


@pytest.mark.parametrize("combine,expected", [
    ("sum", 1.0),
    ("max", 1.0),
    ("last", 0.0),
])
def test_combine_policies(combine, expected):
    """Card 3 scores 1 at rank 1 and 0 at rank 3."""
    logs = [
        entry(3, 0, delay_sec=10),
        entry(4, 1, delay_sec=10),
        entry(3, 2, delay_sec=0),
    ]
    scores = score_discard_logs_sorted(logs, combine=combine)

    assert scores[3] == pytest.approx(expected)
    assert scores[4] == pytest.approx(2.0)


def test_combine_sum_adds_every_occurrence():
    logs = [
        entry(3, 0, card_from="discard"),
        entry(3, 1, card_from="discard"),
    ]
    # ranks 1 and 2 out of 2: 1/2 + 4/2
    assert score_discard_logs_sorted(logs, combine="sum")[3] == pytest.approx(2.5)
    assert score_discard_logs_sorted(logs, combine="max")[3] == pytest.approx(2.0)


def test_unknown_combine_policy():
    with pytest.raises(ValueError):
        score_discard_logs_sorted([entry(1, 0)], combine="mean")


def test_empty_log():
    assert score_discard_logs_sorted([]) == {}


def test_zero_delays_give_zero_deck_scores():
    scores = score_discard_logs_sorted([entry(1, 0), entry(2, 1)])
    assert scores == {1: 0.0, 2: 0.0}


def test_bad_delays_count_as_zero():
    """Negative or non-finite delays neither score nor set the maximum."""
    logs = [
        entry(1, 0, delay_sec=-20),
        entry(2, 1, delay_sec=float("inf")),
        entry(3, 2, delay_sec=4),
    ]
    scores = score_discard_logs_sorted(logs)
    assert scores[1] == 0
    assert scores[2] == 0
    assert scores[3] == pytest.approx(3.0)


@pytest.mark.parametrize("bad_turn_index", [None, float("nan"), float("inf"), "later"])
def test_invalid_turn_index_raises(bad_turn_index):
    logs = [entry(1, 0), entry(2, bad_turn_index)]
    with pytest.raises(InvalidTurnIndex) as excinfo:
        score_discard_logs_sorted(logs)
    assert isinstance(excinfo.value, DataError)


def test_tolerant_sort_puts_missing_turn_index_last():
    """Entries without a turn index go last, in their original order."""
    logs = [
        entry(1, None, card_from="discard"),
        entry(2, float("nan"), card_from="discard"),
        entry(3, 0, card_from="discard"),
    ]
    ordered = sort_discard_logs(logs, allow_missing_turn_index=True)
    assert [e.card_id for e in ordered] == [3, 1, 2]

    scores = score_discard_logs_sorted(logs, allow_missing_turn_index=True)
    assert scores == {
        3: pytest.approx(1 / 3),
        1: pytest.approx(4 / 3),
        2: pytest.approx(3.0),
    }


def test_invalid_card_id_raises():
    with pytest.raises(InvalidCardId):
        score_discard_logs_sorted([entry("joker", 0)])
    with pytest.raises(InvalidCardId):
        score_discard_logs_sorted([entry(2.5, 0)])


def test_snake_case_mappings_are_accepted():
    logs = [{"card_id": 4, "card_from": "discard", "delay_sec": 0, "turn_index": 0}]
    assert score_discard_logs_sorted(logs) == {4: pytest.approx(1.0)}


def test_to_discard_scores():
    assert to_discard_scores({5: 0.5, 2: 1.5}) == [
        DiscardScore(card_id=2, score=1.5),
        DiscardScore(card_id=5, score=0.5),
    ]


def test_scores_are_finite_and_non_negative():
    rng = random.Random(99)
    for _ in range(50):
        logs = [
            entry(
                rng.randrange(20),
                rng.randrange(100),
                card_from=rng.choice(["deck", "discard"]),
                delay_sec=rng.choice([0, 0.5, 3, 30, -1]),
            )
            for _ in range(rng.randint(1, 15))
        ]
        for score in score_discard_logs_sorted(logs, combine=rng.choice(["sum", "max", "last"])).values():
            assert math.isfinite(score)
            assert score >= 0
