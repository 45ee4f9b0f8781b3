"""
Shared fixtures for the engine tests.
"""

import random

import pytest

from valuecards_engine.catalog import CardCatalog
from valuecards_engine.constants import PHASE_DRAW
from valuecards_engine.diff import apply_patch
from valuecards_engine.engine import (
    apply_discard_and_advance, apply_draw_from_deck, apply_draw_from_discard
)
from valuecards_engine.models import Room, RoomPlayer


@pytest.fixture
def make_room():
    """Factory for a two-player room in play: a to move, two cards left in the deck."""
    def _make_room(**overrides):
        fields = dict(
            code="ROOM1",
            host_id="a",
            status="playing",
            card_count=12,
            players={"a": RoomPlayer(name="Alice"), "b": RoomPlayer(name="Bob")},
            deck=[10, 11],
            hands={"a": [0, 1, 2, 3, 4], "b": [5, 6, 7, 8, 9]},
            discards={"a": [], "b": []},
            discard_logs={"a": [], "b": []},
            picked_up={"a": [], "b": []},
            turn_order=["a", "b"],
            active_player_id="a",
            turn_index=0,
            turn_phase=PHASE_DRAW,
        )
        fields.update(overrides)
        return Room(**fields)
    return _make_room


def build_catalog(card_count: int, seed: int = 0) -> CardCatalog:
    """Random but reproducible axis weights for every card id."""
    rng = random.Random(seed)
    axes = [("ES", "E", "S"), ("AC", "A", "C"), ("DW", "D", "W"), ("LI", "L", "I")]
    data = {}
    for card_id in range(card_count):
        scores = []
        for axis, left, right in rng.sample(axes, rng.randint(1, 2)):
            scores.append({
                "axis": axis,
                "pole": rng.choice([left, right]),
                "score": rng.randint(1, 10),
            })
        data[card_id] = {"japanese": f"card-{card_id}", "english": f"Card {card_id}", "axisScores": scores}
    return CardCatalog.from_dict(data)


@pytest.fixture
def random_catalog():
    return build_catalog


def choose_and_play(room: Room, rng: random.Random) -> Room:
    """Play one full turn for the active player with random legal choices."""
    player_id = room.active_player_id
    piles = [(pid, pile) for pid, pile in room.discards.items() if pile]

    if room.deck and (not piles or rng.random() < 0.6):
        room = apply_patch(room, apply_draw_from_deck(room, player_id))
    elif piles:
        from_player_id, pile = rng.choice(piles)
        index = rng.randrange(len(pile))
        room = apply_patch(room, apply_draw_from_discard(room, player_id, from_player_id, index))
    else:
        raise AssertionError("no legal draw")

    card_id = rng.choice(room.hands[player_id])
    delay = rng.choice([None, 0, 1.5, 4, 12])
    return apply_patch(room, apply_discard_and_advance(room, player_id, card_id, delay))


@pytest.fixture
def play_turn():
    return choose_and_play
