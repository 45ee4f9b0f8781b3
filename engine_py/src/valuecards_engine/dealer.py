"""
Card shuffling and dealing utilities.
"""

import random
from typing import Dict, List, Optional, Sequence, Tuple

from .constants import CARDS_PER_PLAYER, PHASE_DRAW
from .errors import InsufficientCards, NoPlayers
from .models import CardId, Room, RoomPatch


def create_shuffled_deck(card_count: int, rng: Optional[random.Random] = None) -> List[CardId]:
    """
    Create a shuffled deck holding every card id in ``range(card_count)``.

    Args:
        card_count: Number of cards in the deck
        rng: Optional random source for deterministic shuffling

    Returns:
        A uniformly random permutation of the card ids
    """
    if card_count < 0:
        raise ValueError(f"card_count must be >= 0 (got {card_count})")

    deck = list(range(card_count))
    # random.Random.shuffle is an in-place Fisher-Yates shuffle
    (rng or random).shuffle(deck)
    return deck


def deal_initial_hands(
    player_ids: Sequence[str],
    deck: Sequence[CardId],
    cards_per_player: int
) -> Tuple[Dict[str, List[CardId]], List[CardId]]:
    """
    Deal opening hands from the top of the deck.

    Args:
        player_ids: Players to deal to, in dealing order
        deck: Shuffled deck, index 0 is the top
        cards_per_player: Cards each player receives

    Returns:
        Tuple of (hands by player id, remaining deck)
    """
    needed = len(player_ids) * cards_per_player
    if len(deck) < needed:
        raise InsufficientCards(
            f"Need {needed} cards for {len(player_ids)} players but the deck has {len(deck)}"
        )

    hands = {}
    position = 0
    for player_id in player_ids:
        hands[player_id] = list(deck[position:position + cards_per_player])
        position += cards_per_player

    return hands, list(deck[position:])


def create_initial_game_state(
    room: Room,
    cards_per_player: int = CARDS_PER_PLAYER,
    rng: Optional[random.Random] = None
) -> RoomPatch:
    """
    Build the opening deck, hands and turn fields for a room.

    Players are seated in id order and the first of them takes the first turn.
    """
    player_ids = sorted(room.players.keys())
    if not player_ids:
        raise NoPlayers("Cannot start a game without players")

    deck = create_shuffled_deck(room.card_count, rng)
    hands, remaining_deck = deal_initial_hands(player_ids, deck, cards_per_player)

    return {
        'deck': remaining_deck,
        'hands': hands,
        'discards': {player_id: [] for player_id in player_ids},
        'discard_logs': {player_id: [] for player_id in player_ids},
        'picked_up': {player_id: [] for player_id in player_ids},
        'turn_order': player_ids,
        'active_player_id': player_ids[0],
        'turn_index': 0,
        'turn_phase': PHASE_DRAW,
    }
