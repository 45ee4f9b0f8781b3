"""Turn engine: pure state transitions for a room.

Each ``apply_*`` function validates its preconditions against the given room
snapshot and returns a patch holding only the fields it changes. The input
room is never mutated.
"""

import random
from typing import Dict, List, Optional

from .constants import (
    FROM_DECK, FROM_DISCARD, PHASE_DISCARD, PHASE_DRAW, STATUS_FINISHED,
    STATUS_PLAYING, STATUS_WAITING
)
from .dealer import create_initial_game_state
from .errors import GameAlreadyStarted, InsufficientCards, InvalidIndex, NotYourTurn
from .models import CardId, DiscardLogEntry, Room, RoomPatch
from .rules import GameConfig, default_config
from .validate import (
    require_card_in_hand, require_deck, require_host, require_phase,
    require_pile_index, require_playing, require_turn
)


def _copy_piles(piles: Dict[str, List[CardId]]) -> Dict[str, List[CardId]]:
    return {player_id: list(cards) for player_id, cards in piles.items()}


def _next_player(room: Room) -> Optional[str]:
    """Player after the active one in turn order, wrapping around."""
    order = room.turn_order
    if not order:
        return None
    if room.active_player_id not in order:
        return order[0]
    return order[(order.index(room.active_player_id) + 1) % len(order)]


def apply_start_game(
    room: Room,
    caller_id: str,
    config: GameConfig = default_config,
    rng: Optional[random.Random] = None
) -> RoomPatch:
    """Deal the opening hands and move the room from waiting to playing."""
    if room.status != STATUS_WAITING:
        raise GameAlreadyStarted(f"Game cannot be started (current: {room.status})")
    require_host(room, caller_id)

    # the deck keeps at least one card after dealing
    needed = config.required_cards(len(room.players))
    if room.players and room.card_count <= needed:
        raise InsufficientCards(
            f"{len(room.players)} players need more than {needed} cards "
            f"(room has {room.card_count})"
        )

    patch = create_initial_game_state(room, config.cards_per_player, rng)
    patch['status'] = STATUS_PLAYING
    patch['turn_timer_seconds'] = config.turn_timer_seconds
    return patch


def apply_draw_from_deck(room: Room, player_id: str) -> RoomPatch:
    """Move the top card of the deck into the active player's hand."""
    require_playing(room)
    require_turn(room, player_id)
    require_phase(room, PHASE_DRAW)
    require_deck(room)

    card, rest = room.deck[0], list(room.deck[1:])
    hands = _copy_piles(room.hands)
    hands[player_id] = hands.get(player_id, []) + [card]

    return {
        'deck': rest,
        'hands': hands,
        'turn_phase': PHASE_DISCARD,
    }


def apply_draw_from_discard(
    room: Room,
    player_id: str,
    from_player_id: str,
    card_index: int,
    expected_card_id: Optional[CardId] = None
) -> RoomPatch:
    """
    Take the card at ``card_index`` of a discard pile into the active player's hand.

    Any position in the pile may be taken, not just the top. When
    ``expected_card_id`` is given the card at that index must match it, which
    catches indexes computed against an older view of the pile.
    """
    require_playing(room)
    require_turn(room, player_id)
    require_phase(room, PHASE_DRAW)
    pile = require_pile_index(room, from_player_id, card_index)

    card = pile[card_index]
    if expected_card_id is not None and card != expected_card_id:
        raise InvalidIndex(
            f"Card at index {card_index} is {card}, expected {expected_card_id}"
        )

    discards = _copy_piles(room.discards)
    del discards[from_player_id][card_index]

    hands = _copy_piles(room.hands)
    hands[player_id] = hands.get(player_id, []) + [card]

    picked_up = _copy_piles(room.picked_up)
    picked_up[player_id] = picked_up.get(player_id, []) + [card]

    return {
        'discards': discards,
        'hands': hands,
        'picked_up': picked_up,
        'turn_phase': PHASE_DISCARD,
    }


def apply_discard_and_advance(
    room: Room,
    player_id: str,
    card_id: CardId,
    delay_sec: Optional[float] = None
) -> RoomPatch:
    """
    Discard one card, log it, and pass the turn to the next player.

    The game finishes when the deck was already empty at the moment of the
    discard.
    """
    require_playing(room)
    require_turn(room, player_id)
    require_phase(room, PHASE_DISCARD)
    hand = require_card_in_hand(room, player_id, card_id)

    hands = _copy_piles(room.hands)
    new_hand = list(hand)
    new_hand.remove(card_id)
    hands[player_id] = new_hand

    discards = _copy_piles(room.discards)
    discards[player_id] = discards.get(player_id, []) + [card_id]

    picked_up = _copy_piles(room.picked_up)
    held_from_pile = picked_up.get(player_id, [])
    if card_id in held_from_pile:
        card_from = FROM_DISCARD
        held_from_pile = list(held_from_pile)
        held_from_pile.remove(card_id)
        picked_up[player_id] = held_from_pile
    else:
        card_from = FROM_DECK

    entry = DiscardLogEntry(
        card_id=card_id,
        card_from=card_from,
        delay_sec=delay_sec if delay_sec is not None else 0,
        turn_index=room.turn_index,
    )
    discard_logs = {pid: list(entries) for pid, entries in room.discard_logs.items()}
    discard_logs[player_id] = discard_logs.get(player_id, []) + [entry]

    return {
        'hands': hands,
        'discards': discards,
        'discard_logs': discard_logs,
        'picked_up': picked_up,
        'active_player_id': _next_player(room),
        'turn_index': room.turn_index + 1,
        'turn_phase': PHASE_DRAW,
        'status': STATUS_FINISHED if not room.deck else room.status,
    }


def apply_skip(room: Room, caller_id: str) -> RoomPatch:
    """Host-only: pass the turn of a stalled player without moving any card."""
    require_playing(room)
    require_host(room, caller_id)
    if not room.active_player_id:
        raise NotYourTurn("No player is active")

    return {
        'active_player_id': _next_player(room),
        'turn_index': room.turn_index + 1,
        'turn_phase': PHASE_DRAW,
    }
