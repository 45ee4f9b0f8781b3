"""
Precondition checks for turn actions.

Every check reads only the given room snapshot and raises a named error,
so a failed action never yields a patch.
"""

from typing import List

from .constants import STATUS_PLAYING, STATUS_WAITING, TURN_PHASES
from .errors import (
    CardNotInHand, EmptyDeck, EmptyDiscardPile, GameNotPlaying, InvalidIndex,
    NotHost, NotYourTurn, WrongPhase
)
from .models import CardId, Room


def require_playing(room: Room) -> None:
    """Reject actions on rooms that are waiting or already finished."""
    if room.status != STATUS_PLAYING:
        raise GameNotPlaying(f"Game is not in progress (current: {room.status})")


def require_turn(room: Room, player_id: str) -> None:
    """Check that ``player_id`` is the active player."""
    if room.active_player_id != player_id:
        raise NotYourTurn(
            f"It's not your turn (current turn: {room.active_player_id})"
        )


def require_phase(room: Room, phase: str) -> None:
    if room.turn_phase != phase:
        raise WrongPhase(
            f"Action requires the {phase} phase (current: {room.turn_phase})"
        )


def require_host(room: Room, caller_id: str) -> None:
    if room.host_id != caller_id:
        raise NotHost("Only the host can do this")


def require_deck(room: Room) -> None:
    if not room.deck:
        raise EmptyDeck("The deck is empty")


def require_pile_index(room: Room, from_player_id: str, card_index: int) -> List[CardId]:
    """
    Check that a discard pile holds a card at ``card_index``.

    Returns:
        The pile as stored in the snapshot
    """
    pile = room.discards.get(from_player_id) or []
    if not pile:
        raise EmptyDiscardPile(f"Discard pile of {from_player_id} is empty")
    # negative indexes would silently address from the end
    if isinstance(card_index, bool) or not isinstance(card_index, int) \
            or card_index < 0 or card_index >= len(pile):
        raise InvalidIndex(
            f"Card index {card_index} is outside the pile (size {len(pile)})"
        )
    return pile


def require_card_in_hand(room: Room, player_id: str, card_id: CardId) -> List[CardId]:
    hand = room.hands.get(player_id) or []
    if card_id not in hand:
        raise CardNotInHand(f"Card {card_id} is not in your hand")
    return hand


def find_invariant_violations(room: Room) -> List[str]:
    """
    List the structural invariants a started room breaks (empty when consistent).

    Checks card conservation over deck, hands and discard piles, the turn
    order against the player set, and the pile-pickup bookkeeping.
    """
    problems = []
    if room.status == STATUS_WAITING:
        return problems

    cards = list(room.deck)
    for hand in room.hands.values():
        cards.extend(hand)
    for pile in room.discards.values():
        cards.extend(pile)
    if sorted(cards) != list(range(room.card_count)):
        problems.append("cards are duplicated or missing")

    if sorted(room.turn_order) != sorted(room.players):
        problems.append("turn order is not a permutation of the players")
    if room.active_player_id not in room.turn_order:
        problems.append("active player is not in the turn order")
    if room.turn_phase not in TURN_PHASES:
        problems.append(f"unknown turn phase {room.turn_phase}")

    for player_id, picked in room.picked_up.items():
        hand = room.hands.get(player_id, [])
        if any(card not in hand for card in picked):
            problems.append(f"picked-up cards of {player_id} are not all in hand")

    return problems
