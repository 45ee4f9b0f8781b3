"""
Room service: runs player actions through the turn engine inside store transactions.
"""

import logging
import random
from typing import Optional

from .analysis import analyze_player as _analyze
from .axis_scoring import AxisScoringOptions
from .catalog import CardCatalog
from .constants import STATUS_FINISHED, STATUS_WAITING
from .engine import (
    apply_discard_and_advance, apply_draw_from_deck, apply_draw_from_discard,
    apply_skip, apply_start_game
)
from .errors import GameAlreadyStarted, RoomFull
from .models import CardId, PlayerAnalysis, Room, RoomPlayer
from .rules import GameConfig, default_config
from .store import InMemoryRoomStore

logger = logging.getLogger(__name__)


def normalize_code(room_code: str) -> str:
    return room_code.strip().upper()


class RoomService:
    """Orchestrates room lifecycle and turn actions against a store."""

    def __init__(
        self,
        store: Optional[InMemoryRoomStore] = None,
        config: GameConfig = default_config,
        rng: Optional[random.Random] = None
    ):
        self.config = config
        self.store = store or InMemoryRoomStore(max_retries=config.max_transaction_retries)
        self.rng = rng

    def get_room(self, room_code: str) -> Room:
        return self.store.get(normalize_code(room_code))

    def create_room(
        self,
        room_code: str,
        host_id: str,
        host_name: str,
        card_count: Optional[int] = None
    ) -> Room:
        """Create a waiting room with the host as its first player."""
        code = normalize_code(room_code)
        if not code:
            raise ValueError("Room code must not be empty")
        card_count = self.config.default_card_count if card_count is None else card_count
        if not self.config.validate_card_count(card_count):
            raise ValueError(
                f"card_count must be between {self.config.min_card_count} "
                f"and {self.config.max_card_count} (got {card_count})"
            )

        room = Room(
            code=code,
            host_id=host_id,
            status=STATUS_WAITING,
            card_count=card_count,
            players={host_id: RoomPlayer(name=host_name, joined_at=self.store.clock())},
        )
        return self.store.create(room)

    def join_room(self, room_code: str, player_id: str, player_name: str) -> Room:
        """Add a player to a waiting room; rejoining only updates the name."""
        joined_at = self.store.clock()

        def join(room: Room):
            if player_id in room.players:
                if room.players[player_id].name == player_name:
                    return None
                players = dict(room.players)
                players[player_id] = RoomPlayer(name=player_name, joined_at=room.players[player_id].joined_at)
                return {'players': players}
            if room.status != STATUS_WAITING:
                raise GameAlreadyStarted(f"Room {room.code} is no longer accepting players")
            if len(room.players) >= self.config.max_players:
                raise RoomFull(f"Room {room.code} is full")
            players = dict(room.players)
            players[player_id] = RoomPlayer(name=player_name, joined_at=joined_at)
            return {'players': players}

        room = self.store.transactionally(normalize_code(room_code), join)
        logger.info(f"Player {player_id} ({player_name}) joined room {room.code}")
        return room

    def start_game(self, room_code: str, caller_id: str) -> Room:
        started_at = self.store.clock()

        def start(room: Room):
            patch = apply_start_game(room, caller_id, self.config, self.rng)
            patch['started_at'] = started_at
            return patch

        room = self.store.transactionally(normalize_code(room_code), start)
        logger.info(
            f"Game started in room {room.code} with {len(room.turn_order)} players, "
            f"{len(room.deck)} cards left in the deck"
        )
        return room

    def draw_from_deck(self, room_code: str, player_id: str) -> Room:
        return self.store.transactionally(
            normalize_code(room_code),
            lambda room: apply_draw_from_deck(room, player_id),
        )

    def draw_from_discard(
        self,
        room_code: str,
        player_id: str,
        from_player_id: str,
        card_index: int,
        expected_card_id: Optional[CardId] = None
    ) -> Room:
        return self.store.transactionally(
            normalize_code(room_code),
            lambda room: apply_draw_from_discard(
                room, player_id, from_player_id, card_index, expected_card_id
            ),
        )

    def discard_card(
        self,
        room_code: str,
        player_id: str,
        card_id: CardId,
        delay_sec: Optional[float] = None
    ) -> Room:
        room = self.store.transactionally(
            normalize_code(room_code),
            lambda room: apply_discard_and_advance(room, player_id, card_id, delay_sec),
        )
        if room.status == STATUS_FINISHED:
            logger.info(f"Game finished in room {room.code} after {room.turn_index} turns")
        return room

    def skip_player(self, room_code: str, caller_id: str) -> Room:
        skipped = {}

        def skip(room: Room):
            skipped['player_id'] = room.active_player_id
            return apply_skip(room, caller_id)

        room = self.store.transactionally(normalize_code(room_code), skip)
        logger.info(f"Host skipped {skipped.get('player_id')} in room {room.code}")
        return room

    def analyze_player(
        self,
        room_code: str,
        player_id: str,
        catalog: CardCatalog,
        axis_options: Optional[AxisScoringOptions] = None
    ) -> PlayerAnalysis:
        """Analyze one player over a read-only snapshot of a finished room."""
        return _analyze(self.get_room(room_code), player_id, catalog, axis_options)
