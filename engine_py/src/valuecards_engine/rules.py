"""
Game configuration and validation.
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .constants import CARDS_PER_PLAYER


class GameConfig(BaseModel):
    """Configuration for game setup and the room service."""

    cards_per_player: int = Field(
        default=CARDS_PER_PLAYER,
        ge=1,
        le=20,
        description="Number of cards dealt to each player at game start"
    )
    default_card_count: int = Field(
        default=60,
        ge=1,
        description="Deck size used when the host does not pick one"
    )
    min_card_count: int = Field(
        default=1,
        ge=1,
        description="Smallest deck size a host may request"
    )
    max_card_count: int = Field(
        default=500,
        ge=1,
        description="Largest deck size a host may request"
    )
    max_players: int = Field(
        default=8,
        ge=1,
        le=32,
        description="Maximum number of players allowed in a room"
    )
    turn_timer_seconds: Optional[int] = Field(
        default=None,
        ge=5,
        le=600,
        description="Advisory per-turn timer shown to clients (None = no timer)"
    )
    max_transaction_retries: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Attempts for one read-compute-write cycle before giving up"
    )

    @field_validator('max_card_count')
    @classmethod
    def validate_max_card_count(cls, v, info):
        """Validate maximum card count doesn't undercut the minimum."""
        min_card_count = info.data.get('min_card_count', 1)
        if v < min_card_count:
            raise ValueError(f'max_card_count ({v}) must be >= min_card_count ({min_card_count})')
        return v

    def validate_card_count(self, card_count: int) -> bool:
        """Check if a requested deck size is allowed by this configuration."""
        return self.min_card_count <= card_count <= self.max_card_count

    def required_cards(self, player_count: int) -> int:
        """Cards needed to deal the opening hands."""
        return player_count * self.cards_per_player


# Default configuration instance
default_config = GameConfig()


def create_config(**overrides) -> GameConfig:
    """Create a GameConfig with optional overrides."""
    config_dict = default_config.model_dump()
    config_dict.update(overrides)
    return GameConfig(**config_dict)
