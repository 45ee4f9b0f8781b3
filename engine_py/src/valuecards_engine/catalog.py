"""
Per-card reference data: display names and value-axis weights.

The catalog content is supplied from outside (a JSON file keyed by card id);
this module only validates and looks it up.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import orjson
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import AXES, LEFT_POLE, POLES
from .models import CardId

logger = logging.getLogger(__name__)


class CardAxisScore(BaseModel):
    """How strongly a card pulls toward one pole of an axis."""
    axis: str
    pole: str
    score: float = Field(..., allow_inf_nan=False)

    @field_validator('axis')
    @classmethod
    def validate_axis(cls, v):
        if v not in AXES:
            raise ValueError(f'Unknown axis: {v}')
        return v

    @field_validator('pole')
    @classmethod
    def validate_pole(cls, v):
        if v not in POLES:
            raise ValueError(f'Unknown pole: {v}')
        return v


class CardInfo(BaseModel):
    """Reference entry for one card."""
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., alias='japanese')
    english: str = ""
    axis_scores: List[CardAxisScore] = Field(default_factory=list, alias='axisScores')

    def signed_contribution(self, axis: str) -> float:
        """Net pull on ``axis``: positive toward the left pole, negative toward the right."""
        left = LEFT_POLE[axis]
        value = 0.0
        for entry in self.axis_scores:
            if entry.axis != axis or not entry.score:
                continue
            value += entry.score if entry.pole == left else -entry.score
        return value


class CardCatalog:
    """Lookup of CardInfo by card id."""

    def __init__(self, cards: Mapping[CardId, CardInfo]):
        self.cards: Dict[CardId, CardInfo] = dict(cards)

    def __contains__(self, card_id) -> bool:
        return card_id in self.cards

    def __len__(self) -> int:
        return len(self.cards)

    def get(self, card_id: CardId) -> Optional[CardInfo]:
        return self.cards.get(card_id)

    def display_name(self, card_id: CardId) -> str:
        card = self.cards.get(card_id)
        if card is None:
            return f"Card {card_id}"
        if card.english:
            return f"{card.name} ({card.english})"
        return card.name

    @classmethod
    def from_dict(cls, data: Mapping[Any, Any]) -> 'CardCatalog':
        """Build a catalog from a mapping of card id (int or numeric string) to card data."""
        cards = {}
        for raw_id, raw_card in data.items():
            card_id = int(raw_id)
            cards[card_id] = raw_card if isinstance(raw_card, CardInfo) else CardInfo.model_validate(raw_card)
        return cls(cards)


def load_catalog(path: Union[str, Path]) -> CardCatalog:
    """Load a catalog from a JSON file."""
    raw = orjson.loads(Path(path).read_bytes())
    catalog = CardCatalog.from_dict(raw)
    logger.info(f"Loaded {len(catalog)} cards from {path}")
    return catalog
