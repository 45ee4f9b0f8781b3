"""
Four-axis value scores from a final hand plus discard evidence.

The final hand is the strong, intentional signal. Discard scores are
compressed, normalized to a unit total and blended in with weight ``alpha``,
scaled per axis so that axes with little hand evidence also get little
discard boost.
"""

import math
from typing import Any, Callable, Dict, Iterable, List, Literal, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, Field

from .catalog import CardCatalog
from .constants import AXES
from .discard_scoring import coerce_card_id, finite_number
from .errors import InvalidCardId
from .models import AxisBreakdown, AxisResult, CardId, DiscardScore

CompressFn = Callable[[float], float]
ScaleFn = Callable[[str, float], float]


class AxisScoringOptions(BaseModel):
    """Tuning knobs for compute_axis_scores."""

    alpha: float = Field(
        default=0.35,
        ge=0,
        le=1,
        description="Weight of discard evidence relative to the final hand"
    )
    compress: Union[Literal['log1p', 'sqrt'], CompressFn] = Field(
        default='log1p',
        description="Monotonic non-negative transform applied to raw discard scores"
    )
    k: Union[Literal['base_abs'], float, ScaleFn] = Field(
        default='base_abs',
        description="Scale of the discard contribution; 'base_abs' uses the axis's own hand evidence"
    )
    confidence_target_abs: float = Field(
        default=60,
        gt=0,
        description="Evidence magnitude that maps to full confidence"
    )
    exclude_final_from_discard: bool = Field(
        default=False,
        description="Ignore discard entries for cards that are in the final hand"
    )
    eps: float = Field(
        default=1e-9,
        ge=0,
        description="Guard against division by zero"
    )


default_axis_options = AxisScoringOptions()


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def resolve_compress(compress) -> CompressFn:
    if callable(compress):
        return compress
    if compress == 'sqrt':
        return lambda x: math.sqrt(max(0.0, x))
    return lambda x: math.log1p(max(0.0, x))


def resolve_scale(k) -> ScaleFn:
    if callable(k):
        return k
    if k == 'base_abs':
        return lambda axis, base_abs: base_abs
    scale = float(k)
    return lambda axis, base_abs: scale


def _iter_discard_scores(discard_scores) -> Iterable[Tuple[Any, Any]]:
    """Yield (card_id, score) pairs from the accepted input shapes."""
    if isinstance(discard_scores, Mapping):
        yield from discard_scores.items()
        return
    for item in discard_scores:
        if isinstance(item, DiscardScore):
            yield item.card_id, item.score
        elif isinstance(item, Mapping):
            yield item.get('cardId', item.get('card_id')), item.get('score')
        else:
            card_id, score = item
            yield card_id, score


def _lookup(catalog: CardCatalog, card_id: CardId):
    card = catalog.get(card_id)
    if card is None:
        raise InvalidCardId(f"Card {card_id} is not in the catalog")
    return card


def normalize_discard_weights(
    discard_scores,
    final_hand: Iterable[CardId] = (),
    compress=None,
    exclude_final_from_discard: bool = False
) -> Dict[CardId, float]:
    """
    Turn raw discard scores into weights that sum to 1.

    Only finite, strictly positive scores count. Repeated card ids accumulate
    their share.
    """
    compress_fn = resolve_compress(compress if compress is not None else 'log1p')
    final_set = set(final_hand)

    kept: List[Tuple[CardId, float]] = []
    for raw_id, raw_score in _iter_discard_scores(discard_scores):
        card_id = coerce_card_id(raw_id)
        score = finite_number(raw_score)
        if score is None or score <= 0:
            continue
        if exclude_final_from_discard and card_id in final_set:
            continue
        kept.append((card_id, score))

    compressed = [(card_id, compress_fn(score)) for card_id, score in kept]
    total = sum(weight for _, weight in compressed)

    weights: Dict[CardId, float] = {}
    if total > 0:
        for card_id, weight in compressed:
            weights[card_id] = weights.get(card_id, 0.0) + weight / total
    return weights


def compute_axis_scores(
    final_hand_card_ids: Iterable[Any],
    discard_scores,
    catalog: CardCatalog,
    options: Optional[AxisScoringOptions] = None
) -> Dict[str, AxisResult]:
    """
    Score the four value axes for one player.

    Args:
        final_hand_card_ids: Cards held at the end of the game (nominally 5)
        discard_scores: Mapping of card id to score, or a list of DiscardScore
            / (card_id, score) pairs; duplicates are allowed
        catalog: Per-card axis contributions
        options: Scoring options, defaults to AxisScoringOptions()

    Returns:
        AxisResult per axis code
    """
    options = options or default_axis_options
    scale_fn = resolve_scale(options.k)
    alpha = clamp(options.alpha, 0.0, 1.0)

    # duplicates in the hand count once
    final_hand = list(dict.fromkeys(coerce_card_id(card_id) for card_id in final_hand_card_ids))
    hand_cards = [_lookup(catalog, card_id) for card_id in final_hand]

    weights = normalize_discard_weights(
        discard_scores,
        final_hand=final_hand,
        compress=options.compress,
        exclude_final_from_discard=options.exclude_final_from_discard,
    )
    weighted_cards = [(_lookup(catalog, card_id), weight) for card_id, weight in weights.items()]

    results: Dict[str, AxisResult] = {}
    for axis in AXES:
        base_axis = 0.0
        base_abs = 0.0
        for card in hand_cards:
            contribution = card.signed_contribution(axis)
            base_axis += contribution
            base_abs += abs(contribution)

        aux_axis = 0.0
        aux_abs = 0.0
        for card, weight in weighted_cards:
            contribution = card.signed_contribution(axis)
            aux_axis += weight * contribution
            aux_abs += weight * abs(contribution)

        k = scale_fn(axis, base_abs)
        total_axis = base_axis + alpha * k * aux_axis
        total_abs = base_abs + alpha * k * aux_abs

        ratio = clamp(total_axis / (total_abs + options.eps), -1.0, 1.0) if total_abs + options.eps else 0.0
        score100 = round_half_up(((ratio + 1) / 2) * 100)
        confidence = clamp(total_abs / options.confidence_target_abs, 0.0, 1.0)

        results[axis] = AxisResult(
            axis=axis,
            score100=score100,
            ratio=ratio,
            confidence=confidence,
            breakdown=AxisBreakdown(
                base_axis=base_axis,
                base_abs=base_abs,
                aux_axis=aux_axis,
                aux_abs=aux_abs,
                total_axis=total_axis,
                total_abs=total_abs,
            ),
        )

    return results
