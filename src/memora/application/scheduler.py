"""
SM-2 scheduler.

Pure computation with no I/O: given a review item and a quality score it
returns an updated copy. Persisting the result is the caller's job.
"""

import logging
import math
from dataclasses import dataclass, replace
from datetime import datetime, timedelta

from memora.application.quality import validate_quality
from memora.domain.constants import (
    EASE_BASE_DELTA,
    EASE_LINEAR_PENALTY,
    EASE_QUADRATIC_PENALTY,
    INITIAL_INTERVAL,
    MAX_INTERVAL,
    MAX_QUALITY,
    MIN_EASE_FACTOR,
    PASSING_QUALITY,
    SECOND_INTERVAL,
)
from memora.domain.review.models import ReviewItem
from memora.domain.timeutils import as_utc, utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SM2Parameters:
    """
    Fixed SM-2 algorithm parameters.

    The defaults are the canonical SM-2 values. The statistics time estimate
    assumes them, so change them together or not at all.
    """

    base_delta: float = EASE_BASE_DELTA
    linear_penalty: float = EASE_LINEAR_PENALTY
    quadratic_penalty: float = EASE_QUADRATIC_PENALTY
    min_ease_factor: float = MIN_EASE_FACTOR
    first_interval: int = INITIAL_INTERVAL
    second_interval: int = SECOND_INTERVAL
    max_interval: int = MAX_INTERVAL
    passing_quality: int = PASSING_QUALITY


DEFAULT_PARAMETERS = SM2Parameters()


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def next_ease_factor(
    ease_factor: float, quality: int, params: SM2Parameters = DEFAULT_PARAMETERS
) -> float:
    """
    EF' = EF + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02)), floored at 1.3.
    """
    distance = MAX_QUALITY - quality
    updated = ease_factor + (
        params.base_delta
        - distance * (params.linear_penalty + distance * params.quadratic_penalty)
    )
    return max(updated, params.min_ease_factor)


def _heal(item: ReviewItem, params: SM2Parameters) -> ReviewItem:
    """Clamp out-of-range stored state instead of failing on it."""
    ease_factor = item.ease_factor
    if not math.isfinite(ease_factor) or ease_factor < params.min_ease_factor:
        ease_factor = params.min_ease_factor
    interval = min(max(item.interval, params.first_interval), params.max_interval)
    repetition = max(item.repetition, 0)

    if (ease_factor, interval, repetition) != (
        item.ease_factor,
        item.interval,
        item.repetition,
    ):
        logger.warning(
            f"Review item '{item.id}' had out-of-range state "
            f"(ease={item.ease_factor}, interval={item.interval}, "
            f"repetition={item.repetition}); clamped before scheduling"
        )
        item = replace(
            item, ease_factor=ease_factor, interval=interval, repetition=repetition
        )
    return item


def calculate_next_review(
    item: ReviewItem,
    quality: int,
    now: datetime | None = None,
    params: SM2Parameters = DEFAULT_PARAMETERS,
) -> ReviewItem:
    """
    Apply one SM-2 update to a review item.

    Args:
        item: Current state of the item. Not mutated.
        quality: Integer quality score in [0, 5].
        now: Review time; defaults to the current UTC time.
        params: Algorithm parameters; the defaults are canonical SM-2.

    Returns:
        A new ReviewItem with updated interval, repetition, ease factor,
        next_review, last_reviewed and quality.

    Raises:
        InvalidQuality: If quality is not an integer in [0, 5].
    """
    validate_quality(quality)
    now = as_utc(now) if now else utcnow()
    current = _heal(item, params)

    ease_factor = next_ease_factor(current.ease_factor, quality, params)

    if quality < params.passing_quality:
        # Lapse: back to the start of the sequence
        repetition = 0
        interval = params.first_interval
    else:
        repetition = current.repetition + 1
        if repetition == 1:
            interval = params.first_interval
        elif repetition == 2:
            interval = params.second_interval
        else:
            interval = min(
                _round_half_up(current.interval * ease_factor), params.max_interval
            )

    logger.debug(
        f"Scheduled '{item.id}': q={quality} rep {current.repetition}->{repetition} "
        f"ivl {current.interval}->{interval} ease {current.ease_factor:.2f}->{ease_factor:.2f}"
    )

    return replace(
        current,
        interval=interval,
        repetition=repetition,
        ease_factor=ease_factor,
        next_review=now + timedelta(days=interval),
        last_reviewed=now,
        quality=quality,
    )


def is_due(item: ReviewItem, now: datetime | None = None) -> bool:
    """An item is due once its next_review time has been reached."""
    return as_utc(item.next_review) <= (as_utc(now) if now else utcnow())
