"""
Quality mapper: turns a learner's raw answer into an SM-2 quality score.

Two input shapes are supported:
- correct/incorrect plus an optional confidence (quiz and matching modes),
- an explicit self-rating (Wrong/Hard/Good/Easy buttons in flashcard mode).

An inferred wrong answer maps to 2 while an explicit "Wrong" rating maps to 0;
statistics treat 0 as the stronger lapse signal.
"""

from memora.domain.constants import (
    INFERRED_WRONG_QUALITY,
    MAX_QUALITY,
    MIN_QUALITY,
    NO_ANSWER_QUALITY,
)
from memora.domain.exceptions import InvalidInput, InvalidQuality
from memora.domain.review.models import Confidence, Rating

_CONFIDENCE_QUALITY = {
    Confidence.LOW: 3,
    Confidence.MEDIUM: 4,
    Confidence.HIGH: 5,
}


def parse_confidence(confidence: Confidence | str | None) -> Confidence | None:
    """Coerce a confidence value, rejecting anything outside the enum."""
    if confidence is None or isinstance(confidence, Confidence):
        return confidence
    if isinstance(confidence, str):
        try:
            return Confidence(confidence.strip().lower())
        except ValueError:
            pass
    raise InvalidInput(
        f"Unknown confidence {confidence!r}; expected one of "
        f"{', '.join(c.value for c in Confidence)}"
    )


def response_to_quality(
    is_correct: bool,
    confidence: Confidence | str | None = None,
    *,
    answered: bool = True,
) -> int:
    """
    Map a correct/incorrect answer to a quality score.

    Args:
        is_correct: Whether the learner answered correctly.
        confidence: Optional confidence in the answer. Unspecified counts as high.
        answered: False when the learner gave no answer (timeout or skip).

    Returns:
        0 when no answer was given, 2 for a wrong answer, otherwise 3/4/5 for
        low/medium/high confidence.

    Raises:
        InvalidInput: If confidence is not a recognized value.
    """
    level = parse_confidence(confidence)

    if not answered:
        return NO_ANSWER_QUALITY
    if not is_correct:
        return INFERRED_WRONG_QUALITY
    if level is None:
        return MAX_QUALITY
    return _CONFIDENCE_QUALITY[level]


def rating_to_quality(rating: Rating | str | int) -> int:
    """
    Map an explicit self-rating to its quality score.

    Accepts a Rating, its name ("wrong", "Hard", ...) or its quality value.
    """
    if isinstance(rating, Rating):
        return int(rating)
    if isinstance(rating, str):
        try:
            return int(Rating[rating.strip().upper()])
        except KeyError:
            pass
    elif isinstance(rating, int) and not isinstance(rating, bool):
        try:
            return int(Rating(rating))
        except ValueError:
            pass
    raise InvalidInput(
        f"Unknown rating {rating!r}; expected one of "
        f"{', '.join(r.name.lower() for r in Rating)}"
    )


def validate_quality(quality: object) -> int:
    """
    Check that a raw 0-5 self-rating is usable as a quality score.

    Raises:
        InvalidQuality: For non-integers (bool included) or values outside [0, 5].
    """
    if isinstance(quality, bool) or not isinstance(quality, int):
        raise InvalidQuality(quality)
    if not MIN_QUALITY <= quality <= MAX_QUALITY:
        raise InvalidQuality(quality)
    return quality
