"""
Domain models for spaced-repetition review.

These are pure data structures with no I/O or external dependencies.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum, IntEnum

from memora.domain.constants import DEFAULT_EASE_FACTOR, INITIAL_INTERVAL


class Confidence(str, Enum):
    """Learner's confidence in a correct answer."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Rating(IntEnum):
    """
    Discrete self-rating shown in the study UI.

    The value is the quality score the rating maps to. WRONG is 0 rather than
    the 2 inferred from a plain incorrect answer.
    """

    WRONG = 0
    HARD = 3
    GOOD = 4
    EASY = 5


class MasteryLevel(str, Enum):
    NEW = "new"
    LEARNING = "learning"
    YOUNG = "young"
    MATURE = "mature"
    MASTERED = "mastered"


@dataclass(frozen=True)
class ReviewItem:
    """
    Scheduling state of one vocabulary entry.

    Attributes:
        id: Identifier of the vocabulary entry this item tracks.
        interval: Days until the next scheduled review (>= 1).
        repetition: Consecutive successful reviews since the last lapse.
        ease_factor: Interval growth multiplier (>= 1.3).
        next_review: The item is due once ``now >= next_review``.
        last_reviewed: Time of the most recent scheduling update, None before the first.
        quality: Quality score used in the most recent update (display only).
        front: Prompt text, for display.
        back: Answer text, for display.
    """

    id: str
    next_review: datetime
    interval: int = INITIAL_INTERVAL
    repetition: int = 0
    ease_factor: float = DEFAULT_EASE_FACTOR
    last_reviewed: datetime | None = None
    quality: int = 0
    front: str | None = None
    back: str | None = None


@dataclass(frozen=True)
class ReviewEvent:
    """
    A single entry of the append-only review history.

    Attributes:
        item_id: The review item that was answered.
        timestamp: When the answer was recorded.
        quality: Quality score (0-5) the answer was scheduled with.
    """

    item_id: str
    timestamp: datetime
    quality: int


@dataclass(frozen=True)
class StudyStatistics:
    """Snapshot of study progress, derived and never persisted."""

    total_reviews: int = 0
    correct_reviews: int = 0
    accuracy: float = 0.0
    average_quality: float = 0.0
    study_streak: int = 0
    total_items: int = 0
    mastered_items: int = 0
    items_to_review: int = 0
    overdue_items: int = 0
    learning_items: int = 0  # total_items - mastered_items
    average_ease_factor: float = 0.0
    average_interval: float = 0.0
    estimated_time: float = 0.0  # minutes, heuristic


@dataclass(frozen=True)
class ItemProgress:
    """A review item's state classified for progress displays."""

    id: str
    mastery_level: MasteryLevel
    is_due: bool
    is_mastered: bool
    days_overdue: int | None  # Negative if not yet due, None before the first review
