"""
Statistics calculator for progress dashboards.

This is a pure computation module with no I/O. History is supplied by the
caller; the calculator never reads or writes it on its own.
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, datetime, timedelta, tzinfo

from memora.application.due_query import count_items_due
from memora.application.scheduler import is_due
from memora.domain.constants import (
    DEFAULT_SECONDS_PER_ITEM,
    MASTERY_MIN_INTERVAL,
    MASTERY_MIN_REPETITION,
    PASSING_QUALITY,
    YOUNG_INTERVAL_LIMIT,
)
from memora.domain.review.models import (
    ItemProgress,
    MasteryLevel,
    ReviewEvent,
    ReviewItem,
    StudyStatistics,
)
from memora.domain.timeutils import as_utc, utcnow

SECONDS_PER_DAY = 86400


@dataclass(frozen=True)
class MasteryThreshold:
    """An item is mastered once both minimums are reached."""

    min_repetition: int = MASTERY_MIN_REPETITION
    min_interval: int = MASTERY_MIN_INTERVAL

    def is_met(self, item: ReviewItem) -> bool:
        return (
            item.repetition >= self.min_repetition
            and item.interval >= self.min_interval
        )


class StatisticsCalculator:
    """
    Computes StudyStatistics over a review collection and its history.

    Stateless and side-effect free.

    ``estimated_time`` is a rough heuristic in minutes (due items times a fixed
    number of seconds per item), not measured telemetry.
    """

    def __init__(
        self,
        seconds_per_item: float = DEFAULT_SECONDS_PER_ITEM,
        mastery: MasteryThreshold | None = None,
        tz: tzinfo | None = None,
    ):
        """
        Args:
            seconds_per_item: Assumed review time per due item.
            mastery: Mastery threshold; the default is repetition >= 3 and interval >= 21.
            tz: Time zone that defines calendar days for the streak; None uses local time.
        """
        if seconds_per_item <= 0:
            raise ValueError(f"seconds_per_item must be positive, got {seconds_per_item}")
        self.seconds_per_item = seconds_per_item
        self.mastery = mastery or MasteryThreshold()
        self.tz = tz

    def calculate_statistics(
        self,
        items: Sequence[ReviewItem],
        history: Sequence[ReviewEvent],
        now: datetime | None = None,
    ) -> StudyStatistics:
        """
        Aggregate progress metrics. Empty input yields all-zero statistics.
        """
        now = as_utc(now) if now else utcnow()

        total_reviews = len(history)
        mastered_items = sum(1 for item in items if self.mastery.is_met(item))
        correct_reviews = sum(1 for e in history if e.quality >= PASSING_QUALITY)
        items_to_review = count_items_due(items, now)

        return StudyStatistics(
            total_reviews=total_reviews,
            correct_reviews=correct_reviews,
            accuracy=correct_reviews / total_reviews if total_reviews else 0.0,
            average_quality=(
                sum(e.quality for e in history) / total_reviews if total_reviews else 0.0
            ),
            study_streak=self.compute_streak(history, now),
            total_items=len(items),
            mastered_items=mastered_items,
            learning_items=len(items) - mastered_items,
            items_to_review=items_to_review,
            overdue_items=sum(
                1
                for item in items
                if as_utc(item.next_review) < now - timedelta(days=1)
            ),
            average_ease_factor=(
                sum(item.ease_factor for item in items) / len(items) if items else 0.0
            ),
            average_interval=(
                sum(item.interval for item in items) / len(items) if items else 0.0
            ),
            estimated_time=self.estimate_minutes(items_to_review),
        )

    def estimate_minutes(self, item_count: int) -> float:
        return item_count * self.seconds_per_item / 60

    def compute_streak(self, history: Sequence[ReviewEvent], now: datetime) -> int:
        """
        Count consecutive calendar days with at least one review.

        The streak ends today or yesterday: a day without reviews only breaks
        it once that day is over.
        """
        if not history:
            return 0

        active_days = {self._local_day(e.timestamp) for e in history}
        today = self._local_day(now)

        if today in active_days:
            day = today
        elif today - timedelta(days=1) in active_days:
            day = today - timedelta(days=1)
        else:
            return 0

        streak = 0
        while day in active_days:
            streak += 1
            day -= timedelta(days=1)
        return streak

    def enrich(self, item: ReviewItem, now: datetime | None = None) -> ItemProgress:
        """
        Classify a single item for progress displays.
        """
        now = as_utc(now) if now else utcnow()
        return ItemProgress(
            id=item.id,
            mastery_level=self._classify(item),
            is_due=is_due(item, now),
            is_mastered=self.mastery.is_met(item),
            days_overdue=self._compute_days_overdue(item, now),
        )

    def _classify(self, item: ReviewItem) -> MasteryLevel:
        if item.last_reviewed is None:
            return MasteryLevel.NEW
        if self.mastery.is_met(item):
            return MasteryLevel.MASTERED
        if item.repetition < self.mastery.min_repetition:
            return MasteryLevel.LEARNING
        if item.interval < YOUNG_INTERVAL_LIMIT:
            return MasteryLevel.YOUNG
        return MasteryLevel.MATURE

    def _compute_days_overdue(self, item: ReviewItem, now: datetime) -> int | None:
        """
        Whole days past next_review (negative if not yet due).
        """
        if item.last_reviewed is None:
            return None
        overdue = now - as_utc(item.next_review)
        return math.floor(overdue.total_seconds() / SECONDS_PER_DAY)

    def _local_day(self, moment: datetime) -> date:
        return as_utc(moment).astimezone(self.tz).date()
