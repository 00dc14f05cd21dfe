"""
Study Stats Service — Application layer orchestrator.

Coordinates loading items and history from their collaborators and feeding
them to the statistics calculator.
"""

import logging
from datetime import datetime

from memora.domain.review.models import ItemProgress, StudyStatistics
from memora.domain.review.ports import ReviewHistory, ReviewRepository

from .metrics_calculator import StatisticsCalculator

logger = logging.getLogger(__name__)


class StudyStatsService:
    """
    Application service for dashboard statistics.

    Depends on the ReviewRepository and ReviewHistory abstractions,
    not on concrete adapters.
    """

    def __init__(
        self,
        repository: ReviewRepository,
        history: ReviewHistory,
        calculator: StatisticsCalculator | None = None,
    ):
        """
        Args:
            repository: Source of review items.
            history: Source of the review log.
            calculator: Optional custom calculator; uses default if not provided.
        """
        self._repo = repository
        self._history = history
        self._calc = calculator or StatisticsCalculator()

    async def get_statistics(self, now: datetime | None = None) -> StudyStatistics:
        items = await self._repo.load_review_items()
        events = await self._history.load_events()
        logger.debug(f"Computing statistics over {len(items)} items, {len(events)} events")
        return self._calc.calculate_statistics(items, events, now=now)

    async def get_item_progress(self, now: datetime | None = None) -> list[ItemProgress]:
        """
        Per-item progress for every stored item, ordered by id.
        """
        items = await self._repo.load_review_items()
        return [self._calc.enrich(item, now) for item in sorted(items, key=lambda i: i.id)]
