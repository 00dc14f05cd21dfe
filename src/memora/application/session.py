"""
Study session orchestration.

Runs the per-answer pipeline used by every study mode:
quality mapping -> scheduling -> save -> history append.
"""

import logging
from datetime import datetime

from memora.application.due_query import get_items_due_for_review
from memora.application.quality import rating_to_quality, response_to_quality
from memora.application.store import ReviewItemStore
from memora.domain.constants import DEFAULT_SESSION_LIMIT
from memora.domain.exceptions import PersistenceError
from memora.domain.review.models import Confidence, Rating, ReviewEvent, ReviewItem
from memora.domain.review.ports import ReviewHistory, ReviewRepository
from memora.domain.timeutils import as_utc, utcnow

logger = logging.getLogger(__name__)


class StudySessionService:
    """
    Applies answers from flashcard, quiz and matching modes to the store.

    If saving fails the scheduled item stays in the store, no history entry is
    written and PersistenceError is raised; call ``flush`` to retry the save.
    """

    def __init__(
        self,
        store: ReviewItemStore,
        repository: ReviewRepository,
        history: ReviewHistory,
    ):
        self.store = store
        self._repo = repository
        self._history = history

    async def load(self) -> int:
        return await self.store.load(self._repo)

    async def flush(self) -> None:
        await self.store.flush(self._repo)

    def start_session(
        self,
        now: datetime | None = None,
        limit: int | None = DEFAULT_SESSION_LIMIT,
    ) -> list[ReviewItem]:
        """
        Build the queue of due items for a new session.
        """
        queue = get_items_due_for_review(self.store.all(), now=now, limit=limit)
        logger.info(f"Study session started with {len(queue)} due items")
        return queue

    async def answer(
        self, item_id: str, quality: int, now: datetime | None = None
    ) -> ReviewItem:
        """
        Record an answer given as a quality score.

        Raises:
            NotFound: If the item is unknown.
            InvalidQuality: If quality is not an integer in [0, 5].
            PersistenceError: If the save or history append fails.
        """
        now = as_utc(now) if now else utcnow()
        updated = self.store.review(item_id, quality, now=now)

        try:
            await self.flush()
        except PersistenceError:
            logger.error(f"Failed to save review of '{item_id}'; update kept in memory")
            raise

        await self._history.append(
            ReviewEvent(item_id=item_id, timestamp=now, quality=quality)
        )
        return updated

    async def answer_response(
        self,
        item_id: str,
        is_correct: bool,
        confidence: Confidence | str | None = None,
        answered: bool = True,
        now: datetime | None = None,
    ) -> ReviewItem:
        quality = response_to_quality(is_correct, confidence, answered=answered)
        return await self.answer(item_id, quality, now=now)

    async def answer_rating(
        self, item_id: str, rating: Rating | str | int, now: datetime | None = None
    ) -> ReviewItem:
        return await self.answer(item_id, rating_to_quality(rating), now=now)
