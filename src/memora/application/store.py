"""
In-memory review item store.

Holds the learner's working set during a session. Loading and flushing go
through a ReviewRepository; the store itself never touches storage directly.

Scheduling updates to the same item are serialized with a per-item lock so that
two study modes answering the same item cannot lose one update.
"""

import logging
import threading
from collections.abc import Iterable
from datetime import datetime

from memora.application.scheduler import (
    DEFAULT_PARAMETERS,
    SM2Parameters,
    calculate_next_review,
)
from memora.domain.exceptions import AlreadyExists, NotFound
from memora.domain.review.models import ReviewItem
from memora.domain.review.ports import ReviewRepository
from memora.domain.timeutils import as_utc, item_as_utc, utcnow

logger = logging.getLogger(__name__)


class ReviewItemStore:
    """
    Review items keyed by vocabulary item id.

    ``create_review_item`` raises AlreadyExists for a known id so progress is
    never silently reset; use ``get_or_create`` to fall back to the stored item.
    """

    def __init__(self, items: Iterable[ReviewItem] = ()):
        self._items: dict[str, ReviewItem] = {}
        self._lock = threading.Lock()
        self._item_locks: dict[str, threading.Lock] = {}
        self.replace_all(items)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._items

    def _lock_for(self, item_id: str) -> threading.Lock:
        with self._lock:
            lock = self._item_locks.get(item_id)
            if lock is None:
                lock = self._item_locks[item_id] = threading.Lock()
            return lock

    def create_review_item(
        self,
        item_id: str,
        front_text: str | None = None,
        back_text: str | None = None,
        now: datetime | None = None,
    ) -> ReviewItem:
        """
        Start tracking a vocabulary item with seed scheduling values.

        The new item is due immediately.

        Raises:
            AlreadyExists: If the id is already tracked.
        """
        item = ReviewItem(
            id=item_id,
            next_review=as_utc(now) if now else utcnow(),
            front=front_text,
            back=back_text,
        )
        with self._lock:
            if item_id in self._items:
                raise AlreadyExists(item_id)
            self._items[item_id] = item
        logger.debug(f"Created review item '{item_id}'")
        return item

    def get_or_create(
        self,
        item_id: str,
        front_text: str | None = None,
        back_text: str | None = None,
        now: datetime | None = None,
    ) -> ReviewItem:
        try:
            return self.create_review_item(item_id, front_text, back_text, now)
        except AlreadyExists:
            return self.get(item_id)

    def get(self, item_id: str) -> ReviewItem:
        """
        Raises:
            NotFound: If no item with this id was created.
        """
        try:
            return self._items[item_id]
        except KeyError:
            raise NotFound(item_id) from None

    def upsert(self, item: ReviewItem) -> None:
        """Store ``item``, replacing any previous state for its id."""
        item = item_as_utc(item)
        with self._lock:
            self._items[item.id] = item

    def remove(self, item_id: str) -> ReviewItem:
        """
        Stop tracking an item whose vocabulary entry was deleted.

        Raises:
            NotFound: If no item with this id exists.
        """
        with self._lock:
            try:
                item = self._items.pop(item_id)
            except KeyError:
                raise NotFound(item_id) from None
            self._item_locks.pop(item_id, None)
        logger.debug(f"Removed review item '{item_id}'")
        return item

    def all(self) -> list[ReviewItem]:
        """Snapshot of every stored item."""
        with self._lock:
            return list(self._items.values())

    def replace_all(self, items: Iterable[ReviewItem]) -> None:
        loaded = {item.id: item_as_utc(item) for item in items}
        with self._lock:
            self._items = loaded

    def review(
        self,
        item_id: str,
        quality: int,
        now: datetime | None = None,
        params: SM2Parameters = DEFAULT_PARAMETERS,
    ) -> ReviewItem:
        """
        Schedule one answer for a stored item and keep the result.

        The read-schedule-write cycle runs under the item's lock. Once this
        returns the update is final; there is no rollback.

        Raises:
            NotFound: If the item does not exist.
            InvalidQuality: If quality is not an integer in [0, 5].
        """
        if item_id not in self._items:
            raise NotFound(item_id)

        with self._lock_for(item_id):
            try:
                current = self.get(item_id)
            except NotFound:
                # Removed while waiting for the lock
                with self._lock:
                    self._item_locks.pop(item_id, None)
                raise
            updated = calculate_next_review(current, quality, now=now, params=params)
            self.upsert(updated)
        return updated

    async def load(self, repository: ReviewRepository) -> int:
        """
        Replace the working set with the repository's contents.

        Returns:
            Number of items loaded.
        """
        items = await repository.load_review_items()
        self.replace_all(items)
        logger.info(f"Loaded {len(items)} review items")
        return len(items)

    async def flush(self, repository: ReviewRepository) -> None:
        """
        Save the working set. PersistenceError propagates to the caller and the
        in-memory state is left untouched, so the flush can be retried.
        """
        items = self.all()
        await repository.save_review_items(items)
        logger.info(f"Saved {len(items)} review items")
