"""
Due-item query for building study queues.

Selects items whose next review time has passed and orders them oldest-overdue
first, breaking ties by id so that sessions are reproducible.
"""

from collections.abc import Iterable
from datetime import datetime

from memora.application.scheduler import is_due
from memora.domain.timeutils import as_utc, utcnow
from memora.domain.review.models import ReviewItem


def _queue_order(item: ReviewItem) -> tuple[datetime, str]:
    return (as_utc(item.next_review), item.id)


def get_items_due_for_review(
    items: Iterable[ReviewItem],
    now: datetime | None = None,
    limit: int | None = None,
) -> list[ReviewItem]:
    """
    Return the items due at ``now``, oldest-overdue first.

    Args:
        items: Review items to filter. Not modified.
        now: Reference time; defaults to the current UTC time.
        limit: Optional maximum queue length, applied after ordering.

    Returns:
        Ordered list of due items; empty when nothing is due.
    """
    now = now or utcnow()
    due = sorted((item for item in items if is_due(item, now)), key=_queue_order)

    if limit is not None:
        if limit < 0:
            raise ValueError(f"limit must be non-negative, got {limit}")
        due = due[:limit]

    return due


def count_items_due(items: Iterable[ReviewItem], now: datetime | None = None) -> int:
    now = now or utcnow()
    return sum(1 for item in items if is_due(item, now))
