"""Timestamp helpers. Every stored or compared datetime is aware UTC."""

from dataclasses import replace
from datetime import datetime, timezone

from memora.domain.review.models import ReviewEvent, ReviewItem


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(moment: datetime) -> datetime:
    """Naive datetimes are taken to be UTC; aware ones are converted to UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def item_as_utc(item: ReviewItem) -> ReviewItem:
    return replace(
        item,
        next_review=as_utc(item.next_review),
        last_reviewed=as_utc(item.last_reviewed) if item.last_reviewed else None,
    )


def event_as_utc(event: ReviewEvent) -> ReviewEvent:
    return replace(event, timestamp=as_utc(event.timestamp))
