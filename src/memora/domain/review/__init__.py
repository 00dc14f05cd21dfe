# Domain Review Package
from .models import (
    Confidence,
    ItemProgress,
    MasteryLevel,
    Rating,
    ReviewEvent,
    ReviewItem,
    StudyStatistics,
)
from .ports import ReviewHistory, ReviewRepository

__all__ = [
    "Confidence",
    "ItemProgress",
    "MasteryLevel",
    "Rating",
    "ReviewEvent",
    "ReviewItem",
    "StudyStatistics",
    "ReviewHistory",
    "ReviewRepository",
]
