"""
Ports (interfaces) for review persistence.

These define the contract that infrastructure adapters must implement.
Application services depend on these abstractions, not concrete implementations.
Both collaborators are fallible: failures surface as PersistenceError.
"""

from abc import ABC, abstractmethod

from .models import ReviewEvent, ReviewItem


class ReviewRepository(ABC):
    """
    Port for loading and saving the learner's review items.

    Implementations:
        - JsonReviewRepository: A JSON document on the local filesystem.
    """

    @abstractmethod
    async def load_review_items(self) -> list[ReviewItem]:
        """
        Load every stored review item.

        Returns:
            List of ReviewItem objects; empty if nothing has been saved yet.

        Raises:
            PersistenceError: If the storage cannot be read or decoded.
        """
        pass

    @abstractmethod
    async def save_review_items(self, items: list[ReviewItem]) -> None:
        """
        Replace the stored collection with the given items.

        Raises:
            PersistenceError: If the write fails. Callers must not ignore it.
        """
        pass


class ReviewHistory(ABC):
    """
    Port for the append-only review log consumed by the statistics aggregator.

    Implementations:
        - JsonLinesReviewHistory: One JSON object per line in a local file.
    """

    @abstractmethod
    async def load_events(self) -> list[ReviewEvent]:
        """
        Return all recorded review events, sorted by timestamp ascending.
        """
        pass

    @abstractmethod
    async def append(self, event: ReviewEvent) -> None:
        """
        Record one completed review.
        """
        pass
