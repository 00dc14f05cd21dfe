"""Error taxonomy for the scheduling engine.

Scheduling errors are caller bugs and are never retried. Store errors are
recoverable by the caller. Persistence errors come from the storage
collaborators and leave the in-memory state valid.
"""


class MemoraError(Exception):
    """Base class for every error raised by memora."""


class SchedulingError(MemoraError):
    pass


class InvalidQuality(SchedulingError, ValueError):
    """Quality score outside [0, 5] or not an integer."""

    def __init__(self, quality: object):
        self.quality = quality
        super().__init__(f"Quality must be an integer in [0, 5], got {quality!r}")


class InvalidInput(SchedulingError, ValueError):
    """Unrecognized confidence or rating value given to the quality mapper."""


class StoreError(MemoraError):
    pass


class NotFound(StoreError, KeyError):
    """Lookup of a review item that was never created."""

    def __init__(self, item_id: str):
        self.item_id = item_id
        super().__init__(item_id)

    def __str__(self) -> str:
        return f"No review item with id '{self.item_id}'"


class AlreadyExists(StoreError):
    """A review item with this id is already in the store."""

    def __init__(self, item_id: str):
        self.item_id = item_id
        super().__init__(f"Review item '{item_id}' already exists")


class PersistenceError(MemoraError):
    """Loading or saving through a storage collaborator failed."""
