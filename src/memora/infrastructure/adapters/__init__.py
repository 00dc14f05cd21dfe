# Infrastructure Adapters Package
from .json_history import JsonLinesReviewHistory
from .json_repository import JsonReviewRepository

__all__ = ["JsonReviewRepository", "JsonLinesReviewHistory"]
