"""
JSON Review Repository — Infrastructure adapter for a local JSON document.

Implements ReviewRepository. Every save first copies the current file to a
backup next to it, then replaces the file atomically.
"""

import asyncio
import logging
import os
import shutil
import tempfile
from datetime import datetime, timezone
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError, field_validator

from memora.domain.constants import BACKUP_SUFFIX, STORAGE_VERSION
from memora.domain.exceptions import PersistenceError
from memora.domain.review.models import ReviewItem
from memora.domain.review.ports import ReviewRepository
from memora.domain.timeutils import item_as_utc

logger = logging.getLogger(__name__)


class StoredReviewData(BaseModel):
    """On-disk layout of the review item document."""

    version: str = STORAGE_VERSION
    saved_at: datetime | None = None
    review_items: list[ReviewItem] = Field(default_factory=list)

    @field_validator("review_items")
    @classmethod
    def normalize_timestamps(cls, items: list[ReviewItem]) -> list[ReviewItem]:
        # Files written by older tools may hold naive timestamps; read them as UTC
        return [item_as_utc(item) for item in items]


class JsonReviewRepository(ReviewRepository):
    """
    Stores all review items in a single JSON file.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    @property
    def backup_path(self) -> Path:
        return self.path.with_name(self.path.name + BACKUP_SUFFIX)

    async def load_review_items(self) -> list[ReviewItem]:
        return await asyncio.to_thread(self._read)

    async def save_review_items(self, items: list[ReviewItem]) -> None:
        await asyncio.to_thread(self._write, list(items))

    async def restore_from_backup(self) -> bool:
        """
        Put the last backup back in place.

        Returns:
            False if there is no backup to restore.
        """
        return await asyncio.to_thread(self._restore)

    def _read(self) -> list[ReviewItem]:
        if not self.path.exists():
            logger.debug(f"No review data at {self.path}; starting empty")
            return []

        try:
            raw = self.path.read_text(encoding="utf-8")
            data = StoredReviewData.model_validate_json(raw)
        except (OSError, ValidationError) as e:
            raise PersistenceError(f"Could not load review items from {self.path}: {e}") from e

        if data.version != STORAGE_VERSION:
            logger.warning(
                f"Review data version {data.version} differs from {STORAGE_VERSION}; "
                "loading anyway"
            )
        return data.review_items

    def _write(self, items: list[ReviewItem]) -> None:
        data = StoredReviewData(saved_at=datetime.now(timezone.utc), review_items=items)
        payload = data.model_dump_json(indent=2)

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            if self.path.exists():
                shutil.copy2(self.path, self.backup_path)

            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(payload)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            logger.error(f"Failed to save review items to {self.path}: {e}")
            raise PersistenceError(f"Could not save review items to {self.path}: {e}") from e

        logger.debug(f"Wrote {len(items)} review items to {self.path}")

    def _restore(self) -> bool:
        if not self.backup_path.exists():
            return False
        try:
            shutil.copy2(self.backup_path, self.path)
        except OSError as e:
            raise PersistenceError(f"Could not restore backup {self.backup_path}: {e}") from e
        logger.info(f"Restored review items from {self.backup_path}")
        return True
