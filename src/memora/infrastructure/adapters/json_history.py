"""
JSON Lines Review History — append-only review log on the local filesystem.

One ReviewEvent per line. Unreadable lines are skipped with a warning so a
single torn write cannot hide the rest of the history.
"""

import asyncio
import logging
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from memora.domain.exceptions import PersistenceError
from memora.domain.review.models import ReviewEvent
from memora.domain.review.ports import ReviewHistory
from memora.domain.timeutils import event_as_utc

logger = logging.getLogger(__name__)

_event_adapter = TypeAdapter(ReviewEvent)


class JsonLinesReviewHistory(ReviewHistory):
    def __init__(self, path: Path):
        self.path = Path(path)
        self._write_lock = asyncio.Lock()

    async def load_events(self) -> list[ReviewEvent]:
        return await asyncio.to_thread(self._read)

    async def append(self, event: ReviewEvent) -> None:
        line = _event_adapter.dump_json(event).decode("utf-8")
        async with self._write_lock:
            await asyncio.to_thread(self._append_line, line)

    def _read(self) -> list[ReviewEvent]:
        if not self.path.exists():
            return []

        try:
            lines = self.path.read_text(encoding="utf-8").splitlines()
        except OSError as e:
            raise PersistenceError(f"Could not read review history {self.path}: {e}") from e

        events: list[ReviewEvent] = []
        for lineno, line in enumerate(lines, start=1):
            if not line.strip():
                continue
            try:
                events.append(event_as_utc(_event_adapter.validate_json(line)))
            except ValidationError as e:
                logger.warning(f"Skipping unreadable history line {lineno} in {self.path}: {e}")

        events.sort(key=lambda e: e.timestamp)
        return events

    def _append_line(self, line: str) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("a", encoding="utf-8") as f:
                f.write(line + "\n")
        except OSError as e:
            logger.error(f"Failed to append to review history {self.path}: {e}")
            raise PersistenceError(f"Could not append to review history {self.path}: {e}") from e
