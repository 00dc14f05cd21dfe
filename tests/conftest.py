from datetime import datetime, timedelta, timezone

import pytest

from memora.domain.review.models import ReviewItem

NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_item(now):
    """Factory for review items with sensible defaults relative to `now`."""

    def _make(item_id="w1", due_in=timedelta(0), **kwargs):
        return ReviewItem(id=item_id, next_review=now + due_in, **kwargs)

    return _make


@pytest.fixture
def mock_home(tmp_path, monkeypatch):
    """Mocks Path.home() to point to a temp dir."""
    home = tmp_path / "home"
    home.mkdir()

    # Isolate config files and data from the real home directory
    monkeypatch.setenv("HOME", str(home))
    for var in ("MEMORA_DATA_DIR", "MEMORA_SECONDS_PER_ITEM", "MEMORA_TIMEZONE", "MEMORA_VERBOSE"):
        monkeypatch.delenv(var, raising=False)
    return home
