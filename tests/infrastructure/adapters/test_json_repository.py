import json
from datetime import timedelta
from unittest.mock import patch

import pytest

from memora.domain.exceptions import PersistenceError
from memora.infrastructure.adapters.json_repository import JsonReviewRepository


@pytest.fixture
def repo(tmp_path):
    return JsonReviewRepository(tmp_path / "data" / "review_items.json")


@pytest.mark.asyncio
async def test_missing_file_loads_empty(repo):
    assert await repo.load_review_items() == []


@pytest.mark.asyncio
async def test_save_then_load(repo, make_item, now):
    items = [
        make_item("a", last_reviewed=now, interval=6, repetition=2, ease_factor=2.36, quality=4),
        make_item("b", due_in=timedelta(days=3), front="perro", back="dog"),
    ]

    await repo.save_review_items(items)
    loaded = await repo.load_review_items()

    assert loaded == items
    data = json.loads(repo.path.read_text())
    assert data["version"] == "1.0.0"
    assert data["saved_at"] is not None


@pytest.mark.asyncio
async def test_save_creates_backup_of_previous_version(repo, make_item):
    await repo.save_review_items([make_item("old")])
    assert not repo.backup_path.exists()

    await repo.save_review_items([make_item("new")])

    backup = json.loads(repo.backup_path.read_text())
    assert [i["id"] for i in backup["review_items"]] == ["old"]


@pytest.mark.asyncio
async def test_restore_from_backup(repo, make_item):
    assert await repo.restore_from_backup() is False

    await repo.save_review_items([make_item("old")])
    await repo.save_review_items([make_item("new")])

    assert await repo.restore_from_backup() is True
    assert [i.id for i in await repo.load_review_items()] == ["old"]


@pytest.mark.asyncio
async def test_corrupt_file_raises_persistence_error(repo):
    repo.path.parent.mkdir(parents=True)
    repo.path.write_text("{not json")

    with pytest.raises(PersistenceError):
        await repo.load_review_items()


@pytest.mark.asyncio
async def test_write_failure_raises_and_keeps_old_file(repo, make_item):
    await repo.save_review_items([make_item("old")])

    with patch(
        "memora.infrastructure.adapters.json_repository.os.replace",
        side_effect=OSError("disk full"),
    ):
        with pytest.raises(PersistenceError):
            await repo.save_review_items([make_item("new")])

    assert [i.id for i in await repo.load_review_items()] == ["old"]
    assert not list(repo.path.parent.glob("*.tmp"))


@pytest.mark.asyncio
async def test_naive_timestamps_load_as_utc(repo, now):
    repo.path.parent.mkdir(parents=True)
    repo.path.write_text(
        json.dumps(
            {
                "version": "1.0.0",
                "review_items": [
                    {
                        "id": "a",
                        "next_review": "2024-03-15T12:00:00",
                        "last_reviewed": "2024-03-14T12:00:00",
                    }
                ],
            }
        )
    )

    [item] = await repo.load_review_items()

    assert item.next_review == now
    assert item.next_review.tzinfo is not None
    assert item.last_reviewed == now - timedelta(days=1)
