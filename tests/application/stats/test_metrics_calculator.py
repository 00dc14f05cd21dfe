from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock
from zoneinfo import ZoneInfo

import pytest

from memora.application.stats.metrics_calculator import MasteryThreshold, StatisticsCalculator
from memora.application.stats.service import StudyStatsService
from memora.domain.review.models import MasteryLevel, ReviewEvent, ReviewItem, StudyStatistics


@pytest.fixture
def calculator():
    return StatisticsCalculator(tz=timezone.utc)


@pytest.fixture
def mock_repo():
    return AsyncMock()


@pytest.fixture
def mock_history():
    return AsyncMock()


def events_on(now, day_offsets, quality=4):
    return [
        ReviewEvent(item_id="w", timestamp=now - timedelta(days=d), quality=quality)
        for d in day_offsets
    ]


def test_empty_input_is_all_zero(calculator, now):
    stats = calculator.calculate_statistics([], [], now=now)
    assert stats == StudyStatistics()
    assert stats.estimated_time == 0
    assert stats.learning_items == 0


def test_history_counts(calculator, now):
    history = [
        ReviewEvent("a", now, 5),
        ReviewEvent("b", now, 3),
        ReviewEvent("c", now, 2),
        ReviewEvent("d", now, 0),
    ]
    stats = calculator.calculate_statistics([], history, now=now)

    assert stats.total_reviews == 4
    assert stats.correct_reviews == 2
    assert stats.accuracy == 0.5
    assert stats.average_quality == pytest.approx(2.5)


def test_mastered_items(calculator, make_item, now):
    items = [
        make_item("m", repetition=3, interval=21),
        make_item("short", repetition=5, interval=20),
        make_item("few", repetition=2, interval=40),
    ]
    stats = calculator.calculate_statistics(items, [], now=now)

    assert stats.mastered_items == 1
    assert stats.learning_items == 2
    assert stats.total_items == 3


def test_custom_mastery_threshold(make_item, now):
    calc = StatisticsCalculator(mastery=MasteryThreshold(min_repetition=2, min_interval=6))
    items = [make_item(repetition=2, interval=6)]
    assert calc.calculate_statistics(items, [], now=now).mastered_items == 1


def test_due_and_estimated_time(calculator, make_item, now):
    items = [
        make_item("a", due_in=timedelta(days=-3)),
        make_item("b", due_in=timedelta(0)),
        make_item("c", due_in=timedelta(hours=-2)),
        make_item("d", due_in=timedelta(days=1)),
    ]
    stats = calculator.calculate_statistics(items, [], now=now)

    assert stats.items_to_review == 3
    assert stats.overdue_items == 1
    # 3 items * 30 s
    assert stats.estimated_time == pytest.approx(1.5)


def test_seconds_per_item_configurable(make_item, now):
    calc = StatisticsCalculator(seconds_per_item=60)
    items = [make_item(str(n)) for n in range(4)]
    assert calc.calculate_statistics(items, [], now=now).estimated_time == pytest.approx(4.0)


def test_seconds_per_item_must_be_positive():
    with pytest.raises(ValueError):
        StatisticsCalculator(seconds_per_item=0)


def test_averages(calculator, make_item, now):
    items = [make_item("a", ease_factor=2.0, interval=2), make_item("b", ease_factor=3.0, interval=10)]
    stats = calculator.calculate_statistics(items, [], now=now)

    assert stats.average_ease_factor == pytest.approx(2.5)
    assert stats.average_interval == pytest.approx(6.0)


class TestStreak:
    def test_streak_ending_today(self, calculator, now):
        assert calculator.compute_streak(events_on(now, [0, 1, 2]), now) == 3

    def test_streak_ending_yesterday_survives(self, calculator, now):
        assert calculator.compute_streak(events_on(now, [1, 2, 3, 3]), now) == 3

    def test_streak_broken_after_two_idle_days(self, calculator, now):
        assert calculator.compute_streak(events_on(now, [2, 3, 4]), now) == 0

    def test_gap_ends_streak(self, calculator, now):
        assert calculator.compute_streak(events_on(now, [0, 1, 3, 4]), now) == 2

    def test_multiple_reviews_same_day_count_once(self, calculator, now):
        history = events_on(now, [0]) + [
            ReviewEvent("x", now - timedelta(hours=5), 3),
            ReviewEvent("y", now - timedelta(hours=11), 5),
        ]
        assert calculator.compute_streak(history, now) == 1

    def test_calendar_days_follow_time_zone(self):
        # 23:30 and 00:30 local are different days in Tokyo but the same UTC day
        tokyo = ZoneInfo("Asia/Tokyo")
        now = datetime(2024, 3, 15, 0, 30, tzinfo=tokyo)
        history = [
            ReviewEvent("a", datetime(2024, 3, 14, 23, 30, tzinfo=tokyo), 4),
            ReviewEvent("b", now, 4),
        ]
        assert StatisticsCalculator(tz=tokyo).compute_streak(history, now) == 2
        assert StatisticsCalculator(tz=timezone.utc).compute_streak(history, now) == 1


class TestEnrich:
    def test_new_item(self, calculator, make_item, now):
        progress = calculator.enrich(make_item(), now)

        assert progress.mastery_level is MasteryLevel.NEW
        assert progress.is_due
        assert progress.days_overdue is None

    @pytest.mark.parametrize(
        "repetition, interval, level",
        [
            (1, 1, MasteryLevel.LEARNING),
            (3, 5, MasteryLevel.YOUNG),
            (3, 15, MasteryLevel.MATURE),
            (4, 30, MasteryLevel.MASTERED),
        ],
    )
    def test_levels(self, calculator, make_item, now, repetition, interval, level):
        item = make_item(
            repetition=repetition,
            interval=interval,
            last_reviewed=now - timedelta(days=interval),
        )
        progress = calculator.enrich(item, now)

        assert progress.mastery_level is level
        assert progress.is_mastered == (level is MasteryLevel.MASTERED)

    def test_days_overdue(self, calculator, make_item, now):
        overdue = make_item(due_in=timedelta(days=-3, hours=-1), last_reviewed=now)
        upcoming = make_item(due_in=timedelta(days=2), last_reviewed=now)

        assert calculator.enrich(overdue, now).days_overdue == 3
        assert calculator.enrich(upcoming, now).days_overdue == -2
        assert not calculator.enrich(upcoming, now).is_due


@pytest.mark.asyncio
async def test_stats_service_orchestration(mock_repo, mock_history, make_item, now):
    mock_repo.load_review_items.return_value = [make_item("a"), make_item("b", due_in=timedelta(days=4))]
    mock_history.load_events.return_value = events_on(now, [0], quality=5)
    service = StudyStatsService(mock_repo, mock_history, StatisticsCalculator(tz=timezone.utc))

    stats = await service.get_statistics(now=now)

    assert stats.total_items == 2
    assert stats.items_to_review == 1
    assert stats.study_streak == 1
    mock_repo.load_review_items.assert_awaited_once()
    mock_history.load_events.assert_awaited_once()


@pytest.mark.asyncio
async def test_stats_service_item_progress_sorted(mock_repo, mock_history, make_item, now):
    mock_repo.load_review_items.return_value = [make_item("b"), make_item("a")]
    service = StudyStatsService(mock_repo, mock_history)

    progress = await service.get_item_progress(now=now)

    assert [p.id for p in progress] == ["a", "b"]


def test_naive_timestamps_read_as_utc(calculator, now):
    naive_now = now.replace(tzinfo=None)
    items = [
        ReviewItem(id="a", next_review=naive_now - timedelta(days=3)),
        ReviewItem(id="b", next_review=naive_now + timedelta(days=1)),
    ]
    history = [ReviewEvent("a", naive_now - timedelta(days=1), 4), ReviewEvent("a", now, 5)]

    stats = calculator.calculate_statistics(items, history, now=naive_now)

    assert stats.items_to_review == 1
    assert stats.overdue_items == 1
    assert stats.study_streak == 2
    assert calculator.enrich(
        ReviewItem(id="a", next_review=naive_now - timedelta(days=3), last_reviewed=naive_now),
        now,
    ).days_overdue == 3
