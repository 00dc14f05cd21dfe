"""
Adapter factory.
Centralizes building collaborators and services from AppConfig.
"""

from memora.application.config import AppConfig
from memora.application.session import StudySessionService
from memora.application.stats import MasteryThreshold, StatisticsCalculator, StudyStatsService
from memora.application.store import ReviewItemStore
from memora.domain.review.ports import ReviewHistory, ReviewRepository
from memora.infrastructure.adapters.json_history import JsonLinesReviewHistory
from memora.infrastructure.adapters.json_repository import JsonReviewRepository


def get_review_repository(config: AppConfig) -> ReviewRepository:
    return JsonReviewRepository(config.items_path)


def get_review_history(config: AppConfig) -> ReviewHistory:
    return JsonLinesReviewHistory(config.history_path)


def get_statistics_calculator(config: AppConfig) -> StatisticsCalculator:
    return StatisticsCalculator(
        seconds_per_item=config.seconds_per_item,
        mastery=MasteryThreshold(
            min_repetition=config.mastery_min_repetition,
            min_interval=config.mastery_min_interval,
        ),
        tz=config.tz,
    )


def get_stats_service(config: AppConfig) -> StudyStatsService:
    return StudyStatsService(
        repository=get_review_repository(config),
        history=get_review_history(config),
        calculator=get_statistics_calculator(config),
    )


async def get_session_service(config: AppConfig) -> StudySessionService:
    """
    Returns a StudySessionService with its store already loaded from storage.
    """
    service = StudySessionService(
        store=ReviewItemStore(),
        repository=get_review_repository(config),
        history=get_review_history(config),
    )
    await service.load()
    return service
