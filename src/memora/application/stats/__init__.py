# Application Stats Package
from .metrics_calculator import MasteryThreshold, StatisticsCalculator
from .service import StudyStatsService

__all__ = ["MasteryThreshold", "StatisticsCalculator", "StudyStatsService"]
