"""
Batting assessment logic.

Contains the domain models, the repository contract, the assessment
workflow, video filtering and the weekly performance engine.
"""

from .assessments import AssessmentManager, PlayerLocks, ShotAreaRating, week_bounds
from .errors import (
    CoachingError,
    EntityNotFoundError,
    PlayerHasDependentsError,
    StorageUnavailableError,
    ValidationFailedError,
)
from .models import (
    PerformanceAssessment,
    PerformanceMetric,
    Player,
    ProblemArea,
    ProblemAreaType,
    Video,
)
from .performance import (
    GapPolicy,
    WeeklyChart,
    WeeklyScore,
    build_weekly_chart,
    build_weekly_series,
)
from .repository import CoachingRepository, EntityStore
from .roster import remove_player
from .videos import VideoCriteria, filter_videos

__all__ = [
    "AssessmentManager",
    "PlayerLocks",
    "ShotAreaRating",
    "week_bounds",
    "CoachingError",
    "EntityNotFoundError",
    "PlayerHasDependentsError",
    "StorageUnavailableError",
    "ValidationFailedError",
    "PerformanceAssessment",
    "PerformanceMetric",
    "Player",
    "ProblemArea",
    "ProblemAreaType",
    "Video",
    "GapPolicy",
    "WeeklyChart",
    "WeeklyScore",
    "build_weekly_chart",
    "build_weekly_series",
    "CoachingRepository",
    "EntityStore",
    "remove_player",
    "VideoCriteria",
    "filter_videos",
]
