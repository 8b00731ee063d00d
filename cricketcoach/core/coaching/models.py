"""
Domain models for batting assessments.

These models represent the core business concepts. They have no dependencies
on external frameworks, databases, or APIs. Entities are frozen: the
repository owns every instance, and an update replaces the stored record
instead of mutating a shared object.

Children point at their parent through a foreign key (player_id,
assessment_id). Parents never hold a collection of children; traversal
is a filtered scan through the repository.
"""

import re
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional

from .errors import ValidationFailedError


class ProblemAreaType(Enum):
    """
    Coaching focus areas a player can be rated on.

    Unlike metric types, this vocabulary is closed: the assessment form
    only ever offers these options.
    """
    BAT_CONNECT = "bat_connect"
    FOOT_MOVEMENT = "foot_movement"
    BAT_SWING = "bat_swing"
    WEIGHT_SHIFTING = "weight_shifting"
    REACTION_TIME = "reaction_time"


# Technique areas rated inside a shot-specific assessment.
SHOT_TECHNIQUE_AREAS: dict[str, str] = {
    "hands_grip": "Hands Grip",
    "top_hand_forearm": "Top Hand Forearm Push",
    "head_stability": "Head Stability",
    "bat_movement": "Bat Movement Line",
    "foot_position": "Front & Back Foot Movement & Position",
    "weight_transfer": "Weight Transfer to Front Foot",
    "elbow_shoulder": "Elbow Shoulder Alignment",
}

METRIC_RATING_RANGE = (0, 100)
STAR_RATING_RANGE = (1, 5)


def shot_metric_type(shot_type: str, area_id: Optional[str] = None) -> str:
    """
    Build the metric-type tag for a shot, e.g. "Cover Drive" -> "cover_drive".

    With an area id the tag names a technique area within the shot:
    ("Cover Drive", "hands_grip") -> "cover_drive_hands_grip".
    """
    base = re.sub(r"\s+", "_", shot_type.strip().lower())
    if not base:
        raise ValidationFailedError("Shot type cannot be empty")
    return f"{base}_{area_id}" if area_id else base


def _check_rating(rating: int, bounds: tuple[int, int], what: str) -> None:
    low, high = bounds
    if not low <= rating <= high:
        raise ValidationFailedError(
            f"{what} rating must be between {low} and {high}, got {rating}"
        )


@dataclass(frozen=True)
class Player:
    """A batter on the academy roster."""
    id: int
    name: str
    batch: str
    image: str
    joined_date: date
    age: Optional[int] = None
    dominant_hand: Optional[str] = None
    status: Optional[str] = None  # "improving", "stable", "needs focus"

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValidationFailedError("Player name cannot be empty")


@dataclass(frozen=True)
class PerformanceAssessment:
    """
    One coaching session's assessment of a player, covering a week.

    At most one assessment per player carries is_current; the
    AssessmentManager keeps it that way.
    """
    id: int
    player_id: int
    week_start: date
    week_end: date
    notes: Optional[str] = None
    is_current: bool = False

    def __post_init__(self) -> None:
        if self.week_end < self.week_start:
            raise ValidationFailedError("Week end cannot be before week start")


@dataclass(frozen=True)
class PerformanceMetric:
    """
    A single rating recorded during an assessment.

    metric_type is open vocabulary ("bat_connect", "cover_drive",
    "cover_drive_hands_grip", ...). Star-rated families use 1-5,
    percentage families 0-100.
    """
    id: int
    assessment_id: int
    metric_type: str
    rating: int
    value: Optional[str] = None  # display value like "0.65s" or "85%"
    notes: Optional[str] = None
    video_url: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.metric_type.strip():
            raise ValidationFailedError("Metric type cannot be empty")
        _check_rating(self.rating, METRIC_RATING_RANGE, "Metric")


@dataclass(frozen=True)
class ProblemArea:
    """A star-rated coaching focus recorded during an assessment."""
    id: int
    assessment_id: int
    area_type: ProblemAreaType
    rating: int
    notes: Optional[str] = None

    def __post_init__(self) -> None:
        # Stores and request bodies hand us the raw tag
        if not isinstance(self.area_type, ProblemAreaType):
            try:
                object.__setattr__(self, "area_type", ProblemAreaType(self.area_type))
            except ValueError:
                raise ValidationFailedError(f"Unknown problem area: {self.area_type!r}")
        _check_rating(self.rating, STAR_RATING_RANGE, "Problem area")


@dataclass(frozen=True)
class Video:
    """
    A recorded clip of a player batting.

    The bytes live in blob storage; url is the locator returned by it.
    Tags may be corrected after upload, nothing else changes.
    """
    id: int
    player_id: int
    title: str
    url: str
    recorded_date: date
    shot_type: Optional[str] = None  # "Cover Drive", "Pull Shot", ...
    ball_speed: Optional[str] = None  # "Fast", "Medium", "Slow"
    bat_connect: Optional[str] = None  # "Middle", "Edge", "Bottom", "Missed"

    def __post_init__(self) -> None:
        if not self.url.strip():
            raise ValidationFailedError("Video locator cannot be empty")
