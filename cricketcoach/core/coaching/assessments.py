"""
Assessment workflow and the "one current assessment" rule.

A coach records one assessment per session. The newest one is flagged
current so the profile page knows what to show. This module owns that
flag: creating a current assessment demotes every other current
assessment of the same player, so after create_assessment returns the
player has at most one, whatever state the store was in before.

The insert-demote-promote sequence is a critical section. It runs under a
per-player lock so two concurrent sessions for the same player cannot
both end up current.
"""

import logging
import threading
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Optional

from .models import (
    PerformanceAssessment,
    PerformanceMetric,
    SHOT_TECHNIQUE_AREAS,
    shot_metric_type,
)
from .errors import ValidationFailedError
from .repository import CoachingRepository, build_entity

logger = logging.getLogger(__name__)


def week_bounds(day: date) -> tuple[date, date]:
    """Monday and Sunday of the week containing day."""
    monday = day - timedelta(days=day.weekday())
    return monday, monday + timedelta(days=6)


@dataclass(frozen=True)
class ShotAreaRating:
    """Rating for one technique area inside a shot-specific assessment."""
    area_id: str
    rating: int
    notes: Optional[str] = None


class PlayerLocks:
    """
    One lock per player, created on first use.

    Share a single instance between managers so that every request in
    the process serialises on the same lock for a given player.
    """

    def __init__(self) -> None:
        self._locks: dict[int, threading.Lock] = {}
        self._guard = threading.Lock()

    def for_player(self, player_id: int) -> threading.Lock:
        with self._guard:
            return self._locks.setdefault(player_id, threading.Lock())


class AssessmentManager:
    """
    Creates assessments and keeps the current flag consistent.

    Stateless apart from its locks; all entity state stays in the
    injected repository.
    """

    def __init__(
        self,
        repository: CoachingRepository,
        locks: Optional[PlayerLocks] = None,
    ) -> None:
        self._repo = repository
        self._locks = locks or PlayerLocks()

    def create_assessment(
        self,
        player_id: int,
        week_start: date,
        week_end: date,
        notes: Optional[str] = None,
        mark_current: bool = True,
    ) -> PerformanceAssessment:
        """
        Record a new assessment for a player.

        With mark_current, the new assessment is inserted unflagged, every
        assessment of the player currently flagged is demoted (normally
        one, but a store that drifted into several gets repaired), and
        then the new one is promoted. A rejected insert leaves the flags
        as they were. Without mark_current, existing flags are left alone.
        """
        # Fail before touching any flags if the player is unknown
        self._repo.players.get(player_id)

        if not mark_current:
            return self._repo.assessments.create(
                player_id=player_id,
                week_start=week_start,
                week_end=week_end,
                notes=notes,
                is_current=False,
            )

        with self._locks.for_player(player_id):
            created = self._repo.assessments.create(
                player_id=player_id,
                week_start=week_start,
                week_end=week_end,
                notes=notes,
                is_current=False,
            )
            demoted = self._demote_current(player_id)
            assessment = self._repo.assessments.update(created.id, is_current=True)

        if len(demoted) > 1:
            logger.warning(
                "Repaired multiple current assessments",
                extra={"player_id": player_id, "demoted_ids": demoted}
            )

        logger.info(
            "Created current assessment",
            extra={
                "player_id": player_id,
                "assessment_id": assessment.id,
                "week_start": week_start.isoformat(),
            }
        )
        return assessment

    def current_assessment(self, player_id: int) -> Optional[PerformanceAssessment]:
        """The player's current assessment, or None if none is flagged."""
        self._repo.players.get(player_id)
        current = self._repo.assessments.find(player_id=player_id, is_current=True)
        # Highest identity wins if the store ever drifted
        return max(current, key=lambda a: a.id) if current else None

    def list_assessments(self, player_id: int) -> list[PerformanceAssessment]:
        """All assessments of a player, newest week first."""
        self._repo.players.get(player_id)
        assessments = self._repo.assessments.find(player_id=player_id)
        return sorted(assessments, key=lambda a: (a.week_start, a.id), reverse=True)

    def record_shot_assessment(
        self,
        assessment_id: int,
        shot_type: str,
        rating: int,
        notes: Optional[str] = None,
        areas: Iterable[ShotAreaRating] = (),
        video_url: Optional[str] = None,
    ) -> list[PerformanceMetric]:
        """
        Store a shot-specific assessment as metrics.

        One metric rates the shot overall ("cover_drive"), then one per
        technique area ("cover_drive_hands_grip"). Returns the created
        metrics in that order. Nothing is written unless every rating
        is valid.
        """
        self._repo.assessments.get(assessment_id)
        areas = list(areas)

        unknown = [a.area_id for a in areas if a.area_id not in SHOT_TECHNIQUE_AREAS]
        if unknown:
            raise ValidationFailedError(
                f"Unknown technique areas: {', '.join(unknown)}"
            )

        evaluated = sum(1 for a in areas if a.rating > 0)
        rows = [dict(
            assessment_id=assessment_id,
            metric_type=shot_metric_type(shot_type),
            rating=rating,
            value=f"{evaluated} areas evaluated",
            notes=notes,
            video_url=video_url,
        )]
        rows.extend(
            dict(
                assessment_id=assessment_id,
                metric_type=shot_metric_type(shot_type, area.area_id),
                rating=area.rating,
                value="Needs Work" if area.rating == 1 else "Good",
                notes=area.notes,
                video_url=video_url,
            )
            for area in areas
        )

        # Every row is checked before the first write so a bad rating
        # leaves nothing of the shot behind
        for fields in rows:
            build_entity(PerformanceMetric, 0, fields)

        created = [self._repo.metrics.create(**fields) for fields in rows]

        logger.info(
            "Recorded shot assessment",
            extra={
                "assessment_id": assessment_id,
                "shot_type": shot_type,
                "metric_count": len(created),
            }
        )
        return created

    # -----------------------------------------------------------------------
    # Private Methods
    # -----------------------------------------------------------------------

    def _demote_current(self, player_id: int) -> list[int]:
        demoted = []
        for assessment in self._repo.assessments.find(player_id=player_id, is_current=True):
            self._repo.assessments.update(assessment.id, is_current=False)
            demoted.append(assessment.id)
        return demoted
