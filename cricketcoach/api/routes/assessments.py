"""
Assessment endpoints.

A coaching session produces one assessment for the week, then the coach
attaches ratings to it: problem areas (star-rated focus areas), general
metrics, and shot-specific assessments that expand into several metrics.

Creating an assessment goes through AssessmentManager so the newest one
becomes the player's current assessment and the previous one is demoted.
"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, status
from pydantic import BaseModel, Field

from ...core.coaching.assessments import ShotAreaRating, week_bounds
from ...core.coaching.models import (
    PerformanceAssessment,
    PerformanceMetric,
    ProblemArea,
    ProblemAreaType,
)
from ..dependencies import AssessmentManagerDep, RepositoryDep

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Request/Response Models
# ---------------------------------------------------------------------------

class AssessmentCreateRequest(BaseModel):
    """
    New weekly assessment.

    Leave the week out to stamp the assessment with the current
    Monday-to-Sunday week.
    """
    week_start: Optional[date] = Field(None, description="First day of the assessed week")
    week_end: Optional[date] = Field(None, description="Last day of the assessed week")
    notes: Optional[str] = Field(None, max_length=5000, description="Session notes")
    mark_current: bool = Field(
        default=True,
        description="Make this the player's current assessment (demotes the previous one)",
    )


class AssessmentResponse(BaseModel):
    id: int
    player_id: int
    week_start: date
    week_end: date
    notes: Optional[str] = None
    is_current: bool

    @classmethod
    def from_domain(cls, assessment: PerformanceAssessment) -> "AssessmentResponse":
        return cls(
            id=assessment.id,
            player_id=assessment.player_id,
            week_start=assessment.week_start,
            week_end=assessment.week_end,
            notes=assessment.notes,
            is_current=assessment.is_current,
        )


class MetricCreateRequest(BaseModel):
    """A rating for any metric type; new types need no registration."""
    metric_type: str = Field(min_length=1, max_length=100, description="e.g. 'bat_connect', 'cover_drive'")
    rating: int = Field(ge=0, le=100, description="1-5 for star-rated metrics, 0-100 for percentages")
    value: Optional[str] = Field(None, max_length=100, description="Display value like '0.65s'")
    notes: Optional[str] = Field(None, max_length=5000)
    video_url: Optional[str] = None


class MetricResponse(BaseModel):
    id: int
    assessment_id: int
    metric_type: str
    rating: int
    value: Optional[str] = None
    notes: Optional[str] = None
    video_url: Optional[str] = None

    @classmethod
    def from_domain(cls, metric: PerformanceMetric) -> "MetricResponse":
        return cls(
            id=metric.id,
            assessment_id=metric.assessment_id,
            metric_type=metric.metric_type,
            rating=metric.rating,
            value=metric.value,
            notes=metric.notes,
            video_url=metric.video_url,
        )


class ProblemAreaCreateRequest(BaseModel):
    area_type: ProblemAreaType
    rating: int = Field(ge=1, le=5, description="1-5 stars")
    notes: Optional[str] = Field(None, max_length=5000)


class ProblemAreaResponse(BaseModel):
    id: int
    assessment_id: int
    area_type: ProblemAreaType
    rating: int
    notes: Optional[str] = None

    @classmethod
    def from_domain(cls, area: ProblemArea) -> "ProblemAreaResponse":
        return cls(
            id=area.id,
            assessment_id=area.assessment_id,
            area_type=area.area_type,
            rating=area.rating,
            notes=area.notes,
        )


class ShotAreaRequest(BaseModel):
    area_id: str = Field(description="Technique area, e.g. 'hands_grip'")
    rating: int = Field(ge=0, le=5)
    notes: Optional[str] = None


class ShotAssessmentRequest(BaseModel):
    """Overall rating for a shot plus optional per-technique-area ratings."""
    shot_type: str = Field(min_length=1, max_length=100, description="e.g. 'Cover Drive'")
    rating: int = Field(ge=0, le=5)
    notes: Optional[str] = Field(None, max_length=5000)
    areas: list[ShotAreaRequest] = Field(default_factory=list)
    video_url: Optional[str] = None


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get(
    "/players/{player_id}/assessments",
    response_model=list[AssessmentResponse],
    summary="List a player's assessments",
    description="Newest week first.",
)
async def list_player_assessments(
    player_id: int,
    manager: AssessmentManagerDep,
) -> list[AssessmentResponse]:
    return [AssessmentResponse.from_domain(a) for a in manager.list_assessments(player_id)]


@router.post(
    "/players/{player_id}/assessments",
    response_model=AssessmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record a weekly assessment",
)
async def create_assessment(
    player_id: int,
    request: AssessmentCreateRequest,
    manager: AssessmentManagerDep,
) -> AssessmentResponse:
    default_start, default_end = week_bounds(request.week_start or date.today())
    week_start = request.week_start or default_start
    week_end = request.week_end or default_end

    assessment = manager.create_assessment(
        player_id=player_id,
        week_start=week_start,
        week_end=week_end,
        notes=request.notes,
        mark_current=request.mark_current,
    )
    return AssessmentResponse.from_domain(assessment)


@router.get(
    "/players/{player_id}/assessments/current",
    response_model=Optional[AssessmentResponse],
    summary="Get a player's current assessment",
    description="Returns null when no assessment is flagged current.",
)
async def get_current_assessment(
    player_id: int,
    manager: AssessmentManagerDep,
) -> Optional[AssessmentResponse]:
    current = manager.current_assessment(player_id)
    return AssessmentResponse.from_domain(current) if current else None


@router.get(
    "/assessments/{assessment_id}",
    response_model=AssessmentResponse,
    summary="Get an assessment",
)
async def get_assessment(assessment_id: int, repository: RepositoryDep) -> AssessmentResponse:
    return AssessmentResponse.from_domain(repository.assessments.get(assessment_id))


@router.get(
    "/assessments/{assessment_id}/metrics",
    response_model=list[MetricResponse],
    summary="List an assessment's metrics",
)
async def list_metrics(assessment_id: int, repository: RepositoryDep) -> list[MetricResponse]:
    repository.assessments.get(assessment_id)
    metrics = repository.metrics.find(assessment_id=assessment_id)
    return [MetricResponse.from_domain(m) for m in metrics]


@router.post(
    "/assessments/{assessment_id}/metrics",
    response_model=MetricResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a metric rating",
)
async def create_metric(
    assessment_id: int,
    request: MetricCreateRequest,
    repository: RepositoryDep,
) -> MetricResponse:
    metric = repository.metrics.create(assessment_id=assessment_id, **request.model_dump())

    logger.info(
        "Metric recorded",
        extra={
            "assessment_id": assessment_id,
            "metric_type": metric.metric_type,
            "rating": metric.rating,
        }
    )
    return MetricResponse.from_domain(metric)


@router.get(
    "/assessments/{assessment_id}/problem-areas",
    response_model=list[ProblemAreaResponse],
    summary="List an assessment's problem areas",
)
async def list_problem_areas(
    assessment_id: int,
    repository: RepositoryDep,
) -> list[ProblemAreaResponse]:
    repository.assessments.get(assessment_id)
    areas = repository.problem_areas.find(assessment_id=assessment_id)
    return [ProblemAreaResponse.from_domain(a) for a in areas]


@router.post(
    "/assessments/{assessment_id}/problem-areas",
    response_model=ProblemAreaResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Rate a problem area",
)
async def create_problem_area(
    assessment_id: int,
    request: ProblemAreaCreateRequest,
    repository: RepositoryDep,
) -> ProblemAreaResponse:
    area = repository.problem_areas.create(assessment_id=assessment_id, **request.model_dump())
    return ProblemAreaResponse.from_domain(area)


@router.post(
    "/assessments/{assessment_id}/shot-assessments",
    response_model=list[MetricResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Record a shot-specific assessment",
    description=(
        "Stores the overall shot rating as metric '<shot>' and each technique "
        "area as metric '<shot>_<area>'."
    ),
)
async def create_shot_assessment(
    assessment_id: int,
    request: ShotAssessmentRequest,
    manager: AssessmentManagerDep,
) -> list[MetricResponse]:
    metrics = manager.record_shot_assessment(
        assessment_id=assessment_id,
        shot_type=request.shot_type,
        rating=request.rating,
        notes=request.notes,
        areas=[
            ShotAreaRating(area_id=a.area_id, rating=a.rating, notes=a.notes)
            for a in request.areas
        ],
        video_url=request.video_url,
    )
    return [MetricResponse.from_domain(m) for m in metrics]
