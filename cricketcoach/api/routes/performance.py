"""
Performance trend endpoints.

The series endpoint returns the raw weekly rows. The chart endpoint
pivots them into one line per metric type for the dashboard; gaps are
left open unless the caller asks for a different gap policy.
"""

from datetime import date
from typing import Annotated, Optional

from fastapi import APIRouter, Query
from pydantic import BaseModel

from ...core.coaching.performance import (
    GapPolicy,
    WeeklyScore,
    build_weekly_chart,
    build_weekly_series,
    metric_label,
)
from ..dependencies import RepositoryDep

router = APIRouter()


class WeeklyScoreResponse(BaseModel):
    week_start: date
    week_end: date
    assessment_id: int
    metric_type: str
    label: str
    score: float
    rating_count: int

    @classmethod
    def from_domain(cls, row: WeeklyScore) -> "WeeklyScoreResponse":
        return cls(
            week_start=row.week_start,
            week_end=row.week_end,
            assessment_id=row.assessment_id,
            metric_type=row.metric_type,
            label=metric_label(row.metric_type),
            score=row.score,
            rating_count=row.rating_count,
        )


class ChartPointResponse(BaseModel):
    assessment_id: int
    week_start: date
    week_end: date


class ChartSeriesResponse(BaseModel):
    metric_type: str
    label: str
    values: list[Optional[float]]


class WeeklyChartResponse(BaseModel):
    player_id: int
    gap_policy: GapPolicy
    points: list[ChartPointResponse]
    series: list[ChartSeriesResponse]


@router.get(
    "/players/{player_id}/performance/series",
    response_model=list[WeeklyScoreResponse],
    summary="Weekly scores per metric type",
    description="Oldest week first. Weeks without a rating for a metric have no row.",
)
async def get_weekly_series(player_id: int, repository: RepositoryDep) -> list[WeeklyScoreResponse]:
    return [WeeklyScoreResponse.from_domain(row) for row in build_weekly_series(repository, player_id)]


@router.get(
    "/players/{player_id}/performance/chart",
    response_model=WeeklyChartResponse,
    summary="Weekly trend chart",
)
async def get_weekly_chart(
    player_id: int,
    repository: RepositoryDep,
    gap_policy: Annotated[GapPolicy, Query()] = GapPolicy.LEAVE_GAPS,
) -> WeeklyChartResponse:
    chart = build_weekly_chart(build_weekly_series(repository, player_id), gap_policy)
    return WeeklyChartResponse(
        player_id=player_id,
        gap_policy=chart.gap_policy,
        points=[
            ChartPointResponse(
                assessment_id=p.assessment_id,
                week_start=p.week_start,
                week_end=p.week_end,
            )
            for p in chart.points
        ],
        series=[
            ChartSeriesResponse(metric_type=t, label=metric_label(t), values=values)
            for t, values in chart.series.items()
        ],
    )
