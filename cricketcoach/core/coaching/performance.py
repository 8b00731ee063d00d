"""
Weekly performance series for trend charts.

build_weekly_series turns the metrics attached to a player's assessments
into (week, metric type, score) rows. Only real ratings produce rows: a
metric type that was not rated in some week simply has no row for it.
The engine never invents a value for a missing week.

Charts usually want one line per metric type, and a line with holes can
look broken. Whether and how to close those holes is a presentation
decision, so it is made explicitly through a GapPolicy when the rows are
pivoted into a WeeklyChart. The default leaves the holes in.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Callable, Optional, Sequence

from .repository import CoachingRepository

ONE_DECIMAL = Decimal("0.1")

# Display names for the metric types the assessment form produces.
# Anything else (new shot types, technique areas) is derived from the tag.
METRIC_LABELS: dict[str, str] = {
    "reaction_time": "Reaction Time",
    "bat_connect": "Bat Connect",
    "shot_selection": "Shot Selection",
    "footwork": "Footwork",
    "cover_drive": "Cover Drive",
    "straight_drive": "Straight Drive",
}


def metric_label(metric_type: str) -> str:
    """Human-readable name for a metric type."""
    if metric_type in METRIC_LABELS:
        return METRIC_LABELS[metric_type]
    return " ".join(word.capitalize() for word in metric_type.split("_") if word)


def mean_score(ratings: Sequence[int]) -> float:
    """Arithmetic mean rounded half-up to one decimal place."""
    mean = Decimal(sum(ratings)) / Decimal(len(ratings))
    return float(mean.quantize(ONE_DECIMAL, rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class WeeklyScore:
    """One real data point: a metric type's score in one assessment week."""
    week_start: date
    week_end: date
    assessment_id: int
    metric_type: str
    score: float
    rating_count: int


def build_weekly_series(repository: CoachingRepository, player_id: int) -> list[WeeklyScore]:
    """
    Derive the player's per-week, per-metric-type scores.

    Assessments form the time axis, earliest week first; assessments
    sharing a week_start keep identity order and stay separate points.
    Within an assessment, rows follow the order in which each metric type
    was first rated. Pure read: nothing in the repository changes.
    """
    repository.players.get(player_id)
    assessments = sorted(
        repository.assessments.find(player_id=player_id),
        key=lambda a: (a.week_start, a.id),
    )

    rows: list[WeeklyScore] = []
    for assessment in assessments:
        metrics = sorted(
            repository.metrics.find(assessment_id=assessment.id),
            key=lambda m: m.id,
        )

        grouped: dict[str, list[int]] = {}
        for metric in metrics:
            grouped.setdefault(metric.metric_type, []).append(metric.rating)

        for metric_type, ratings in grouped.items():
            rows.append(WeeklyScore(
                week_start=assessment.week_start,
                week_end=assessment.week_end,
                assessment_id=assessment.id,
                metric_type=metric_type,
                score=mean_score(ratings),
                rating_count=len(ratings),
            ))

    return rows


# ---------------------------------------------------------------------------
# Chart pivot and gap policies
# ---------------------------------------------------------------------------

class GapPolicy(Enum):
    """
    How a chart line treats weeks in which its metric was not rated.

    LEAVE_GAPS: the week has no value (None); the line is broken there.
    CARRY_FORWARD: the week repeats the last real value of that metric.
    Weeks before the first real value stay None under every policy.
    """
    LEAVE_GAPS = "leave_gaps"
    CARRY_FORWARD = "carry_forward"


def _leave_gaps(values: list[Optional[float]]) -> list[Optional[float]]:
    return list(values)


def _carry_forward(values: list[Optional[float]]) -> list[Optional[float]]:
    filled: list[Optional[float]] = []
    last: Optional[float] = None
    for value in values:
        if value is not None:
            last = value
        filled.append(last)
    return filled


GAP_FILLERS: dict[GapPolicy, Callable[[list[Optional[float]]], list[Optional[float]]]] = {
    GapPolicy.LEAVE_GAPS: _leave_gaps,
    GapPolicy.CARRY_FORWARD: _carry_forward,
}


@dataclass(frozen=True)
class ChartPoint:
    """A position on the chart's time axis."""
    assessment_id: int
    week_start: date
    week_end: date


@dataclass
class WeeklyChart:
    """
    Rows pivoted into one aligned line per metric type.

    series[metric_type][i] is the value at points[i]. Keys are whatever
    metric types appear in the data, so new types need no code change.
    """
    points: list[ChartPoint] = field(default_factory=list)
    series: dict[str, list[Optional[float]]] = field(default_factory=dict)
    gap_policy: GapPolicy = GapPolicy.LEAVE_GAPS

    @property
    def metric_types(self) -> list[str]:
        return list(self.series)


def build_weekly_chart(
    rows: Sequence[WeeklyScore],
    gap_policy: GapPolicy = GapPolicy.LEAVE_GAPS,
) -> WeeklyChart:
    """
    Pivot weekly rows into aligned series, filling holes per gap_policy.

    Only weeks that have at least one row appear on the axis; the rows
    are expected in the order build_weekly_series returns them.
    """
    points: list[ChartPoint] = []
    index: dict[int, int] = {}
    for row in rows:
        if row.assessment_id not in index:
            index[row.assessment_id] = len(points)
            points.append(ChartPoint(row.assessment_id, row.week_start, row.week_end))

    raw: dict[str, list[Optional[float]]] = {}
    for row in rows:
        line = raw.setdefault(row.metric_type, [None] * len(points))
        line[index[row.assessment_id]] = row.score

    filler = GAP_FILLERS[gap_policy]
    return WeeklyChart(
        points=points,
        series={metric_type: filler(values) for metric_type, values in raw.items()},
        gap_policy=gap_policy,
    )
