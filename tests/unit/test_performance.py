"""
Unit tests for the weekly performance engine.

Rows come only from real ratings; gap filling is a separate, explicit
step when rows are pivoted into a chart.
"""

from datetime import date

import pytest

from cricketcoach.core.coaching.errors import EntityNotFoundError
from cricketcoach.core.coaching.performance import (
    GapPolicy,
    WeeklyScore,
    build_weekly_chart,
    build_weekly_series,
    mean_score,
    metric_label,
)

WEEK_1 = (date(2023, 7, 3), date(2023, 7, 9))
WEEK_2 = (date(2023, 7, 10), date(2023, 7, 16))
WEEK_3 = (date(2023, 7, 17), date(2023, 7, 23))


def add_assessment(repository, player, week):
    return repository.assessments.create(
        player_id=player.id, week_start=week[0], week_end=week[1]
    )


def rate(repository, assessment, metric_type, *ratings):
    for rating in ratings:
        repository.metrics.create(
            assessment_id=assessment.id, metric_type=metric_type, rating=rating
        )


class TestMeanScore:

    def test_exact_mean(self):
        assert mean_score([3, 5]) == 4.0

    def test_rounds_half_up(self):
        """3.25 rounds to 3.3, not banker's 3.2."""
        assert mean_score([3, 3, 3, 4]) == 3.3

    def test_one_decimal_place(self):
        assert mean_score([1, 2, 2]) == 1.7


class TestMetricLabel:

    def test_known_type(self):
        assert metric_label("bat_connect") == "Bat Connect"

    def test_unknown_type_is_derived(self):
        assert metric_label("cover_drive_hands_grip") == "Cover Drive Hands Grip"


class TestBuildWeeklySeries:

    def test_averages_ratings_per_week_and_type(self, repository, player):
        first = add_assessment(repository, player, WEEK_1)
        second = add_assessment(repository, player, WEEK_2)
        rate(repository, first, "bat_connect", 3, 5)
        rate(repository, second, "bat_connect", 4)

        rows = build_weekly_series(repository, player.id)

        assert [(r.assessment_id, r.score, r.rating_count) for r in rows] == [
            (first.id, 4.0, 2),
            (second.id, 4.0, 1),
        ]

    def test_weeks_are_ordered_oldest_first(self, repository, player):
        late = add_assessment(repository, player, WEEK_3)
        early = add_assessment(repository, player, WEEK_1)
        rate(repository, late, "footwork", 3)
        rate(repository, early, "footwork", 2)

        rows = build_weekly_series(repository, player.id)

        assert [r.week_start for r in rows] == [WEEK_1[0], WEEK_3[0]]

    def test_same_week_assessments_stay_separate_in_identity_order(self, repository, player):
        first = add_assessment(repository, player, WEEK_1)
        second = add_assessment(repository, player, WEEK_1)
        rate(repository, second, "footwork", 4)
        rate(repository, first, "footwork", 2)

        rows = build_weekly_series(repository, player.id)

        assert [(r.assessment_id, r.score) for r in rows] == [(first.id, 2.0), (second.id, 4.0)]

    def test_unrated_week_produces_no_row(self, repository, player):
        """No fabricated values: a skipped week is simply absent."""
        first = add_assessment(repository, player, WEEK_1)
        second = add_assessment(repository, player, WEEK_2)
        rate(repository, first, "bat_connect", 3)
        rate(repository, first, "footwork", 4)
        rate(repository, second, "bat_connect", 5)

        rows = build_weekly_series(repository, player.id)

        footwork = [r for r in rows if r.metric_type == "footwork"]
        assert [r.assessment_id for r in footwork] == [first.id]

    def test_types_follow_first_rating_order(self, repository, player):
        assessment = add_assessment(repository, player, WEEK_1)
        rate(repository, assessment, "reaction_time", 80)
        rate(repository, assessment, "bat_connect", 70)
        rate(repository, assessment, "reaction_time", 90)

        rows = build_weekly_series(repository, player.id)

        assert [r.metric_type for r in rows] == ["reaction_time", "bat_connect"]
        assert rows[0].score == 85.0

    def test_other_players_are_excluded(self, repository, player):
        other = repository.players.create(
            name="Priya Patel", batch="Evening Batch", image="", joined_date=date(2023, 1, 10)
        )
        rate(repository, add_assessment(repository, other, WEEK_1), "footwork", 5)

        assert build_weekly_series(repository, player.id) == []

    def test_is_deterministic_and_read_only(self, repository, player):
        assessment = add_assessment(repository, player, WEEK_1)
        rate(repository, assessment, "bat_connect", 3, 4)
        before = (repository.assessments.all(), repository.metrics.all())

        first = build_weekly_series(repository, player.id)
        second = build_weekly_series(repository, player.id)

        assert first == second
        assert (repository.assessments.all(), repository.metrics.all()) == before

    def test_unknown_player_raises_not_found(self, repository):
        with pytest.raises(EntityNotFoundError):
            build_weekly_series(repository, 3)


class TestBuildWeeklyChart:

    @pytest.fixture
    def rows(self) -> list[WeeklyScore]:
        """bat_connect rated in weeks 1 and 3, footwork in weeks 2 and 3."""
        return [
            WeeklyScore(WEEK_1[0], WEEK_1[1], 1, "bat_connect", 3.0, 1),
            WeeklyScore(WEEK_2[0], WEEK_2[1], 2, "footwork", 2.5, 2),
            WeeklyScore(WEEK_3[0], WEEK_3[1], 3, "bat_connect", 4.0, 1),
            WeeklyScore(WEEK_3[0], WEEK_3[1], 3, "footwork", 3.0, 1),
        ]

    def test_points_follow_row_order(self, rows):
        chart = build_weekly_chart(rows)

        assert [p.assessment_id for p in chart.points] == [1, 2, 3]
        assert chart.metric_types == ["bat_connect", "footwork"]

    def test_leave_gaps_is_default(self, rows):
        chart = build_weekly_chart(rows)

        assert chart.gap_policy is GapPolicy.LEAVE_GAPS
        assert chart.series["bat_connect"] == [3.0, None, 4.0]
        assert chart.series["footwork"] == [None, 2.5, 3.0]

    def test_carry_forward_repeats_last_real_value(self, rows):
        chart = build_weekly_chart(rows, GapPolicy.CARRY_FORWARD)

        assert chart.series["bat_connect"] == [3.0, 3.0, 4.0]

    def test_carry_forward_never_fills_before_first_value(self, rows):
        chart = build_weekly_chart(rows, GapPolicy.CARRY_FORWARD)

        assert chart.series["footwork"][0] is None

    def test_empty_rows_give_empty_chart(self):
        chart = build_weekly_chart([])

        assert chart.points == []
        assert chart.series == {}
