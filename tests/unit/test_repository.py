"""
Unit tests for the in-memory coaching repository.

Covers identity allocation, referential checks, filtered scans and the
roster removal rule.
"""

import threading
from datetime import date

import pytest

from cricketcoach.core.coaching.errors import (
    EntityNotFoundError,
    PlayerHasDependentsError,
    ValidationFailedError,
)
from cricketcoach.core.coaching.models import ProblemAreaType
from cricketcoach.core.coaching.roster import remove_player
from cricketcoach.infrastructure.persistence.demo_data import load_demo_roster
from cricketcoach.infrastructure.persistence.memory import InMemoryCoachingRepository


def make_player(repository, name="Meera Reddy"):
    return repository.players.create(
        name=name,
        batch="Morning Batch",
        image="",
        joined_date=date(2023, 3, 15),
    )


class TestIdentityAllocation:
    """Identities are allocated by the store, never by the caller."""

    def test_first_identity_is_one_and_increments(self, repository):
        first = make_player(repository, "A")
        second = make_player(repository, "B")

        assert (first.id, second.id) == (1, 2)

    def test_each_kind_has_its_own_identity_space(self, repository, player):
        assessment = repository.assessments.create(
            player_id=player.id,
            week_start=date(2023, 7, 3),
            week_end=date(2023, 7, 9),
        )
        assert assessment.id == 1

    def test_identities_are_not_reused_after_delete(self, repository):
        first = make_player(repository, "A")
        repository.players.delete(first.id)

        assert make_player(repository, "B").id == 2

    def test_rejected_record_does_not_consume_identity(self, repository):
        with pytest.raises(ValidationFailedError):
            repository.players.create(name="", batch="x", image="", joined_date=date(2023, 1, 1))

        assert make_player(repository).id == 1

    def test_caller_supplied_identity_is_rejected(self, repository):
        with pytest.raises(ValidationFailedError, match="allocated"):
            repository.players.create(
                id=99, name="A", batch="x", image="", joined_date=date(2023, 1, 1)
            )

    def test_concurrent_creates_get_distinct_identities(self, repository):
        def create_many():
            for _ in range(50):
                make_player(repository)

        threads = [threading.Thread(target=create_many) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        ids = [p.id for p in repository.players.all()]
        assert len(ids) == 200
        assert len(set(ids)) == 200


class TestCrud:

    def test_get_returns_created_entity(self, repository, player):
        assert repository.players.get(player.id) == player

    def test_get_unknown_identity_raises_not_found(self, repository):
        with pytest.raises(EntityNotFoundError) as exc_info:
            repository.players.get(5)
        assert exc_info.value.kind == "Player"

    def test_update_merges_only_given_fields(self, repository, player):
        updated = repository.players.update(player.id, status="stable")

        assert updated.status == "stable"
        assert updated.name == player.name
        assert repository.players.get(player.id) == updated

    def test_update_cannot_change_identity(self, repository, player):
        with pytest.raises(ValidationFailedError):
            repository.players.update(player.id, id=10)

    def test_update_unknown_field_is_rejected(self, repository, player):
        with pytest.raises(ValidationFailedError):
            repository.players.update(player.id, nickname="Raj")

    def test_delete_unknown_identity_raises_not_found(self, repository):
        with pytest.raises(EntityNotFoundError):
            repository.videos.delete(1)

    def test_listing_follows_identity_order(self, repository):
        names = ["C", "A", "B"]
        for name in names:
            make_player(repository, name)

        assert [p.name for p in repository.players.all()] == names


class TestReferences:
    """Children must point at an existing parent."""

    def test_missing_foreign_key_is_rejected(self, repository):
        with pytest.raises(ValidationFailedError, match="player_id is required"):
            repository.assessments.create(week_start=date(2023, 7, 3), week_end=date(2023, 7, 9))

    def test_unknown_parent_raises_not_found(self, repository):
        with pytest.raises(EntityNotFoundError, match="Player 3"):
            repository.videos.create(
                player_id=3,
                title="Nets",
                url="videos/3/a.mp4",
                recorded_date=date(2023, 7, 31),
            )

    def test_metric_requires_existing_assessment(self, repository):
        with pytest.raises(EntityNotFoundError, match="PerformanceAssessment"):
            repository.metrics.create(assessment_id=1, metric_type="footwork", rating=70)

    def test_update_cannot_orphan_a_child(self, repository, assessment):
        with pytest.raises(EntityNotFoundError):
            repository.assessments.update(assessment.id, player_id=404)


class TestFind:

    def test_find_filters_by_every_given_field(self, repository, player, assessment):
        repository.assessments.create(
            player_id=player.id,
            week_start=date(2023, 7, 17),
            week_end=date(2023, 7, 23),
        )

        current = repository.assessments.find(player_id=player.id, is_current=True)

        assert current == [assessment]

    def test_find_matches_enum_fields(self, repository, assessment):
        repository.problem_areas.create(
            assessment_id=assessment.id, area_type="bat_swing", rating=4
        )

        found = repository.problem_areas.find(area_type=ProblemAreaType.BAT_SWING)

        assert len(found) == 1

    def test_find_with_unknown_field_is_rejected(self, repository):
        with pytest.raises(ValidationFailedError, match="Unknown Video fields"):
            repository.videos.find(speed="Fast")


class TestRemovePlayer:
    """Hard delete only succeeds for players without history."""

    def test_removes_player_without_history(self, repository, player):
        remove_player(repository, player.id)

        assert repository.players.all() == []

    def test_rejects_player_with_assessments(self, repository, player, assessment):
        with pytest.raises(PlayerHasDependentsError) as exc_info:
            remove_player(repository, player.id)

        assert exc_info.value.assessments == 1
        assert repository.players.get(player.id) == player

    def test_unknown_player_raises_not_found(self, repository):
        with pytest.raises(EntityNotFoundError):
            remove_player(repository, 1)

    def test_assessment_created_during_removal_waits_and_is_rejected(
        self, repository, player, monkeypatch
    ):
        """A child insert racing the dependent scan cannot slip in before the delete."""
        errors = []

        def create_assessment():
            try:
                repository.assessments.create(
                    player_id=player.id,
                    week_start=date(2023, 7, 24),
                    week_end=date(2023, 7, 30),
                )
            except EntityNotFoundError as e:
                errors.append(e)

        writer = threading.Thread(target=create_assessment)
        scan_videos = repository.videos.find

        def find_then_race(**equals):
            writer.start()
            writer.join(timeout=0.2)
            # Still blocked on the repository lock held by the removal
            assert writer.is_alive()
            return scan_videos(**equals)

        monkeypatch.setattr(repository.videos, "find", find_then_race)

        remove_player(repository, player.id)
        writer.join()

        assert repository.players.all() == []
        assert repository.assessments.all() == []
        assert len(errors) == 1


class TestDemoRoster:

    def test_loads_roster_with_single_current_assessment(self):
        repository = InMemoryCoachingRepository()

        players = load_demo_roster(repository)

        featured = players[0]
        assert len(players) == 4
        assessments = repository.assessments.find(player_id=featured.id)
        assert len(assessments) == 4
        current = [a for a in assessments if a.is_current]
        assert len(current) == 1
        assert current[0].week_start == max(a.week_start for a in assessments)
        assert len(repository.metrics.all()) == 6
        assert len(repository.videos.find(player_id=featured.id)) == 4
        assert len(repository.problem_areas.all()) == 4
