"""Shared fixtures: a fresh in-memory repository and a small roster."""

from datetime import date

import pytest

from cricketcoach.infrastructure.persistence.memory import InMemoryCoachingRepository


@pytest.fixture
def repository() -> InMemoryCoachingRepository:
    return InMemoryCoachingRepository()


@pytest.fixture
def player(repository):
    """A right-handed batter with no history."""
    return repository.players.create(
        name="Rajiv Sharma",
        batch="Morning Batch",
        image="players/rajiv.jpg",
        joined_date=date(2023, 1, 15),
        age=17,
        dominant_hand="Right",
    )


@pytest.fixture
def assessment(repository, player):
    return repository.assessments.create(
        player_id=player.id,
        week_start=date(2023, 7, 24),
        week_end=date(2023, 7, 30),
        is_current=True,
    )
