"""
Unit tests for the Snowflake coaching repository.

The connection is a MagicMock, so these tests check the SQL contract
and the row mapping without a warehouse.
"""

from datetime import date
from unittest.mock import MagicMock

import pytest

from cricketcoach.core.coaching.errors import (
    EntityNotFoundError,
    PlayerHasDependentsError,
    StorageUnavailableError,
    ValidationFailedError,
)
from cricketcoach.core.coaching.models import ProblemAreaType
from cricketcoach.infrastructure.snowflake.repositories.coaching import (
    SCHEMA_STATEMENTS,
    SnowflakeCoachingRepository,
)

PLAYER_ROW = (1, "Rajiv Sharma", "Morning Batch", "", date(2023, 1, 15), 17, "Right", None)


@pytest.fixture
def connection():
    return MagicMock()


@pytest.fixture
def cursor(connection):
    return connection.cursor.return_value


@pytest.fixture
def repository(connection) -> SnowflakeCoachingRepository:
    return SnowflakeCoachingRepository(connection)


def executed_sql(cursor) -> list[str]:
    return [c.args[0] for c in cursor.execute.call_args_list]


class TestReads:

    def test_get_maps_row_to_entity(self, repository, cursor):
        cursor.fetchone.return_value = PLAYER_ROW

        player = repository.players.get(1)

        assert player.name == "Rajiv Sharma"
        assert player.joined_date == date(2023, 1, 15)
        assert cursor.execute.call_args.args[1] == (1,)
        cursor.close.assert_called_once()

    def test_get_missing_row_raises_not_found(self, repository, cursor):
        cursor.fetchone.return_value = None

        with pytest.raises(EntityNotFoundError, match="Player 4"):
            repository.players.get(4)

    def test_find_builds_where_clause_and_unwraps_enums(self, repository, cursor):
        cursor.fetchall.return_value = [(3, 1, "bat_swing", 4, None)]

        areas = repository.problem_areas.find(area_type=ProblemAreaType.BAT_SWING)

        sql, params = cursor.execute.call_args.args
        assert "WHERE area_type = %s ORDER BY id" in sql
        assert params == ("bat_swing",)
        assert areas[0].area_type is ProblemAreaType.BAT_SWING

    def test_find_without_criteria_lists_everything(self, repository, cursor):
        cursor.fetchall.return_value = []

        repository.videos.find()

        assert "WHERE TRUE" in cursor.execute.call_args.args[0]

    def test_find_unknown_field_never_reaches_driver(self, repository, cursor):
        with pytest.raises(ValidationFailedError):
            repository.videos.find(speed="Fast")

        cursor.execute.assert_not_called()


class TestWrites:

    def test_create_takes_identity_from_sequence(self, repository, connection, cursor):
        cursor.fetchone.return_value = (7,)

        player = repository.players.create(
            name="Meera Reddy",
            batch="Morning Batch",
            image="",
            joined_date=date(2023, 3, 15),
        )

        assert player.id == 7
        sql = executed_sql(cursor)
        assert sql[0] == "SELECT players_id_seq.NEXTVAL"
        assert sql[1].startswith("INSERT INTO players")
        assert cursor.execute.call_args.args[1][0] == 7
        connection.commit.assert_called_once()

    def test_invalid_record_does_not_spend_sequence(self, repository, cursor):
        with pytest.raises(ValidationFailedError):
            repository.players.create(name=" ", batch="x", image="", joined_date=date(2023, 1, 1))

        cursor.execute.assert_not_called()

    def test_create_child_checks_parent_first(self, repository, cursor):
        cursor.fetchone.return_value = None

        with pytest.raises(EntityNotFoundError, match="Player 9"):
            repository.videos.create(
                player_id=9, title="Nets", url="videos/9/a.mp4", recorded_date=date(2023, 7, 31)
            )

        assert not any("NEXTVAL" in sql for sql in executed_sql(cursor))

    def test_update_sets_only_changed_columns(self, repository, cursor):
        cursor.fetchone.return_value = PLAYER_ROW

        updated = repository.players.update(1, status="stable")

        sql, params = cursor.execute.call_args.args
        assert sql == "UPDATE players SET status = %s WHERE id = %s"
        assert params == ("stable", 1)
        assert updated.status == "stable"

    def test_delete_missing_row_raises_not_found(self, repository, cursor):
        cursor.rowcount = 0

        with pytest.raises(EntityNotFoundError):
            repository.players.delete(5)


class TestDeletePlayer:
    """The dependent check lives inside the DELETE statement itself."""

    def test_delete_is_conditional_on_no_children(self, repository, connection, cursor):
        cursor.rowcount = 1

        repository.delete_player(3)

        sql, params = cursor.execute.call_args.args
        assert sql.startswith("DELETE FROM players WHERE id = %s")
        assert "NOT EXISTS (SELECT 1 FROM performance_assessments WHERE player_id = %s)" in sql
        assert "NOT EXISTS (SELECT 1 FROM videos WHERE player_id = %s)" in sql
        assert params == (3, 3, 3)
        assert cursor.execute.call_count == 1
        connection.commit.assert_called_once()

    def test_nothing_deleted_with_children_reports_counts(self, repository, cursor):
        cursor.rowcount = 0
        cursor.fetchone.return_value = PLAYER_ROW
        cursor.fetchall.side_effect = [
            [(4, 1, date(2023, 7, 24), date(2023, 7, 30), None, True)],
            [],
        ]

        with pytest.raises(PlayerHasDependentsError) as exc_info:
            repository.delete_player(1)

        assert exc_info.value.assessments == 1
        assert exc_info.value.videos == 0

    def test_nothing_deleted_for_unknown_player_raises_not_found(self, repository, cursor):
        cursor.rowcount = 0
        cursor.fetchone.return_value = None

        with pytest.raises(EntityNotFoundError, match="Player 8"):
            repository.delete_player(8)


class TestFailures:

    def test_driver_error_becomes_storage_unavailable(self, repository, cursor):
        cursor.execute.side_effect = RuntimeError("warehouse suspended")

        with pytest.raises(StorageUnavailableError, match="warehouse suspended"):
            repository.players.all()

        cursor.close.assert_called_once()

    def test_cursor_failure_becomes_storage_unavailable(self, repository, connection):
        connection.cursor.side_effect = RuntimeError("session expired")

        with pytest.raises(StorageUnavailableError):
            repository.players.get(1)


class TestSchema:

    def test_ensure_schema_runs_every_statement(self, repository, connection, cursor):
        repository.ensure_schema()

        assert cursor.execute.call_count == len(SCHEMA_STATEMENTS)
        connection.commit.assert_called_once()
