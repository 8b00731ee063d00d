"""
Snowflake repository for coaching entities.

This module implements the repository contract on top of Snowflake
tables. The repository:
1. Translates between domain entities and table rows
2. Encapsulates all SQL
3. Allocates identities from one sequence per entity kind, so two
   writers can never receive the same id

Any failure coming from the driver or the connection is reported as
StorageUnavailableError. Nothing is retried here; the caller decides.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, Mapping, Optional, Protocol, TypeVar

from ....core.coaching.errors import (
    CoachingError,
    EntityNotFoundError,
    PlayerHasDependentsError,
    StorageUnavailableError,
)
from ....core.coaching.models import (
    PerformanceAssessment,
    PerformanceMetric,
    Player,
    ProblemArea,
    Video,
)
from ....core.coaching.repository import (
    EntityStore,
    build_entity,
    check_filter_fields,
    check_references,
    field_names,
    merge_entity,
)

logger = logging.getLogger(__name__)

E = TypeVar("E")


class SnowflakeConnection(Protocol):
    """
    Protocol for Snowflake connections.

    Using a protocol means tests can provide a mock without
    importing the actual snowflake-connector-python.
    """

    def cursor(self): ...
    def commit(self) -> None: ...


@dataclass
class SnowflakeConfig:
    """Configuration for Snowflake connection."""
    account: str
    user: str
    password: Optional[str] = None
    private_key_path: Optional[str] = None
    private_key_base64: Optional[str] = None
    database: str = "CRICKETCOACH"
    schema: str = "COACHING"
    warehouse: str = "COMPUTE_WH"
    role: Optional[str] = None


# Table per entity kind. Column names match the dataclass field names.
TABLES: dict[type, str] = {
    Player: "players",
    PerformanceAssessment: "performance_assessments",
    PerformanceMetric: "performance_metrics",
    ProblemArea: "problem_areas",
    Video: "videos",
}

SCHEMA_STATEMENTS: tuple[str, ...] = (
    "CREATE SEQUENCE IF NOT EXISTS players_id_seq START = 1 INCREMENT = 1",
    "CREATE SEQUENCE IF NOT EXISTS performance_assessments_id_seq START = 1 INCREMENT = 1",
    "CREATE SEQUENCE IF NOT EXISTS performance_metrics_id_seq START = 1 INCREMENT = 1",
    "CREATE SEQUENCE IF NOT EXISTS problem_areas_id_seq START = 1 INCREMENT = 1",
    "CREATE SEQUENCE IF NOT EXISTS videos_id_seq START = 1 INCREMENT = 1",
    """
    CREATE TABLE IF NOT EXISTS players (
        id INTEGER PRIMARY KEY,
        name VARCHAR NOT NULL,
        batch VARCHAR NOT NULL,
        image VARCHAR NOT NULL,
        joined_date DATE NOT NULL,
        age INTEGER,
        dominant_hand VARCHAR,
        status VARCHAR
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS performance_assessments (
        id INTEGER PRIMARY KEY,
        player_id INTEGER NOT NULL REFERENCES players (id),
        week_start DATE NOT NULL,
        week_end DATE NOT NULL,
        notes VARCHAR,
        is_current BOOLEAN NOT NULL DEFAULT FALSE
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS performance_metrics (
        id INTEGER PRIMARY KEY,
        assessment_id INTEGER NOT NULL REFERENCES performance_assessments (id),
        metric_type VARCHAR NOT NULL,
        rating INTEGER NOT NULL,
        value VARCHAR,
        notes VARCHAR,
        video_url VARCHAR
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS problem_areas (
        id INTEGER PRIMARY KEY,
        assessment_id INTEGER NOT NULL REFERENCES performance_assessments (id),
        area_type VARCHAR NOT NULL,
        rating INTEGER NOT NULL,
        notes VARCHAR
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS videos (
        id INTEGER PRIMARY KEY,
        player_id INTEGER NOT NULL REFERENCES players (id),
        title VARCHAR NOT NULL,
        url VARCHAR NOT NULL,
        recorded_date DATE NOT NULL,
        shot_type VARCHAR,
        ball_speed VARCHAR,
        bat_connect VARCHAR
    )
    """,
)


def _to_column(value: Any) -> Any:
    """Flatten domain values into something the driver can bind."""
    if isinstance(value, Enum):
        return value.value
    return value


class SnowflakeEntityStore(Generic[E]):
    """
    Table-backed store for one entity kind.

    Column order comes from the entity dataclass, so SELECT results map
    straight back onto the constructor.
    """

    def __init__(
        self,
        connection: SnowflakeConnection,
        entity_type: type,
        parents: Optional[Mapping[str, EntityStore]] = None,
    ) -> None:
        self.entity_type = entity_type
        self._conn = connection
        self._parents = dict(parents or {})
        self._table = TABLES[entity_type]
        self._columns = field_names(entity_type)

    def all(self) -> list[E]:
        with self._cursor("list") as cursor:
            cursor.execute(
                f"SELECT {', '.join(self._columns)} FROM {self._table} ORDER BY id"
            )
            rows = cursor.fetchall()
        return [self._from_row(row) for row in rows]

    def get(self, entity_id: int) -> E:
        with self._cursor("get") as cursor:
            cursor.execute(
                f"SELECT {', '.join(self._columns)} FROM {self._table} WHERE id = %s",
                (entity_id,),
            )
            row = cursor.fetchone()
        if not row:
            raise EntityNotFoundError(self.entity_type.__name__, entity_id)
        return self._from_row(row)

    def create(self, **fields: Any) -> E:
        check_references(self._parents, fields)
        # Validate the shape before spending a sequence value
        build_entity(self.entity_type, 0, fields)

        with self._cursor("create") as cursor:
            cursor.execute(f"SELECT {self._table}_id_seq.NEXTVAL")
            new_id = cursor.fetchone()[0]
            entity = build_entity(self.entity_type, new_id, fields)

            placeholders = ", ".join(["%s"] * len(self._columns))
            cursor.execute(
                f"INSERT INTO {self._table} ({', '.join(self._columns)}) "
                f"VALUES ({placeholders})",
                self._to_row(entity),
            )
            self._conn.commit()

        logger.debug(
            "Created entity",
            extra={"kind": self.entity_type.__name__, "entity_id": new_id}
        )
        return entity

    def update(self, entity_id: int, **changes: Any) -> E:
        current = self.get(entity_id)
        check_references(self._parents, changes, partial=True)
        updated = merge_entity(current, changes)
        if not changes:
            return updated

        assignments = ", ".join(f"{column} = %s" for column in changes)
        params = tuple(_to_column(getattr(updated, column)) for column in changes)

        with self._cursor("update") as cursor:
            cursor.execute(
                f"UPDATE {self._table} SET {assignments} WHERE id = %s",
                params + (entity_id,),
            )
            self._conn.commit()
        return updated

    def find(self, **equals: Any) -> list[E]:
        check_filter_fields(self.entity_type, equals)
        where = " AND ".join(f"{column} = %s" for column in equals) or "TRUE"
        params = tuple(_to_column(value) for value in equals.values())

        with self._cursor("find") as cursor:
            cursor.execute(
                f"SELECT {', '.join(self._columns)} FROM {self._table} "
                f"WHERE {where} ORDER BY id",
                params,
            )
            rows = cursor.fetchall()
        return [self._from_row(row) for row in rows]

    def delete(self, entity_id: int) -> None:
        with self._cursor("delete") as cursor:
            cursor.execute(f"DELETE FROM {self._table} WHERE id = %s", (entity_id,))
            deleted = cursor.rowcount
            self._conn.commit()
        if not deleted:
            raise EntityNotFoundError(self.entity_type.__name__, entity_id)

    # -----------------------------------------------------------------------
    # Private Methods
    # -----------------------------------------------------------------------

    @contextmanager
    def _cursor(self, operation: str):
        """
        Open a cursor and translate driver failures.

        Domain errors raised inside the block pass through untouched.
        """
        try:
            cursor = self._conn.cursor()
        except Exception as e:
            logger.error(
                "Could not open Snowflake cursor",
                extra={"table": self._table, "operation": operation, "error": str(e)}
            )
            raise StorageUnavailableError(f"Storage unavailable: {e}") from e

        try:
            yield cursor
        except CoachingError:
            raise
        except Exception as e:
            logger.error(
                "Snowflake operation failed",
                extra={"table": self._table, "operation": operation, "error": str(e)}
            )
            raise StorageUnavailableError(f"Storage unavailable: {e}") from e
        finally:
            cursor.close()

    def _from_row(self, row) -> E:
        return self.entity_type(**dict(zip(self._columns, row)))

    def _to_row(self, entity: E) -> tuple:
        return tuple(_to_column(getattr(entity, column)) for column in self._columns)


class SnowflakeCoachingRepository:
    """
    The five coaching collections stored in Snowflake.

    Each store commits its own writes; there are no transactions that
    span entity kinds. Player deletion checks the child tables inside
    its own DELETE statement.
    """

    def __init__(self, connection: SnowflakeConnection) -> None:
        self._conn = connection

        self.players: SnowflakeEntityStore[Player] = SnowflakeEntityStore(connection, Player)
        self.assessments: SnowflakeEntityStore[PerformanceAssessment] = SnowflakeEntityStore(
            connection, PerformanceAssessment, parents={"player_id": self.players},
        )
        self.metrics: SnowflakeEntityStore[PerformanceMetric] = SnowflakeEntityStore(
            connection, PerformanceMetric, parents={"assessment_id": self.assessments},
        )
        self.problem_areas: SnowflakeEntityStore[ProblemArea] = SnowflakeEntityStore(
            connection, ProblemArea, parents={"assessment_id": self.assessments},
        )
        self.videos: SnowflakeEntityStore[Video] = SnowflakeEntityStore(
            connection, Video, parents={"player_id": self.players},
        )

    def delete_player(self, player_id: int) -> None:
        # One statement, so a child committed before it blocks the delete
        with self.players._cursor("delete_player") as cursor:
            cursor.execute(
                "DELETE FROM players WHERE id = %s "
                "AND NOT EXISTS (SELECT 1 FROM performance_assessments WHERE player_id = %s) "
                "AND NOT EXISTS (SELECT 1 FROM videos WHERE player_id = %s)",
                (player_id, player_id, player_id),
            )
            deleted = cursor.rowcount
            self._conn.commit()
        if deleted:
            return

        # Nothing deleted: either the player is unknown or it has dependents
        self.players.get(player_id)
        raise PlayerHasDependentsError(
            player_id,
            len(self.assessments.find(player_id=player_id)),
            len(self.videos.find(player_id=player_id)),
        )

    def ensure_schema(self) -> None:
        """Create sequences and tables if they do not exist yet."""
        cursor = self._conn.cursor()
        try:
            for statement in SCHEMA_STATEMENTS:
                cursor.execute(statement)
            self._conn.commit()
        except Exception as e:
            logger.error("Failed to create coaching schema", extra={"error": str(e)})
            raise StorageUnavailableError(f"Schema setup failed: {e}") from e
        finally:
            cursor.close()

        logger.info("Coaching schema ready", extra={"tables": list(TABLES.values())})
