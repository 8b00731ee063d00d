"""
In-memory coaching repository.

This is the default backing store: arena-style dictionaries keyed by
integer identity, one counter per entity kind. Nothing is global; each
InMemoryCoachingRepository owns its own tables, and the API hands the
same instance to every request.

A single re-entrant lock is shared by all five stores so that identity
allocation, foreign-key checks and the write they guard happen as one
step, even when FastAPI runs sync dependencies in its thread pool.
"""

import logging
import threading
from typing import Any, Generic, Mapping, Optional, TypeVar

from ...core.coaching.errors import EntityNotFoundError, PlayerHasDependentsError
from ...core.coaching.models import (
    PerformanceAssessment,
    PerformanceMetric,
    Player,
    ProblemArea,
    Video,
)
from ...core.coaching.repository import (
    EntityStore,
    build_entity,
    check_filter_fields,
    check_references,
    merge_entity,
)

logger = logging.getLogger(__name__)

E = TypeVar("E")


class InMemoryEntityStore(Generic[E]):
    """Dictionary-backed store for one entity kind."""

    def __init__(
        self,
        entity_type: type,
        lock: threading.RLock,
        parents: Optional[Mapping[str, EntityStore]] = None,
    ) -> None:
        self.entity_type = entity_type
        self._lock = lock
        self._parents = dict(parents or {})
        self._rows: dict[int, E] = {}
        self._next_id = 1

    def all(self) -> list[E]:
        with self._lock:
            return list(self._rows.values())

    def get(self, entity_id: int) -> E:
        with self._lock:
            try:
                return self._rows[entity_id]
            except KeyError:
                raise EntityNotFoundError(self.entity_type.__name__, entity_id) from None

    def create(self, **fields: Any) -> E:
        with self._lock:
            check_references(self._parents, fields)
            # A rejected record does not consume an identity
            entity = build_entity(self.entity_type, self._next_id, fields)
            self._next_id += 1
            self._rows[entity.id] = entity

        logger.debug(
            "Created entity",
            extra={"kind": self.entity_type.__name__, "entity_id": entity.id}
        )
        return entity

    def update(self, entity_id: int, **changes: Any) -> E:
        with self._lock:
            current = self.get(entity_id)
            check_references(self._parents, changes, partial=True)
            updated = merge_entity(current, changes)
            self._rows[entity_id] = updated
        return updated

    def find(self, **equals: Any) -> list[E]:
        check_filter_fields(self.entity_type, equals)
        with self._lock:
            return [
                row for row in self._rows.values()
                if all(getattr(row, key) == value for key, value in equals.items())
            ]

    def delete(self, entity_id: int) -> None:
        with self._lock:
            if entity_id not in self._rows:
                raise EntityNotFoundError(self.entity_type.__name__, entity_id)
            del self._rows[entity_id]

        logger.debug(
            "Deleted entity",
            extra={"kind": self.entity_type.__name__, "entity_id": entity_id}
        )


class InMemoryCoachingRepository:
    """
    The five coaching collections kept in process memory.

    Not durable: contents vanish with the process. Suitable for local
    development, demos and tests.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()

        self.players: InMemoryEntityStore[Player] = InMemoryEntityStore(Player, self._lock)
        self.assessments: InMemoryEntityStore[PerformanceAssessment] = InMemoryEntityStore(
            PerformanceAssessment, self._lock, parents={"player_id": self.players},
        )
        self.metrics: InMemoryEntityStore[PerformanceMetric] = InMemoryEntityStore(
            PerformanceMetric, self._lock, parents={"assessment_id": self.assessments},
        )
        self.problem_areas: InMemoryEntityStore[ProblemArea] = InMemoryEntityStore(
            ProblemArea, self._lock, parents={"assessment_id": self.assessments},
        )
        self.videos: InMemoryEntityStore[Video] = InMemoryEntityStore(
            Video, self._lock, parents={"player_id": self.players},
        )

        logger.info("Initialized in-memory coaching repository")

    def delete_player(self, player_id: int) -> None:
        # Child creates take the same lock for their parent check
        with self._lock:
            self.players.get(player_id)
            assessments = len(self.assessments.find(player_id=player_id))
            videos = len(self.videos.find(player_id=player_id))
            if assessments or videos:
                raise PlayerHasDependentsError(player_id, assessments, videos)
            self.players.delete(player_id)
