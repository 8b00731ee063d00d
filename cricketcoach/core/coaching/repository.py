"""
Persistence contract for coaching entities.

The core only ever talks to these protocols. Concrete stores (in-memory
arenas, Snowflake tables) live in the infrastructure layer and are
injected by the API, so nothing here knows how data is kept.

Each entity kind has its own identity space. The helpers at the bottom
hold the rules every store must apply the same way: identities are
allocated by the store, unknown fields are rejected, and foreign keys
must resolve to an existing parent.
"""

from dataclasses import fields as dataclass_fields, replace
from typing import Any, Mapping, Protocol, TypeVar

from .errors import ValidationFailedError
from .models import (
    PerformanceAssessment,
    PerformanceMetric,
    Player,
    ProblemArea,
    Video,
)

E = TypeVar("E")


class EntityStore(Protocol[E]):
    """
    Keyed collection of one entity kind.

    Listing order is identity order, which is also insertion order
    because identities only ever increase.
    """

    entity_type: type

    def all(self) -> list[E]:
        """Return every instance."""
        ...

    def get(self, entity_id: int) -> E:
        """Return one instance or raise EntityNotFoundError."""
        ...

    def create(self, **fields: Any) -> E:
        """Allocate a fresh identity and store a new instance."""
        ...

    def update(self, entity_id: int, **changes: Any) -> E:
        """Merge changes into an existing instance."""
        ...

    def find(self, **equals: Any) -> list[E]:
        """Filtered scan: instances whose fields equal the given values."""
        ...

    def delete(self, entity_id: int) -> None:
        """Remove an instance or raise EntityNotFoundError."""
        ...


class CoachingRepository(Protocol):
    """The five collections that make up a coaching data store."""

    players: EntityStore[Player]
    assessments: EntityStore[PerformanceAssessment]
    metrics: EntityStore[PerformanceMetric]
    problem_areas: EntityStore[ProblemArea]
    videos: EntityStore[Video]

    def delete_player(self, player_id: int) -> None:
        """
        Delete a player only if no assessment or video refers to it.

        The dependent check and the delete are one step: a child created
        concurrently either lands first (and the delete is rejected with
        PlayerHasDependentsError) or fails its parent check afterwards.
        """
        ...


def field_names(entity_type: type) -> tuple[str, ...]:
    """Column order for an entity kind, identity first."""
    return tuple(f.name for f in dataclass_fields(entity_type))


def build_entity(entity_type: type, entity_id: int, fields: Mapping[str, Any]):
    """Construct a new entity from caller fields plus a store-allocated id."""
    if "id" in fields:
        raise ValidationFailedError("Identity is allocated by the repository")
    try:
        return entity_type(id=entity_id, **fields)
    except TypeError as e:
        raise ValidationFailedError(f"Invalid {entity_type.__name__} fields: {e}") from e


def merge_entity(entity, changes: Mapping[str, Any]):
    """Return a copy of entity with changes applied; other fields untouched."""
    if "id" in changes:
        raise ValidationFailedError("Identity cannot be changed")
    try:
        return replace(entity, **changes)
    except TypeError as e:
        raise ValidationFailedError(
            f"Invalid {type(entity).__name__} fields: {e}"
        ) from e


def check_filter_fields(entity_type: type, equals: Mapping[str, Any]) -> None:
    """Reject filter keys that are not fields of the entity kind."""
    unknown = set(equals) - set(field_names(entity_type))
    if unknown:
        raise ValidationFailedError(
            f"Unknown {entity_type.__name__} fields: {', '.join(sorted(unknown))}"
        )


def check_references(
    parents: Mapping[str, EntityStore],
    fields: Mapping[str, Any],
    partial: bool = False,
) -> None:
    """
    Make sure every foreign key in fields points at an existing parent.

    parents maps a foreign-key field name to the store that owns the
    parent kind. With partial=True (updates) absent keys are skipped;
    otherwise they are required.

    A missing key is a ValidationFailedError; a key that does not
    resolve surfaces as the parent store's EntityNotFoundError.
    """
    for key, parent_store in parents.items():
        if key not in fields:
            if partial:
                continue
            raise ValidationFailedError(f"{key} is required")
        if fields[key] is None:
            raise ValidationFailedError(f"{key} is required")
        parent_store.get(fields[key])
