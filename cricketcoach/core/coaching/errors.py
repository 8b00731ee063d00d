"""
Failures the coaching core can report.

Every error is scoped to the single operation that raised it. The core
never swallows these; the HTTP layer decides how each one is presented.
"""

from typing import Any


class CoachingError(Exception):
    """Base class for all coaching-core failures."""
    pass


class EntityNotFoundError(CoachingError):
    """Raised when an identity does not exist for the requested entity kind."""

    def __init__(self, kind: str, entity_id: Any) -> None:
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f"{kind} {entity_id} not found")


class ValidationFailedError(CoachingError, ValueError):
    """
    Raised when caller-supplied fields have the wrong shape.

    Untrusted input is validated before it reaches the core, so this
    mostly fires for missing foreign keys or programming errors.
    """
    pass


class StorageUnavailableError(CoachingError):
    """Raised when the durable backing store cannot be reached."""
    pass


class PlayerHasDependentsError(CoachingError):
    """Raised when deleting a player that still owns assessments or videos."""

    def __init__(self, player_id: int, assessments: int, videos: int) -> None:
        self.player_id = player_id
        self.assessments = assessments
        self.videos = videos
        super().__init__(
            f"Player {player_id} still has {assessments} assessment(s) "
            f"and {videos} video(s)"
        )
