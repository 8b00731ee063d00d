"""Administrative roster operations."""

import logging

from .repository import CoachingRepository

logger = logging.getLogger(__name__)


def remove_player(repository: CoachingRepository, player_id: int) -> None:
    """
    Hard-delete a player who has no history.

    A player that still owns assessments or videos is rejected with
    PlayerHasDependentsError rather than cascading, so coaching history
    is never lost by accident and nothing is left orphaned. The check
    and the delete happen as one step inside the repository.
    """
    repository.delete_player(player_id)
    logger.info("Removed player", extra={"player_id": player_id})
