"""
Roster endpoints.

Players are created when a batter joins the academy and edited from the
profile page. Deletion is an administrative action that only succeeds for
players without any coaching history.
"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Response, status
from pydantic import BaseModel, Field

from ...core.coaching.errors import ValidationFailedError
from ...core.coaching.models import Player
from ...core.coaching.roster import remove_player
from ..dependencies import RepositoryDep

logger = logging.getLogger(__name__)

router = APIRouter()

REQUIRED_PLAYER_FIELDS = ("name", "batch", "image", "joined_date")


# ---------------------------------------------------------------------------
# Request/Response Models
# ---------------------------------------------------------------------------

class PlayerCreateRequest(BaseModel):
    """New roster entry."""
    name: str = Field(min_length=1, max_length=200, description="Player's display name")
    batch: str = Field(min_length=1, max_length=100, description="Training batch, e.g. 'Morning Batch'")
    image: str = Field(default="", description="Photo URL or storage path")
    joined_date: date = Field(default_factory=date.today, description="Date the player joined")
    age: Optional[int] = Field(None, ge=3, le=100)
    dominant_hand: Optional[str] = Field(None, description="'Right' or 'Left'")
    status: Optional[str] = Field(None, description="'improving', 'stable' or 'needs focus'")


class PlayerUpdateRequest(BaseModel):
    """Partial profile update. Omitted fields are left as they are."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    batch: Optional[str] = Field(None, min_length=1, max_length=100)
    image: Optional[str] = None
    joined_date: Optional[date] = None
    age: Optional[int] = Field(None, ge=3, le=100)
    dominant_hand: Optional[str] = None
    status: Optional[str] = None


class PlayerResponse(BaseModel):
    """A roster entry."""
    id: int
    name: str
    batch: str
    image: str
    joined_date: date
    age: Optional[int] = None
    dominant_hand: Optional[str] = None
    status: Optional[str] = None

    @classmethod
    def from_domain(cls, player: Player) -> "PlayerResponse":
        return cls(
            id=player.id,
            name=player.name,
            batch=player.batch,
            image=player.image,
            joined_date=player.joined_date,
            age=player.age,
            dominant_hand=player.dominant_hand,
            status=player.status,
        )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get(
    "",
    response_model=list[PlayerResponse],
    summary="List players",
)
async def list_players(repository: RepositoryDep) -> list[PlayerResponse]:
    return [PlayerResponse.from_domain(p) for p in repository.players.all()]


@router.post(
    "",
    response_model=PlayerResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a player to the roster",
)
async def create_player(
    request: PlayerCreateRequest,
    repository: RepositoryDep,
) -> PlayerResponse:
    player = repository.players.create(**request.model_dump())

    logger.info(
        "Player created",
        extra={"player_id": player.id, "batch": player.batch}
    )
    return PlayerResponse.from_domain(player)


@router.get(
    "/{player_id}",
    response_model=PlayerResponse,
    summary="Get a player",
)
async def get_player(player_id: int, repository: RepositoryDep) -> PlayerResponse:
    return PlayerResponse.from_domain(repository.players.get(player_id))


@router.patch(
    "/{player_id}",
    response_model=PlayerResponse,
    summary="Update a player's profile",
)
async def update_player(
    player_id: int,
    request: PlayerUpdateRequest,
    repository: RepositoryDep,
) -> PlayerResponse:
    """
    Merge the supplied fields into the player's profile.

    Only fields present in the request body are changed.
    """
    changes = request.model_dump(exclude_unset=True)
    for key in REQUIRED_PLAYER_FIELDS:
        if key in changes and changes[key] is None:
            raise ValidationFailedError(f"{key} cannot be cleared")

    player = repository.players.update(player_id, **changes)

    logger.info(
        "Player updated",
        extra={"player_id": player_id, "fields": sorted(changes)}
    )
    return PlayerResponse.from_domain(player)


@router.delete(
    "/{player_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a player",
    description="Hard delete. Rejected with 409 while the player has assessments or videos.",
)
async def delete_player(player_id: int, repository: RepositoryDep) -> Response:
    remove_player(repository, player_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
