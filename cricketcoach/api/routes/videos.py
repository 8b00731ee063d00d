"""
Video gallery endpoints.

Videos are either uploaded through this API (bytes go to object storage,
only the returned locator is recorded) or registered with a locator the
client already has. After that only the tags and title can be corrected.
"""

import logging
from datetime import date
from typing import Annotated, Optional

from fastapi import APIRouter, File, Form, HTTPException, Query, UploadFile, status
from pydantic import BaseModel, Field

from ...core.coaching.errors import CoachingError, ValidationFailedError
from ...core.coaching.models import Video
from ...core.coaching.videos import VideoCriteria, filter_videos
from ...infrastructure.storage.client import VIDEO_CONTENT_TYPES
from ..dependencies import RepositoryDep, SettingsDep, StorageClientDep

logger = logging.getLogger(__name__)

router = APIRouter()

ALLOWED_CONTENT_TYPES = frozenset(VIDEO_CONTENT_TYPES.values())
EDITABLE_VIDEO_FIELDS = ("title", "shot_type", "ball_speed", "bat_connect")


# ---------------------------------------------------------------------------
# Request/Response Models
# ---------------------------------------------------------------------------

class VideoRegisterRequest(BaseModel):
    """A clip that is already in storage."""
    title: str = Field(min_length=1, max_length=200)
    url: str = Field(min_length=1, description="Storage locator or playback URL")
    recorded_date: date = Field(default_factory=date.today)
    shot_type: Optional[str] = Field(None, description="e.g. 'Cover Drive'")
    ball_speed: Optional[str] = Field(None, description="'Fast', 'Medium' or 'Slow'")
    bat_connect: Optional[str] = Field(None, description="'Middle', 'Edge', 'Bottom' or 'Missed'")


class VideoUpdateRequest(BaseModel):
    """Tag correction. The locator, owner and date cannot change."""
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    shot_type: Optional[str] = None
    ball_speed: Optional[str] = None
    bat_connect: Optional[str] = None


class VideoResponse(BaseModel):
    id: int
    player_id: int
    title: str
    url: str
    recorded_date: date
    shot_type: Optional[str] = None
    ball_speed: Optional[str] = None
    bat_connect: Optional[str] = None

    @classmethod
    def from_domain(cls, video: Video) -> "VideoResponse":
        return cls(
            id=video.id,
            player_id=video.player_id,
            title=video.title,
            url=video.url,
            recorded_date=video.recorded_date,
            shot_type=video.shot_type,
            ball_speed=video.ball_speed,
            bat_connect=video.bat_connect,
        )


class PlaybackUrlResponse(BaseModel):
    video_id: int
    url: str
    expires_in_seconds: Optional[int] = None


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get(
    "/players/{player_id}/videos",
    response_model=list[VideoResponse],
    summary="List a player's videos",
    description=(
        "Every supplied filter must match exactly. Omitted filters and the "
        "gallery's 'All' options match everything."
    ),
)
async def list_player_videos(
    player_id: int,
    repository: RepositoryDep,
    shot_type: Annotated[Optional[str], Query()] = None,
    ball_speed: Annotated[Optional[str], Query()] = None,
    bat_connect: Annotated[Optional[str], Query()] = None,
) -> list[VideoResponse]:
    criteria = VideoCriteria(
        shot_type=shot_type,
        ball_speed=ball_speed,
        bat_connect=bat_connect,
    )
    return [VideoResponse.from_domain(v) for v in filter_videos(repository, player_id, criteria)]


@router.post(
    "/players/{player_id}/videos",
    response_model=VideoResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register an existing video",
)
async def register_video(
    player_id: int,
    request: VideoRegisterRequest,
    repository: RepositoryDep,
) -> VideoResponse:
    video = repository.videos.create(player_id=player_id, **request.model_dump())

    logger.info(
        "Video registered",
        extra={"player_id": player_id, "video_id": video.id}
    )
    return VideoResponse.from_domain(video)


@router.post(
    "/players/{player_id}/videos/upload",
    response_model=VideoResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a batting video",
    description="Stores the clip in object storage and records it in the player's gallery.",
)
async def upload_video(
    player_id: int,
    video: Annotated[UploadFile, File(description="Batting video (MP4, MOV, AVI or WebM)")],
    repository: RepositoryDep,
    storage: StorageClientDep,
    settings: SettingsDep,
    title: Annotated[str, Form(min_length=1, max_length=200)],
    recorded_date: Annotated[Optional[date], Form()] = None,
    shot_type: Annotated[Optional[str], Form()] = None,
    ball_speed: Annotated[Optional[str], Form()] = None,
    bat_connect: Annotated[Optional[str], Form()] = None,
) -> VideoResponse:
    """
    Upload a video and add it to the gallery.

    The player is checked before anything is stored. If the record cannot
    be created afterwards, the uploaded object is removed again.
    """
    if video.content_type and video.content_type not in ALLOWED_CONTENT_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unsupported video type: {video.content_type}. Use MP4, MOV, AVI, or WebM."
        )

    repository.players.get(player_id)

    video_data = await video.read()

    max_size_bytes = settings.max_upload_size_mb * 1024 * 1024
    if len(video_data) > max_size_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Video too large. Maximum size: {settings.max_upload_size_mb}MB"
        )

    video_path = await storage.upload_video(
        video_data=video_data,
        player_id=player_id,
        filename=video.filename or "video.mp4",
    )

    try:
        record = repository.videos.create(
            player_id=player_id,
            title=title,
            url=video_path,
            recorded_date=recorded_date or date.today(),
            shot_type=shot_type,
            ball_speed=ball_speed,
            bat_connect=bat_connect,
        )
    except CoachingError:
        await storage.delete_video(video_path)
        raise

    logger.info(
        "Video uploaded",
        extra={
            "player_id": player_id,
            "video_id": record.id,
            "storage_path": video_path,
            "size_bytes": len(video_data),
        }
    )
    return VideoResponse.from_domain(record)


@router.patch(
    "/videos/{video_id}",
    response_model=VideoResponse,
    summary="Correct a video's tags",
)
async def update_video(
    video_id: int,
    request: VideoUpdateRequest,
    repository: RepositoryDep,
) -> VideoResponse:
    changes = request.model_dump(exclude_unset=True)
    if changes.get("title", "") is None:
        raise ValidationFailedError("title cannot be cleared")

    video = repository.videos.update(video_id, **changes)
    return VideoResponse.from_domain(video)


@router.get(
    "/videos/{video_id}/playback-url",
    response_model=PlaybackUrlResponse,
    summary="Get a playback URL",
    description=(
        "Presigns uploaded videos. Videos registered with a full URL are "
        "returned as they are."
    ),
)
async def get_playback_url(
    video_id: int,
    repository: RepositoryDep,
    storage: StorageClientDep,
    settings: SettingsDep,
) -> PlaybackUrlResponse:
    video = repository.videos.get(video_id)

    if "://" in video.url:
        return PlaybackUrlResponse(video_id=video.id, url=video.url)

    expiry = settings.presigned_url_expiry_seconds
    url = await storage.get_presigned_url(video.url, expiry_seconds=expiry)
    return PlaybackUrlResponse(video_id=video.id, url=url, expires_in_seconds=expiry)
