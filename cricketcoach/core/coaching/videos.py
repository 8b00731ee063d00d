"""
Narrowing a player's video gallery by tag.

The gallery filters send "All" (or one of its older spellings) when a
dropdown is left open; those values mean "no constraint".
"""

from dataclasses import dataclass
from typing import Optional

from .models import Video
from .repository import CoachingRepository

WILDCARDS = frozenset({"", "All", "All Shot Types", "All Speeds"})


def _is_wildcard(value: Optional[str]) -> bool:
    return value is None or value in WILDCARDS


@dataclass(frozen=True)
class VideoCriteria:
    """Tag values a video must match. None or a wildcard matches anything."""
    shot_type: Optional[str] = None
    ball_speed: Optional[str] = None
    bat_connect: Optional[str] = None

    def active(self) -> dict[str, str]:
        """The criteria that actually constrain, keyed by Video field name."""
        return {
            name: value
            for name, value in (
                ("shot_type", self.shot_type),
                ("ball_speed", self.ball_speed),
                ("bat_connect", self.bat_connect),
            )
            if not _is_wildcard(value)
        }

    def matches(self, video: Video) -> bool:
        return all(getattr(video, name) == value for name, value in self.active().items())


def filter_videos(
    repository: CoachingRepository,
    player_id: int,
    criteria: Optional[VideoCriteria] = None,
) -> list[Video]:
    """
    Videos of a player whose tags equal every active criterion.

    Matching is exact and case-sensitive. Repository listing order is
    preserved.
    """
    repository.players.get(player_id)
    videos = repository.videos.find(player_id=player_id)
    if criteria is None:
        return videos
    return [video for video in videos if criteria.matches(video)]
