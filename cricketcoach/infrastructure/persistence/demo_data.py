"""
Demo roster for local development.

Loads four players and a month of assessments for the first of them so
the profile, gallery and trend views have something to show. Enabled
with SEED_DEMO_DATA=true; never loaded into a durable store implicitly.
"""

import logging
from datetime import date

from ...core.coaching.assessments import AssessmentManager
from ...core.coaching.models import Player
from ...core.coaching.repository import CoachingRepository

logger = logging.getLogger(__name__)

DEMO_PLAYERS = [
    {
        "name": "Rajiv Sharma",
        "batch": "Morning Batch",
        "image": "https://images.unsplash.com/photo-1531415074968-036ba1b575da",
        "joined_date": date(2023, 1, 15),
        "age": 17,
        "dominant_hand": "Right",
        "status": "improving",
    },
    {
        "name": "Priya Patel",
        "batch": "Evening Batch",
        "image": "https://images.unsplash.com/photo-1628779238951-be2c9f2a59f4",
        "joined_date": date(2023, 1, 10),
        "age": 16,
        "dominant_hand": "Right",
        "status": "stable",
    },
    {
        "name": "Arjun Singh",
        "batch": "Weekend Batch",
        "image": "https://images.unsplash.com/photo-1562077772-3bd90403f7f0",
        "joined_date": date(2023, 5, 5),
        "age": 15,
        "dominant_hand": "Left",
        "status": "improving",
    },
    {
        "name": "Meera Reddy",
        "batch": "Morning Batch",
        "image": "https://images.unsplash.com/photo-1580748141549-71748dbe0bdc",
        "joined_date": date(2023, 3, 15),
        "age": 17,
        "dominant_hand": "Right",
        "status": "needs focus",
    },
]

# (week_start, week_end, notes), newest first; the newest is current
DEMO_WEEKS = [
    (date(2023, 7, 24), date(2023, 7, 30), "Great improvement this week."),
    (date(2023, 7, 17), date(2023, 7, 23), "Struggled with spin bowling."),
    (date(2023, 7, 10), date(2023, 7, 16), "Worked on footwork."),
    (date(2023, 7, 3), date(2023, 7, 9), "Initial assessment, needs improvement in several areas."),
]

# (metric_type, rating, value, notes, video_url)
DEMO_METRICS = [
    ("reaction_time", 90, "0.65s",
     "Quick response to both fast and spin bowling this week.", "videos/demo/video-1.mp4"),
    ("bat_connect", 75, "85%",
     "Middle of the bat connection has improved, but still inconsistent against spin.",
     "videos/demo/video-2.mp4"),
    ("shot_selection", 65, "78%",
     "Good selection against pace, but needs work against spin bowling.", "videos/demo/video-3.mp4"),
    ("footwork", 70, "7.5/10",
     "Lateral movement is strong, but front-to-back transitions need improvement.",
     "videos/demo/video-4.mp4"),
    ("cover_drive", 55, "70%",
     "Weight transfer issues affecting shot placement. Elbow positioning improved.",
     "videos/demo/video-1.mp4"),
    ("straight_drive", 75, "85%",
     "Improved head position. Follow-through still needs work.", "videos/demo/video-2.mp4"),
]

# (title, url, shot_type, ball_speed, bat_connect)
DEMO_VIDEOS = [
    ("Cover Drive", "videos/demo/video-1.mp4", "Cover Drive", "Medium", "Middle"),
    ("Straight Drive", "videos/demo/video-2.mp4", "Straight Drive", "Fast", "Edge"),
    ("Pull Shot", "videos/demo/video-3.mp4", "Pull Shot", "Fast", "Missed"),
    ("Defensive Block", "videos/demo/video-4.mp4", "Defensive Block", "Medium", "Middle"),
]

# (area_type, rating, notes)
DEMO_PROBLEM_AREAS = [
    ("bat_connect", 3, "Improved middle connection, but still inconsistent with spin"),
    ("foot_movement", 2, "Needs to improve footwork for off-side shots"),
    ("bat_swing", 4, "Good bat swing path, minor adjustments needed"),
    ("weight_shifting", 1, "Major issue with weight transfer during drive shots"),
]


def load_demo_roster(repository: CoachingRepository) -> list[Player]:
    """Populate an empty repository with the demo roster."""
    players = [repository.players.create(**fields) for fields in DEMO_PLAYERS]
    featured = players[0]

    manager = AssessmentManager(repository)
    assessments = [
        manager.create_assessment(
            player_id=featured.id,
            week_start=week_start,
            week_end=week_end,
            notes=notes,
            mark_current=(index == 0),
        )
        for index, (week_start, week_end, notes) in enumerate(DEMO_WEEKS)
    ]
    latest = assessments[0]

    for metric_type, rating, value, notes, video_url in DEMO_METRICS:
        repository.metrics.create(
            assessment_id=latest.id,
            metric_type=metric_type,
            rating=rating,
            value=value,
            notes=notes,
            video_url=video_url,
        )

    for title, url, shot_type, ball_speed, bat_connect in DEMO_VIDEOS:
        repository.videos.create(
            player_id=featured.id,
            title=title,
            url=url,
            recorded_date=date(2023, 7, 31),
            shot_type=shot_type,
            ball_speed=ball_speed,
            bat_connect=bat_connect,
        )

    for area_type, rating, notes in DEMO_PROBLEM_AREAS:
        repository.problem_areas.create(
            assessment_id=latest.id,
            area_type=area_type,
            rating=rating,
            notes=notes,
        )

    logger.info(
        "Loaded demo roster",
        extra={"players": len(players), "assessments": len(assessments)}
    )
    return players
