"""Per-user watch state: the "My List" (watch later) and watch history tables."""
import asyncio
import logging
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from evano.core.supabase_rest_client import SupabaseError, get_supabase_rest
from evano.schemas import Video
from evano.services.catalog import fetch_category_labels, normalize_video

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 20

# Embeds the full video row next to each entry
JOINED_SELECT = "video_id,videos(*)"


def _joined_videos(rows: Optional[list], labels: dict) -> List[Video]:
    """Pull the embedded video out of each entry, dropping orphaned and unapproved ones."""
    videos = []
    for row in rows or []:
        video = row.get("videos")
        if isinstance(video, list):
            video = video[0] if video else None
        if not video or video.get("id") is None:
            continue
        # Saved or watched before it was rejected or sent back to review
        if video.get("status") != "approved":
            continue
        videos.append(normalize_video(video, labels))
    return videos


async def fetch_watch_later(user_id: str, token: str = None) -> List[Video]:
    """Saved videos, most recently saved first."""
    client = get_supabase_rest()
    try:
        labels = await fetch_category_labels()
        rows = await client.get(
            "watch_later",
            select=JOINED_SELECT,
            filters={"user_id": f"eq.{user_id}"},
            order="created_at.desc",
            token=token,
        )
        return _joined_videos(rows, labels)
    except Exception as e:
        logger.error("Error fetching watch later for %s: %s", user_id, e)
        return []


async def fetch_watch_history(user_id: str, limit: int = HISTORY_LIMIT, token: str = None) -> List[Video]:
    """Most recently watched videos, newest first."""
    client = get_supabase_rest()
    try:
        labels = await fetch_category_labels()
        rows = await client.get(
            "watch_history",
            select=JOINED_SELECT,
            filters={"user_id": f"eq.{user_id}"},
            order="last_watched_at.desc",
            limit=limit,
            token=token,
        )
        return _joined_videos(rows, labels)
    except Exception as e:
        logger.error("Error fetching history for %s: %s", user_id, e)
        return []


async def fetch_watch_state(user_id: str, token: str = None) -> Tuple[List[Video], List[Video]]:
    """Watch later and history, fetched concurrently. Returns (watch_later, history)."""
    watch_later, history = await asyncio.gather(
        fetch_watch_later(user_id, token=token),
        fetch_watch_history(user_id, token=token),
    )
    return watch_later, history


async def is_in_watch_later(user_id: str, video_id: str, token: str = None) -> bool:
    client = get_supabase_rest()

    row = await client.get(
        "watch_later",
        select="video_id",
        filters={"user_id": f"eq.{user_id}", "video_id": f"eq.{video_id}"},
        single=True,
        token=token,
    )
    return row is not None


async def add_to_watch_later(user_id: str, video_id: str, token: str = None) -> bool:
    """Save a video to the user's list. False when it was already there."""
    if await is_in_watch_later(user_id, video_id, token=token):
        return False

    client = get_supabase_rest()
    result = await client.insert(
        "watch_later",
        {"user_id": user_id, "video_id": video_id},
        token=token,
    )
    if result is None:
        raise SupabaseError("Failed to add video to watch later")
    return True


async def remove_from_watch_later(user_id: str, video_id: str, token: str = None) -> None:
    client = get_supabase_rest()

    ok = await client.delete(
        "watch_later",
        filters={"user_id": f"eq.{user_id}", "video_id": f"eq.{video_id}"},
        token=token,
    )
    if not ok:
        raise SupabaseError("Failed to remove video from watch later")


async def record_watch(user_id: str, video_id: str, token: str = None) -> bool:
    """Insert a history entry, or refresh its timestamp if the video was watched before."""
    client = get_supabase_rest()

    result = await client.insert(
        "watch_history",
        {
            "user_id": user_id,
            "video_id": video_id,
            "last_watched_at": datetime.now(timezone.utc).isoformat(),
        },
        upsert=True,
        on_conflict="user_id,video_id",
        token=token,
    )
    if result is None:
        logger.error("Error saving history for %s / %s", user_id, video_id)
        return False
    return True
