"""Creator uploads and admin moderation."""
import logging
from typing import List

from evano.core.supabase_rest_client import SupabaseError, get_supabase_rest
from evano.schemas import CreatorStats, Video, VideoCreate
from evano.services.catalog import fetch_category_labels, normalize_video, normalize_videos

logger = logging.getLogger(__name__)

MODERATION_STATUSES = ("approved", "rejected")


async def create_video(metadata: VideoCreate, user_id: str, token: str = None) -> Video:
    """Save an uploaded video's metadata. New videos wait for moderation."""
    client = get_supabase_rest()

    row = await client.insert(
        "videos",
        {
            "title": metadata.title,
            "description": metadata.description,
            "category": metadata.category,
            "video_url": metadata.video_url,
            "thumbnail_url": metadata.thumbnail_url,
            "status": "pending",
            "created_by": user_id,
            "view_count": 0,
            "ads_enabled": True,
        },
        token=token,
    )
    if not row:
        raise SupabaseError("Failed to save video metadata")

    logger.info("Video %s uploaded by %s, pending review", row.get("id"), user_id)
    return normalize_video(row, await fetch_category_labels())


async def get_creator_videos(user_id: str, token: str = None) -> List[Video]:
    """All of a creator's videos, whatever their status."""
    client = get_supabase_rest()

    rows = await client.get(
        "videos",
        filters={"created_by": f"eq.{user_id}"},
        order="created_at.desc",
        token=token,
    )
    return normalize_videos(rows, await fetch_category_labels())


async def get_creator_stats(user_id: str, token: str = None) -> CreatorStats:
    """Per-status video counts and total views for a creator's dashboard."""
    videos = await get_creator_videos(user_id, token=token)

    stats = CreatorStats(total_videos=len(videos))
    for video in videos:
        setattr(stats, video.status, getattr(stats, video.status) + 1)
        stats.total_views += video.views
    return stats


async def get_pending_videos() -> List[Video]:
    client = get_supabase_rest()

    rows = await client.get(
        "videos",
        filters={"status": "eq.pending"},
        order="created_at.asc",
        use_admin=True,
    )
    return normalize_videos(rows, await fetch_category_labels())


async def get_approved_videos_for_admin() -> List[Video]:
    """Approved videos with their featured flags, for the banner picker."""
    client = get_supabase_rest()

    rows = await client.get(
        "videos",
        filters={"status": "eq.approved"},
        order="created_at.desc",
        use_admin=True,
    )
    return normalize_videos(rows, await fetch_category_labels())


async def update_video_status(video_id: str, status: str) -> Video:
    """Approve or reject a video."""
    if status not in MODERATION_STATUSES:
        raise ValueError(f"Invalid status: {status}")

    client = get_supabase_rest()
    rows = await client.update(
        "videos",
        {"status": status},
        filters={"id": f"eq.{video_id}"},
        use_admin=True,
    )
    if rows is None:
        raise SupabaseError("Failed to update status")
    if not rows:
        raise LookupError(f"Video {video_id} not found")

    logger.info("Video %s %s", video_id, status)
    return normalize_video(rows[0], await fetch_category_labels())


async def set_featured_video(video_id: str) -> None:
    """
    Make one video the hero banner.

    Clears every flag and then sets one, as two separate writes: two admins
    racing can leave zero or two featured videos, and the last write wins.
    """
    client = get_supabase_rest()

    target = await client.get(
        "videos",
        select="id",
        filters={"id": f"eq.{video_id}", "status": "eq.approved"},
        single=True,
        use_admin=True,
    )
    if not target:
        raise LookupError(f"Approved video {video_id} not found")

    cleared = await client.update(
        "videos",
        {"is_featured": False},
        filters={"is_featured": "eq.true"},
        use_admin=True,
    )
    if cleared is None:
        raise SupabaseError("Failed to clear featured flags")

    rows = await client.update(
        "videos",
        {"is_featured": True},
        filters={"id": f"eq.{video_id}"},
        use_admin=True,
    )
    if rows is None:
        raise SupabaseError("Failed to set featured video")
    if not rows:
        raise LookupError(f"Video {video_id} not found")

    logger.info("Featured video set to %s", video_id)
