"""
Video catalog reads.

Every video leaves this module normalized: the category is resolved to a
CategoryRef whether the row carries a text label or a category id, and the
view counter is exposed as ``views``.
"""
import asyncio
import logging
from typing import Dict, List, Optional

from evano.core.supabase_rest_client import SupabaseRestClient, get_supabase_rest
from evano.schemas import CategoryRef, Video

logger = logging.getLogger(__name__)

# Labels for category ids when the categories table is unreachable
DEFAULT_CATEGORY_LABELS: Dict[int, str] = {
    1: "Movies",
    2: "Music",
    3: "Tech",
    4: "Comedy",
    5: "Drama",
    6: "Action",
    7: "Documentary",
    8: "African",
}
UNKNOWN_CATEGORY = "Other"

CATALOG_ORDER = "created_at.desc"


def resolve_category(row: dict, labels: Dict[int, str] = None) -> CategoryRef:
    """Resolve a row's category, preferring the text label over the id lookup."""
    labels = labels if labels is not None else DEFAULT_CATEGORY_LABELS
    category_id = row.get("category_id")
    if category_id is not None:
        category_id = int(category_id)

    name = row.get("category")
    if not name:
        name = labels.get(category_id, UNKNOWN_CATEGORY) if category_id is not None else UNKNOWN_CATEGORY

    if category_id is None:
        # Text-only rows still get an id when the label is a known one
        category_id = next((cid for cid, label in labels.items() if label == name), None)

    return CategoryRef(id=category_id, name=name)


def normalize_video(row: dict, labels: Dict[int, str] = None) -> Video:
    """Turn a raw ``videos`` row into a Video."""
    views = row.get("view_count")
    if views is None:
        views = row.get("views")

    return Video(
        id=str(row["id"]),
        title=row.get("title") or "",
        description=row.get("description") or "",
        video_url=row.get("video_url") or "",
        thumbnail_url=row.get("thumbnail_url") or "",
        category=resolve_category(row, labels),
        status=row.get("status") or "pending",
        created_at=str(row.get("created_at") or ""),
        views=int(views or 0),
        created_by=row.get("created_by") or row.get("uploader_id"),
        ads_enabled=row.get("ads_enabled") is not False,
        preroll_ad_id=row.get("preroll_ad_id"),
        is_featured=bool(row.get("is_featured")),
        duration_seconds=row.get("duration_seconds"),
        resolution=row.get("resolution"),
    )


def normalize_videos(rows: Optional[list], labels: Dict[int, str] = None) -> List[Video]:
    """Normalize rows, skipping any that are not usable videos."""
    videos = []
    for row in rows or []:
        if not isinstance(row, dict) or row.get("id") is None:
            continue
        try:
            videos.append(normalize_video(row, labels))
        except (ValueError, TypeError) as e:
            logger.warning("Skipping malformed video row %s: %s", row.get("id"), e)
    return videos


async def fetch_category_labels(client: SupabaseRestClient = None) -> Dict[int, str]:
    """Category labels from the categories table, over the built-in defaults."""
    labels = dict(DEFAULT_CATEGORY_LABELS)
    client = client or get_supabase_rest()

    rows = await client.get("categories", select="id,name", limit=1000)
    for row in rows or []:
        if row.get("id") is not None and row.get("name"):
            labels[int(row["id"])] = row["name"]
    return labels


async def fetch_approved_videos() -> List[Video]:
    """
    All approved videos, featured first, then newest first.

    Never raises: a failed read is logged and gives an empty catalog.
    """
    client = get_supabase_rest()
    try:
        labels, rows = await asyncio.gather(
            fetch_category_labels(),
            client.get("videos", filters={"status": "eq.approved"}, order=CATALOG_ORDER),
        )
        # Featured first; unset and false flags both count as not featured
        return sorted(normalize_videos(rows, labels), key=lambda v: not v.is_featured)
    except Exception as e:
        logger.exception("Catalog fetch failed: %s", e)
        return []


async def get_video(video_id: str) -> Optional[Video]:
    """A single approved video, or None."""
    client = get_supabase_rest()

    row = await client.get(
        "videos",
        filters={"id": f"eq.{video_id}", "status": "eq.approved"},
        single=True,
    )
    if not row:
        return None

    labels = await fetch_category_labels()
    return normalize_video(row, labels)


async def search_videos(query: str, limit: int = 50) -> List[Video]:
    """Approved videos whose title contains ``query`` (case-insensitive)."""
    query = query.strip()
    if not query:
        return []

    client = get_supabase_rest()
    # PostgREST reserves these inside filter values
    safe = "".join(ch for ch in query if ch not in ",()*")

    rows = await client.get(
        "videos",
        filters={"status": "eq.approved", "title": f"ilike.*{safe}*"},
        order="view_count.desc.nullslast,created_at.desc",
        limit=limit,
    )
    labels = await fetch_category_labels()
    return normalize_videos(rows, labels)


async def increment_view(video_id: str) -> bool:
    """Bump an approved video's view counter (read then write, not atomic)."""
    client = get_supabase_rest()
    try:
        current = await client.get(
            "videos",
            select="view_count",
            filters={"id": f"eq.{video_id}", "status": "eq.approved"},
            single=True,
        )
        if current is None:
            return False

        new_views = (current.get("view_count") or 0) + 1
        result = await client.update(
            "videos",
            {"view_count": new_views},
            filters={"id": f"eq.{video_id}"},
        )
        return result is not None
    except Exception as e:
        logger.error("View increment failed for %s: %s", video_id, e)
        return False
