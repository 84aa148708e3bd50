"""Ad inventory and per-video ad decisions."""
import logging
from typing import List, Optional

from evano.core.config import settings
from evano.core.supabase_rest_client import SupabaseError, get_supabase_rest
from evano.schemas import Ad, AdCreate, AdPlan, Video

logger = logging.getLogger(__name__)


def _to_ad(row: dict) -> Ad:
    return Ad(
        id=str(row["id"]),
        title=row.get("title") or "",
        type=row["type"],
        url=row.get("url") or "",
        created_at=str(row.get("created_at") or ""),
    )


async def create_ad(ad: AdCreate) -> Ad:
    client = get_supabase_rest()

    row = await client.insert("ads", ad.model_dump(), use_admin=True)
    if not row:
        raise SupabaseError("Failed to save ad metadata")
    return _to_ad(row)


async def get_ads(ad_type: str = None) -> List[Ad]:
    client = get_supabase_rest()

    filters = {"type": f"eq.{ad_type}"} if ad_type else None
    rows = await client.get("ads", filters=filters, order="created_at.desc")
    return [_to_ad(row) for row in rows or []]


async def get_ad(ad_id: str) -> Optional[Ad]:
    client = get_supabase_rest()

    row = await client.get("ads", filters={"id": f"eq.{ad_id}"}, single=True)
    return _to_ad(row) if row else None


async def assign_ad_to_video(video_id: str, ad_id: Optional[str]) -> None:
    """Set (or clear, with None) a video's pre-roll ad."""
    client = get_supabase_rest()

    rows = await client.update(
        "videos",
        {"preroll_ad_id": ad_id},
        filters={"id": f"eq.{video_id}"},
        use_admin=True,
    )
    if rows is None:
        raise SupabaseError("Failed to assign ad")


async def toggle_video_ads(video_id: str, enabled: bool) -> None:
    client = get_supabase_rest()

    rows = await client.update(
        "videos",
        {"ads_enabled": enabled},
        filters={"id": f"eq.{video_id}"},
        use_admin=True,
    )
    if rows is None:
        raise SupabaseError("Failed to toggle ads")


async def build_ad_plan(video: Video, tier: str = "free") -> AdPlan:
    """
    Decide the ads shown while ``video`` plays.

    Premium viewers and videos with ads switched off get an empty plan.
    """
    if tier == "premium" or not video.ads_enabled:
        return AdPlan()

    plan = AdPlan()

    if video.preroll_ad_id:
        preroll = await get_ad(video.preroll_ad_id)
        if preroll and preroll.type == "video":
            plan.preroll = preroll

    banners = await get_ads("banner")
    if banners:
        plan.banner = banners[0]
        plan.banner_delay = settings.banner_ad_delay
        plan.lower_third = banners[1] if len(banners) > 1 else banners[0]
        plan.lower_third_min_interval = settings.lower_third_min_interval
        plan.lower_third_max_interval = settings.lower_third_max_interval
        plan.lower_third_visible = settings.lower_third_visible

    return plan
