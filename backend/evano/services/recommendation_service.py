"""
Recommendation Engine

Category-affinity recommendations for the home page:
1. Collect the categories of the viewer's most recent watches
2. Rank approved videos from those categories by views, skipping anything
   already watched
3. Without any history, fall back to global trending (most viewed)
"""
import logging
from typing import Dict, List, Optional, Set

from evano.core.supabase_rest_client import SupabaseRestClient, get_supabase_rest, in_filter
from evano.schemas import CategoryRef, Video
from evano.services.catalog import fetch_category_labels, normalize_videos, resolve_category

logger = logging.getLogger(__name__)


class RecommendationEngine:
    """Personalized "Recommended For You" suggestions."""

    HISTORY_SAMPLE = 10  # Recent watches that define the viewer's categories
    CANDIDATE_POOL = 12  # Same-category candidates fetched before filtering
    MAX_RECOMMENDATIONS = 8

    # Equal view counts fall back to id so the order is stable between calls
    RANKING = "view_count.desc.nullslast,id.asc"

    def __init__(self, client: Optional[SupabaseRestClient] = None, token: str = None):
        self.client = client or get_supabase_rest()
        self.token = token
        self._labels: Optional[Dict[int, str]] = None

    async def _category_labels(self) -> Dict[int, str]:
        if self._labels is None:
            self._labels = await fetch_category_labels(self.client)
        return self._labels

    async def fetch_watch_history_category_ids(self, user_id: str, limit: int = HISTORY_SAMPLE) -> Set[CategoryRef]:
        """
        Distinct categories among the user's ``limit`` most recent watches.

        A category is identified by its id when it has one and by its label
        otherwise, so text-only categories such as "Podcast" still count.
        """
        rows = await self.client.get(
            "watch_history",
            select="video_id,videos(category,category_id)",
            filters={"user_id": f"eq.{user_id}"},
            order="last_watched_at.desc",
            limit=limit,
            token=self.token,
        )

        labels = await self._category_labels()
        categories = set()
        for row in rows or []:
            video = row.get("videos")
            if isinstance(video, list):
                video = video[0] if video else None
            if not video:
                continue
            categories.add(resolve_category(video, labels))
        return categories

    async def fetch_trending(self, limit: int = MAX_RECOMMENDATIONS) -> List[Video]:
        """Most viewed approved videos."""
        rows = await self.client.get(
            "videos",
            filters={"status": "eq.approved"},
            order=self.RANKING,
            limit=limit,
            token=self.token,
        )
        return normalize_videos(rows, await self._category_labels())

    async def fetch_videos_by_category(self, categories: Set[CategoryRef], limit: int = CANDIDATE_POOL) -> List[Video]:
        """Most viewed approved videos in any of the given categories."""
        if not categories:
            return []

        labels = await self._category_labels()
        ids = sorted({c.id for c in categories if c.id is not None})
        names = {c.name for c in categories}
        names.update(labels[cid] for cid in ids if cid in labels)

        # Rows may carry the category as an id or as a text label
        conditions = []
        if ids:
            conditions.append(f"category_id.{in_filter(ids)}")
        conditions.append(f"category.{in_filter(sorted(names))}")

        rows = await self.client.get(
            "videos",
            filters={"status": "eq.approved", "or": f"({','.join(conditions)})"},
            order=self.RANKING,
            limit=limit,
            token=self.token,
        )
        return normalize_videos(rows, labels)

    async def fetch_watched_video_ids(self, user_id: str) -> Set[str]:
        """Every video the user has a history entry for."""
        rows = await self.client.get(
            "watch_history",
            select="video_id",
            filters={"user_id": f"eq.{user_id}"},
            token=self.token,
        )
        return {str(row["video_id"]) for row in rows or [] if row.get("video_id") is not None}

    async def recommend(self, user_id: str) -> List[Video]:
        """
        Up to MAX_RECOMMENDATIONS videos for the user.

        Fewer come back when fewer unwatched same-category candidates exist;
        trending is only used when the user has no history at all.
        """
        try:
            categories = await self.fetch_watch_history_category_ids(user_id)

            if not categories:
                return await self.fetch_trending(self.MAX_RECOMMENDATIONS)

            candidates = await self.fetch_videos_by_category(categories, self.CANDIDATE_POOL)
            watched = await self.fetch_watched_video_ids(user_id)

            unwatched = [v for v in candidates if v.id not in watched]
            return unwatched[:self.MAX_RECOMMENDATIONS]
        except Exception as e:
            logger.error("Recommendations failed for %s: %s", user_id, e)
            return []


async def get_recommendations(user_id: str, token: str = None) -> List[Video]:
    """Recommendations using the shared REST client."""
    engine = RecommendationEngine(token=token)
    return await engine.recommend(user_id)
