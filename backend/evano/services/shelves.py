"""Home page composition: the hero banner and the Netflix-style shelves."""
import asyncio
import logging
from typing import List, Optional, Sequence

from evano.core.config import settings
from evano.schemas import HomeFeedResponse, Shelf, Video, ViewerSession
from evano.services.catalog import fetch_approved_videos
from evano.services.recommendation_service import get_recommendations
from evano.services.watch_state import fetch_watch_history, fetch_watch_later

logger = logging.getLogger(__name__)

CONTINUE_WATCHING = "Continue Watching"
MY_LIST = "My List"
RECOMMENDED = "Recommended For You"


def select_hero(catalog: Sequence[Video]) -> Optional[Video]:
    """The first featured video, else the first video in the catalog."""
    for video in catalog:
        if video.is_featured:
            return video
    return catalog[0] if catalog else None


def compose_shelves(
    catalog: Sequence[Video],
    history: Sequence[Video] = (),
    watch_later: Sequence[Video] = (),
    recommendations: Sequence[Video] = (),
    signed_in: bool = False,
    categories: Sequence[str] = None,
) -> List[Shelf]:
    """Ordered shelves for the home page. Empty shelves are left out."""
    if categories is None:
        categories = settings.home_categories_list

    rows = []
    if signed_in:
        rows.append((CONTINUE_WATCHING, list(history)))
        rows.append((MY_LIST, list(watch_later)))
        rows.append((RECOMMENDED, list(recommendations)))

    for name in categories:
        rows.append((name, [v for v in catalog if v.category.name == name]))

    return [Shelf(title=title, items=items) for title, items in rows if items]


async def build_home_feed(session: Optional[ViewerSession] = None) -> HomeFeedResponse:
    """
    Fetch everything the home page shows and compose it.

    The personal reads run concurrently; one failing only empties its own shelf.
    """
    catalog = await fetch_approved_videos()

    history: List[Video] = []
    watch_later: List[Video] = []
    recommendations: List[Video] = []

    if session:
        results = await asyncio.gather(
            fetch_watch_later(session.user_id, token=session.access_token),
            fetch_watch_history(session.user_id, token=session.access_token),
            get_recommendations(session.user_id, token=session.access_token),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, Exception):
                logger.error("Home feed section failed for %s: %s", session.user_id, result)
        watch_later, history, recommendations = [
            [] if isinstance(result, Exception) else result for result in results
        ]

    return HomeFeedResponse(
        hero=select_hero(catalog),
        shelves=compose_shelves(
            catalog,
            history=history,
            watch_later=watch_later,
            recommendations=recommendations,
            signed_in=session is not None,
        ),
    )
