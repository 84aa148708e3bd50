"""Public video routes: catalog, search, views and ad cues."""
import json
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse

from evano.core.auth import get_current_user
from evano.schemas import AdPlan, Video, ViewerSession
from evano.services import ads, catalog
from evano.services.ad_scheduler import ad_cues

router = APIRouter(prefix="/videos", tags=["videos"])


@router.get("", response_model=List[Video])
async def list_videos():
    """All approved videos, featured first."""
    return await catalog.fetch_approved_videos()


@router.get("/search", response_model=List[Video])
async def search_videos(q: str = Query(..., min_length=1, max_length=100)):
    return await catalog.search_videos(q)


@router.get("/{video_id}", response_model=Video)
async def get_video(video_id: str):
    video = await catalog.get_video(video_id)
    if not video:
        raise HTTPException(status_code=404, detail="Video not found")
    return video


@router.post("/{video_id}/view")
async def record_view(video_id: str):
    """Count a view."""
    return {"counted": await catalog.increment_view(video_id)}


async def _plan_for(video_id: str, session: Optional[ViewerSession]) -> AdPlan:
    video = await catalog.get_video(video_id)
    if not video:
        raise HTTPException(status_code=404, detail="Video not found")
    tier = session.tier if session else "free"
    return await ads.build_ad_plan(video, tier)


@router.get("/{video_id}/ads", response_model=AdPlan)
async def get_ad_plan(
    video_id: str,
    session: Optional[ViewerSession] = Depends(get_current_user),
):
    """Ads to show while this video plays for the caller."""
    return await _plan_for(video_id, session)


@router.get("/{video_id}/ads/stream")
async def stream_ad_cues(
    video_id: str,
    session: Optional[ViewerSession] = Depends(get_current_user),
):
    """
    Server-sent ad cues for a playback session.

    Timers start when the stream opens; disconnecting cancels them.
    """
    plan = await _plan_for(video_id, session)

    async def events():
        async for cue in ad_cues(plan):
            yield f"event: {cue['event']}\ndata: {json.dumps(cue['ad'])}\n\n"

    return StreamingResponse(events(), media_type="text/event-stream")
