"""Signed-in viewer's library: My List, history and recommendations."""
from typing import List
from fastapi import APIRouter, Depends, HTTPException

from evano.core.auth import require_auth
from evano.core.supabase_rest_client import SupabaseError
from evano.schemas import Video, ViewerSession
from evano.services import catalog, watch_state
from evano.services.recommendation_service import get_recommendations

router = APIRouter(prefix="/me", tags=["library"])


@router.get("/watch-later", response_model=List[Video])
async def get_watch_later(session: ViewerSession = Depends(require_auth)):
    return await watch_state.fetch_watch_later(session.user_id, token=session.access_token)


@router.get("/watch-later/{video_id}")
async def check_watch_later(video_id: str, session: ViewerSession = Depends(require_auth)):
    saved = await watch_state.is_in_watch_later(session.user_id, video_id, token=session.access_token)
    return {"saved": saved}


@router.post("/watch-later/{video_id}")
async def add_watch_later(video_id: str, session: ViewerSession = Depends(require_auth)):
    if not await catalog.get_video(video_id):
        raise HTTPException(status_code=404, detail="Video not found")
    try:
        added = await watch_state.add_to_watch_later(session.user_id, video_id, token=session.access_token)
    except SupabaseError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return {"saved": True, "added": added}


@router.delete("/watch-later/{video_id}")
async def remove_watch_later(video_id: str, session: ViewerSession = Depends(require_auth)):
    try:
        await watch_state.remove_from_watch_later(session.user_id, video_id, token=session.access_token)
    except SupabaseError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return {"saved": False}


@router.get("/history", response_model=List[Video])
async def get_history(session: ViewerSession = Depends(require_auth)):
    return await watch_state.fetch_watch_history(session.user_id, token=session.access_token)


@router.post("/history/{video_id}")
async def record_watch(video_id: str, session: ViewerSession = Depends(require_auth)):
    """Mark a video as watched now."""
    recorded = await watch_state.record_watch(session.user_id, video_id, token=session.access_token)
    return {"recorded": recorded}


@router.get("/recommendations", response_model=List[Video])
async def recommendations(session: ViewerSession = Depends(require_auth)):
    return await get_recommendations(session.user_id, token=session.access_token)
