"""Creator dashboard routes."""
from typing import List
from fastapi import APIRouter, Depends, HTTPException

from evano.core.auth import require_creator
from evano.core.supabase_rest_client import SupabaseError
from evano.schemas import CreatorStats, Video, VideoCreate, ViewerSession
from evano.services import moderation

router = APIRouter(prefix="/creator", tags=["creator"])


@router.post("/videos", response_model=Video, status_code=201)
async def upload_video(metadata: VideoCreate, session: ViewerSession = Depends(require_creator)):
    """Register an uploaded video. It stays pending until an admin approves it."""
    try:
        return await moderation.create_video(metadata, session.user_id, token=session.access_token)
    except SupabaseError as e:
        raise HTTPException(status_code=502, detail=str(e))


@router.get("/videos", response_model=List[Video])
async def my_videos(session: ViewerSession = Depends(require_creator)):
    return await moderation.get_creator_videos(session.user_id, token=session.access_token)


@router.get("/stats", response_model=CreatorStats)
async def my_stats(session: ViewerSession = Depends(require_creator)):
    return await moderation.get_creator_stats(session.user_id, token=session.access_token)
