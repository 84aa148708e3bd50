"""Admin routes: moderation, featured banner and ad inventory."""
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query

from evano.core.auth import require_admin
from evano.core.supabase_rest_client import SupabaseError
from evano.schemas import Ad, AdCreate, AdSettingsUpdate, StatusUpdate, Video
from evano.services import ads, moderation

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@router.get("/videos/pending", response_model=List[Video])
async def pending_videos():
    return await moderation.get_pending_videos()


@router.get("/videos/approved", response_model=List[Video])
async def approved_videos():
    return await moderation.get_approved_videos_for_admin()


@router.patch("/videos/{video_id}/status", response_model=Video)
async def update_status(video_id: str, update: StatusUpdate):
    try:
        return await moderation.update_video_status(video_id, update.status)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except SupabaseError as e:
        raise HTTPException(status_code=502, detail=str(e))


@router.post("/videos/{video_id}/featured")
async def set_featured(video_id: str):
    """Make this video the home page hero."""
    try:
        await moderation.set_featured_video(video_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except SupabaseError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return {"featured": video_id}


@router.patch("/videos/{video_id}/ads")
async def update_video_ads(video_id: str, update: AdSettingsUpdate):
    """Switch a video's ads on or off and set or clear its pre-roll."""
    try:
        if update.ads_enabled is not None:
            await ads.toggle_video_ads(video_id, update.ads_enabled)
        if update.clear_preroll:
            await ads.assign_ad_to_video(video_id, None)
        elif update.preroll_ad_id:
            if not await ads.get_ad(update.preroll_ad_id):
                raise HTTPException(status_code=404, detail="Ad not found")
            await ads.assign_ad_to_video(video_id, update.preroll_ad_id)
    except SupabaseError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return {"updated": video_id}


@router.get("/ads", response_model=List[Ad])
async def list_ads(type: Optional[str] = Query(None, pattern="^(video|banner)$")):
    return await ads.get_ads(type)


@router.post("/ads", response_model=Ad, status_code=201)
async def create_ad(ad: AdCreate):
    try:
        return await ads.create_ad(ad)
    except SupabaseError as e:
        raise HTTPException(status_code=502, detail=str(e))
