"""Home page feed."""
from typing import Optional
from fastapi import APIRouter, Depends

from evano.core.auth import get_current_user
from evano.schemas import HomeFeedResponse, ViewerSession
from evano.services import shelves

router = APIRouter(prefix="/home", tags=["home"])


@router.get("", response_model=HomeFeedResponse)
async def get_home_feed(session: Optional[ViewerSession] = Depends(get_current_user)):
    """Hero video plus shelves. Personal shelves only appear for signed-in viewers."""
    return await shelves.build_home_feed(session)
