"""Account routes: profile, premium upgrade, sign-out and deletion."""
from fastapi import APIRouter, Depends, HTTPException

from evano.core.auth import get_session_store, require_auth
from evano.core.supabase_rest_client import SupabaseError
from evano.schemas import AccountResponse, MessageResponse, ViewerSession
from evano.services import account
from evano.state import SessionStore

router = APIRouter(prefix="/account", tags=["account"])


@router.get("", response_model=AccountResponse)
async def get_account(session: ViewerSession = Depends(require_auth)):
    return AccountResponse(
        id=session.user_id,
        email=session.email,
        username=session.username,
        role=session.role,
        tier=session.tier,
    )


@router.post("/premium", response_model=MessageResponse)
async def upgrade(
    session: ViewerSession = Depends(require_auth),
    store: SessionStore = Depends(get_session_store),
):
    if session.is_premium:
        return MessageResponse(message="Already premium")
    try:
        await account.upgrade_to_premium(session, store)
    except SupabaseError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return MessageResponse(message="Upgrade successful")


@router.post("/logout", response_model=MessageResponse)
async def logout(
    session: ViewerSession = Depends(require_auth),
    store: SessionStore = Depends(get_session_store),
):
    await account.sign_out(session.access_token, store)
    return MessageResponse(message="Signed out")


@router.delete("", response_model=MessageResponse)
async def delete_account(
    session: ViewerSession = Depends(require_auth),
    store: SessionStore = Depends(get_session_store),
):
    try:
        await account.delete_my_account(session, store)
    except SupabaseError as e:
        raise HTTPException(status_code=502, detail=str(e))
    await account.sign_out(session.access_token, store)
    return MessageResponse(message="Account deleted")
