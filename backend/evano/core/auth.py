"""Authentication utilities."""
import asyncio
import logging
from typing import Optional
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from evano.core.supabase import get_supabase
from evano.schemas import ViewerSession
from evano.services.account import ensure_profile
from evano.state import SessionStore

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def get_session_store(request: Request) -> SessionStore:
    """The session store the app was started with."""
    return request.app.state.session_store


def _lookup_user(token: str):
    supabase = get_supabase()
    response = supabase.auth.get_user(token)
    return response.user if response else None


async def resolve_session(token: str, store: SessionStore) -> Optional[ViewerSession]:
    """Turn an access token into a ViewerSession, using the store when possible."""
    cached = store.get(token)
    if cached:
        return cached

    try:
        # supabase-py's auth client is synchronous
        user = await asyncio.to_thread(_lookup_user, token)
    except Exception as e:
        logger.info("Token rejected: %s", e)
        return None
    if not user:
        return None

    metadata = getattr(user, "user_metadata", None) or {}
    profile = await ensure_profile(
        user.id,
        role=metadata.get("role", "viewer"),
        username=metadata.get("username") or (user.email or "").split("@")[0] or None,
        token=token,
    )

    session = ViewerSession(
        user_id=user.id,
        access_token=token,
        email=user.email,
        role=profile.role,
        tier=profile.tier,
        username=profile.username,
    )
    store.put(session)
    return session


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    store: SessionStore = Depends(get_session_store),
) -> Optional[ViewerSession]:
    """Current session from the JWT. Returns None if not authenticated."""
    if not credentials:
        return None

    try:
        return await resolve_session(credentials.credentials, store)
    except Exception as e:
        logger.error("Session lookup failed: %s", e)
        return None


async def require_auth(
    session: Optional[ViewerSession] = Depends(get_current_user),
) -> ViewerSession:
    """Require authentication. Raises 401 if not authenticated."""
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return session


def require_role(*roles: str):
    """Dependency factory: the caller must hold one of ``roles``."""
    async def guard(session: ViewerSession = Depends(require_auth)) -> ViewerSession:
        if session.role not in roles:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
        return session

    return guard


require_creator = require_role("creator", "admin")
require_admin = require_role("admin")
