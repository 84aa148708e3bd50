"""Profiles, premium upgrades, sign-out and account deletion."""
import asyncio
import logging
from typing import Optional

from evano.core.config import settings
from evano.core.supabase_rest_client import SupabaseError, get_supabase_rest
from evano.schemas import UserProfile, ViewerSession
from evano.state import SessionStore

logger = logging.getLogger(__name__)


async def get_profile(user_id: str, token: str = None) -> Optional[UserProfile]:
    """A user's profile row, or None if it does not exist (yet)."""
    client = get_supabase_rest()

    row = await client.get(
        "profiles",
        filters={"id": f"eq.{user_id}"},
        single=True,
        token=token,
    )
    return UserProfile(**row) if row else None


async def ensure_profile(user_id: str, role: str = "viewer", username: str = None,
                         token: str = None) -> UserProfile:
    """
    Return the user's profile, creating it when the signup trigger did not.

    Only viewer and creator can be self-assigned; admins are made in the database.
    """
    profile = await get_profile(user_id, token=token)
    if profile:
        return profile

    if role not in ("viewer", "creator"):
        role = "viewer"

    logger.warning("Profile missing for %s, creating it manually", user_id)
    client = get_supabase_rest()
    row = await client.insert(
        "profiles",
        {"id": user_id, "role": role, "tier": "free", "username": username},
        token=token,
    )
    if not row:
        raise SupabaseError("Manual profile creation failed")
    return UserProfile(**row)


async def upgrade_to_premium(session: ViewerSession, store: SessionStore = None) -> None:
    """Switch the caller to the premium tier through the upgrade_to_premium RPC."""
    client = get_supabase_rest()

    logger.info("Upgrading user %s to premium", session.user_id)
    ok, _ = await client.rpc(
        "upgrade_to_premium",
        {"target_user_id": session.user_id},
        token=session.access_token,
    )
    if not ok:
        raise SupabaseError("Premium upgrade failed")

    if store is not None:
        # Other devices of this user re-resolve their tier on the next request
        store.drop_user(session.user_id)
        store.put(session.model_copy(update={"tier": "premium"}))


async def delete_my_account(session: ViewerSession, store: SessionStore = None) -> None:
    """Delete the caller's account; the database cascades their rows."""
    client = get_supabase_rest()

    ok, _ = await client.rpc("delete_my_account", token=session.access_token)
    if not ok:
        raise SupabaseError("Account deletion failed")

    logger.info("Account %s deleted", session.user_id)
    if store is not None:
        store.drop_user(session.user_id)


async def sign_out(token: str, store: SessionStore, timeout: float = None) -> bool:
    """
    Revoke the session remotely, giving up after ``timeout`` seconds.

    Local state is cleared whatever the remote call does. Returns whether the
    remote sign-out finished in time.
    """
    timeout = settings.sign_out_timeout if timeout is None else timeout
    client = get_supabase_rest()

    remote_ok = False
    try:
        remote_ok = await asyncio.wait_for(client.sign_out(token), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning("Remote sign-out timed out after %.1fs, clearing local session", timeout)
    except Exception as e:
        logger.error("Remote sign-out failed (proceeding with local sign-out): %s", e)
    finally:
        store.drop(token)

    return remote_ok
