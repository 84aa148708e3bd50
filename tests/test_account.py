import pytest

from evano.core.supabase_rest_client import SupabaseError
from evano.schemas import ViewerSession
from evano.services import account
from evano.state import MemorySessionStore


def session(**fields):
    values = {"user_id": "u1", "access_token": "tok"}
    values.update(fields)
    return ViewerSession(**values)


async def test_sign_out_clears_local_state(fake_db):
    store = MemorySessionStore()
    store.put(session())

    assert await account.sign_out("tok", store, timeout=1) is True
    assert fake_db.signed_out == ["tok"]
    assert store.get("tok") is None


async def test_slow_sign_out_gives_up_but_still_clears(fake_db):
    fake_db.sign_out_delay = 5
    store = MemorySessionStore()
    store.put(session())

    assert await account.sign_out("tok", store, timeout=0.05) is False
    assert store.get("tok") is None


async def test_upgrade_calls_rpc_and_refreshes_session(fake_db):
    store = MemorySessionStore()
    store.put(session())

    await account.upgrade_to_premium(session(), store)

    assert fake_db.rpc_calls == [("upgrade_to_premium", {"target_user_id": "u1"}, "tok")]
    assert store.get("tok").tier == "premium"


async def test_account_changes_reach_every_device(fake_db):
    store = MemorySessionStore()
    store.put(session())
    store.put(session(access_token="phone"))
    store.put(session(user_id="u2", access_token="someone-else"))

    await account.upgrade_to_premium(session(), store)

    assert store.get("phone") is None
    assert store.get("tok").tier == "premium"

    store.put(session(access_token="phone"))
    await account.delete_my_account(session(), store)

    assert store.get("tok") is None
    assert store.get("phone") is None
    assert store.get("someone-else").user_id == "u2"


async def test_upgrade_failure_raises(fake_db):
    fake_db.failing_rpcs.add("upgrade_to_premium")

    with pytest.raises(SupabaseError):
        await account.upgrade_to_premium(session())


async def test_delete_account_uses_caller_token(fake_db):
    store = MemorySessionStore()
    store.put(session())

    await account.delete_my_account(session(), store)

    assert fake_db.rpc_calls == [("delete_my_account", {}, "tok")]
    assert len(store) == 0


async def test_ensure_profile_creates_missing_profile(fake_db):
    profile = await account.ensure_profile("u1", role="creator", username="ann")

    assert (profile.role, profile.tier, profile.username) == ("creator", "free", "ann")
    assert len(fake_db.tables["profiles"]) == 1
    assert (await account.ensure_profile("u1")).role == "creator"


async def test_ensure_profile_never_self_assigns_admin(fake_db):
    profile = await account.ensure_profile("u1", role="admin")

    assert profile.role == "viewer"


def test_session_store_expires_entries():
    now = [0.0]
    store = MemorySessionStore(ttl_seconds=10, clock=lambda: now[0])
    store.put(session())
    store.put(session(user_id="u1", access_token="other"))

    assert store.get("tok").user_id == "u1"
    now[0] = 11
    assert store.get("tok") is None

    store.put(session())
    store.drop_user("u1")
    assert len(store) == 0
