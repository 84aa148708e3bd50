import httpx

from evano.core.supabase_rest_client import SupabaseRestClient, in_filter


def make_client(handler):
    return SupabaseRestClient(
        url="https://project.supabase.co/",
        key="anon",
        service_key="service",
        transport=httpx.MockTransport(handler),
    )


def test_in_filter_quotes_strings():
    assert in_filter([1, 2]) == "in.(1,2)"
    assert in_filter(["a b", "c"]) == 'in.("a b","c")'


async def test_get_sends_postgrest_params():
    seen = {}

    def handler(request):
        seen["url"] = request.url
        seen["auth"] = request.headers["Authorization"]
        return httpx.Response(200, json=[{"id": "v1"}])

    client = make_client(handler)
    rows = await client.get("videos", filters={"status": "eq.approved"}, order="created_at.desc", limit=5, token="jwt")

    assert rows == [{"id": "v1"}]
    assert seen["url"].path == "/rest/v1/videos"
    assert seen["url"].params["status"] == "eq.approved"
    assert seen["url"].params["limit"] == "5"
    assert seen["auth"] == "Bearer jwt"
    await client.close()


async def test_get_fails_open():
    client = make_client(lambda request: httpx.Response(500, text="boom"))

    assert await client.get("videos", limit=5) == []
    assert await client.get("videos", single=True) is None
    await client.close()


async def test_transport_error_fails_open():
    def handler(request):
        raise httpx.ConnectError("offline", request=request)

    client = make_client(handler)

    assert await client.get("videos") == []
    await client.close()


async def test_single_without_rows_is_none():
    client = make_client(lambda request: httpx.Response(406, json={"code": "PGRST116"}))

    assert await client.get("profiles", filters={"id": "eq.x"}, single=True) is None
    await client.close()


async def test_unbounded_get_pages_through_results():
    def handler(request):
        offset = int(request.url.params["offset"])
        remaining = max(0, 2500 - offset)
        return httpx.Response(200, json=[{"n": offset + i} for i in range(min(1000, remaining))])

    client = make_client(handler)
    rows = await client.get("watch_history", select="video_id")

    assert len(rows) == 2500
    assert rows[-1] == {"n": 2499}
    await client.close()


async def test_failed_later_page_gives_empty_result():
    def handler(request):
        offset = int(request.url.params["offset"])
        if offset >= 1000:
            return httpx.Response(503, text="unavailable")
        return httpx.Response(200, json=[{"n": offset + i} for i in range(1000)])

    client = make_client(handler)

    assert await client.get("watch_history", select="video_id") == []
    await client.close()


async def test_admin_requests_use_service_key():
    seen = {}

    def handler(request):
        seen["apikey"] = request.headers["apikey"]
        return httpx.Response(200, json=[{"id": "v1", "status": "approved"}])

    client = make_client(handler)
    rows = await client.update("videos", {"status": "approved"}, filters={"id": "eq.v1"}, use_admin=True)

    assert rows == [{"id": "v1", "status": "approved"}]
    assert seen["apikey"] == "service"
    await client.close()


async def test_upsert_sets_conflict_target():
    seen = {}

    def handler(request):
        seen["prefer"] = request.headers["Prefer"]
        seen["on_conflict"] = request.url.params.get("on_conflict")
        return httpx.Response(201, json=[{"user_id": "u", "video_id": "v"}])

    client = make_client(handler)
    row = await client.insert("watch_history", {"user_id": "u", "video_id": "v"}, upsert=True,
                              on_conflict="user_id,video_id")

    assert row == {"user_id": "u", "video_id": "v"}
    assert "merge-duplicates" in seen["prefer"]
    assert seen["on_conflict"] == "user_id,video_id"
    await client.close()


async def test_void_rpc_succeeds():
    client = make_client(lambda request: httpx.Response(204))

    assert await client.rpc("delete_my_account", token="jwt") == (True, None)
    await client.close()


async def test_failed_rpc():
    client = make_client(lambda request: httpx.Response(400, json={"message": "nope"}))

    assert await client.rpc("upgrade_to_premium", {"target_user_id": "u"}) == (False, None)
    await client.close()
