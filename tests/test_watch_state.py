import pytest
from conftest import make_video

from evano.core.supabase_rest_client import SupabaseError
from evano.services import watch_state


@pytest.fixture
def library(fake_db):
    fake_db.tables["videos"] = [make_video(f"v{i}") for i in range(30)]
    fake_db.tables["watch_later"] = [
        {"user_id": "u1", "video_id": "v1", "created_at": "2024-01-01T00:00:00Z"},
        {"user_id": "u1", "video_id": "v2", "created_at": "2024-01-03T00:00:00Z"},
        {"user_id": "u1", "video_id": "gone", "created_at": "2024-01-04T00:00:00Z"},
        {"user_id": "u2", "video_id": "v3", "created_at": "2024-01-05T00:00:00Z"},
    ]
    fake_db.tables["watch_history"] = [
        {"user_id": "u1", "video_id": f"v{i}", "last_watched_at": f"2024-02-{i + 1:02d}T00:00:00Z"}
        for i in range(25)
    ]
    return fake_db


async def test_watch_later_newest_first_without_orphans(library):
    videos = await watch_state.fetch_watch_later("u1")

    assert [v.id for v in videos] == ["v2", "v1"]


async def test_unapproved_videos_hidden_from_library(library):
    library.tables["videos"].append(make_video("r01", status="rejected"))
    library.tables["videos"].append(make_video("p01", status="pending"))
    library.tables["watch_later"].append(
        {"user_id": "u1", "video_id": "r01", "created_at": "2024-02-01T00:00:00Z"}
    )
    library.tables["watch_history"].append(
        {"user_id": "u1", "video_id": "p01", "last_watched_at": "2024-03-01T00:00:00Z"}
    )

    watch_later, history = await watch_state.fetch_watch_state("u1")

    assert [v.id for v in watch_later] == ["v2", "v1"]
    assert "p01" not in {v.id for v in history}
    assert all(v.status == "approved" for v in watch_later + history)


async def test_history_capped_at_twenty_newest_first(library):
    videos = await watch_state.fetch_watch_history("u1")

    assert len(videos) == 20
    assert videos[0].id == "v24"
    assert videos[-1].id == "v5"


async def test_reads_fail_independently(library):
    library.failing_reads.add("watch_later")

    watch_later, history = await watch_state.fetch_watch_state("u1")

    assert watch_later == []
    assert len(history) == 20


async def test_add_and_remove_watch_later(fake_db):
    assert await watch_state.add_to_watch_later("u1", "v1") is True
    assert await watch_state.add_to_watch_later("u1", "v1") is False
    assert await watch_state.is_in_watch_later("u1", "v1") is True

    await watch_state.remove_from_watch_later("u1", "v1")

    assert await watch_state.is_in_watch_later("u1", "v1") is False


async def test_add_watch_later_write_failure_raises(fake_db):
    fake_db.failing_writes.add("watch_later")

    with pytest.raises(SupabaseError):
        await watch_state.add_to_watch_later("u1", "v1")


async def test_record_watch_refreshes_existing_entry(fake_db):
    fake_db.tables["watch_history"] = [
        {"user_id": "u1", "video_id": "v1", "last_watched_at": "2020-01-01T00:00:00Z"},
    ]

    assert await watch_state.record_watch("u1", "v1") is True
    assert await watch_state.record_watch("u1", "v2") is True

    rows = fake_db.tables["watch_history"]
    assert len(rows) == 2
    assert rows[0]["last_watched_at"] > "2020-01-01T00:00:00Z"


async def test_record_watch_failure_is_not_raised(fake_db):
    fake_db.failing_writes.add("watch_history")

    assert await watch_state.record_watch("u1", "v1") is False
