from datetime import datetime, timezone
from types import SimpleNamespace
from typing import Any, List, Tuple

import httpx
import pytest

from src.functions.feed_fetcher.core.contracts import Follower, Item
from src.functions.feed_fetcher.core.db import SupabaseStore
from src.functions.feed_fetcher.core.errors import StoreError
from src.shared.batch.retry import retry_on_network_error
from src.shared.db.connection import SupabaseConfig
from src.shared.utils.config_validator import ConfigurationError

NOW = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


class FakeQuery:
    """Records the PostgREST builder chain and returns canned rows."""

    def __init__(self, table: str, client: "FakeSupabaseClient"):
        self.table = table
        self.client = client
        self.chain: List[Tuple[str, Any, Any]] = []

    def __getattr__(self, name: str):
        def record(*args, **kwargs):
            self.chain.append((name, args, kwargs))
            return self

        return record

    def execute(self):
        self.client.executed.append(self)
        if self.client.error is not None:
            raise self.client.error
        return SimpleNamespace(data=self.client.rows)


class FakeSupabaseClient:
    def __init__(self, rows=None, error=None):
        self.rows = list(rows or [])
        self.error = error
        self.executed: List[FakeQuery] = []

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(name, self)


def _store(client: FakeSupabaseClient) -> SupabaseStore:
    return SupabaseStore(client=client, max_retries=1, clock=lambda: NOW)


def _calls(query: FakeQuery):
    return [(name, args, kwargs) for name, args, kwargs in query.chain]


def test_list_feed_driven_profiles_skips_rows_without_feed():
    client = FakeSupabaseClient(
        rows=[
            {"pid": "p1", "feed_url": "https://p1/feed", "follower_count": "3"},
            {"pid": "p2", "feed_url": ""},
            {"pid": None, "feed_url": "https://nobody/feed"},
        ]
    )

    profiles = _store(client).list_feed_driven_profiles()

    assert [(p.pid, p.feed_url, p.follower_count) for p in profiles] == [("p1", "https://p1/feed", 3)]
    query = client.executed[0]
    assert query.table == "profiles"
    assert ("neq", ("feed_url", ""), {}) in _calls(query)


def test_select_items_needing_images_filters_and_limits():
    client = FakeSupabaseClient(rows=[{"id": "a", "pid": "p1", "event": 5, "link": "https://x"}])

    items = _store(client).select_items_needing_images(30)

    assert items == [Item(id="a", pid="p1", event=5, link="https://x")]
    calls = _calls(client.executed[0])
    assert ("or_", ("image.is.null,image.eq.",), {}) in calls
    assert ("is_", ("image_checked_at", "null"), {}) in calls
    assert ("order", ("event",), {"desc": True}) in calls
    assert ("limit", (30,), {}) in calls


def test_upsert_item_without_image_leaves_stored_image_alone():
    client = FakeSupabaseClient()

    _store(client).upsert_item(Item(id="a", pid="p1", event=5, text="t", link="l"))

    name, args, kwargs = _calls(client.executed[0])[0]
    assert name == "upsert"
    assert "image" not in args[0]
    assert args[0]["id"] == "a"
    assert kwargs == {"on_conflict": "id"}


def test_upsert_item_keeps_feed_supplied_image():
    client = FakeSupabaseClient()

    _store(client).upsert_item(Item(id="a", pid="p1", event=5, image="https://cdn/x.jpg"))

    assert _calls(client.executed[0])[0][1][0]["image"] == "https://cdn/x.jpg"


def test_update_item_marks_item_checked():
    client = FakeSupabaseClient()
    store = _store(client)

    store.update_item(Item(id="a", pid="p1", event=5))
    store.update_item(Item(id="b", pid="p1", event=5, image="b.png"))

    first, second = (_calls(query) for query in client.executed)
    assert first[0] == ("update", ({"image_checked_at": NOW.isoformat()},), {})
    assert first[1] == ("eq", ("id", "a"), {})
    assert second[0] == ("update", ({"image_checked_at": NOW.isoformat(), "image": "b.png"},), {})


def test_list_followers_pages_by_range():
    client = FakeSupabaseClient(rows=[{"follower_pid": "f1"}, {"follower_pid": "f2"}])

    followers = _store(client).list_followers("p1", 5, 10)

    assert followers == [Follower("f1"), Follower("f2")]
    calls = _calls(client.executed[0])
    assert ("eq", ("pid", "p1"), {}) in calls
    assert ("range", (10, 14), {}) in calls


def test_list_followers_with_zero_limit_skips_query():
    client = FakeSupabaseClient()

    assert _store(client).list_followers("p1", 0) == []
    assert client.executed == []


def test_follow_recreates_edge_as_most_recent():
    client = FakeSupabaseClient()

    _store(client).follow("f1", "p1")

    name, args, kwargs = _calls(client.executed[0])[0]
    assert name == "upsert"
    assert args[0] == {"follower_pid": "f1", "pid": "p1", "followed_at": NOW.isoformat()}
    assert kwargs == {"on_conflict": "follower_pid,pid"}


def test_unfollow_deletes_single_edge():
    client = FakeSupabaseClient()

    _store(client).unfollow("f1", "p1")

    assert _calls(client.executed[0]) == [
        ("delete", (), {}),
        ("eq", ("follower_pid", "f1"), {}),
        ("eq", ("pid", "p1"), {}),
    ]


def test_client_errors_become_store_errors():
    client = FakeSupabaseClient(error=RuntimeError("permission denied"))

    with pytest.raises(StoreError, match="unfollow failed: permission denied"):
        _store(client).unfollow("f1", "p1")


def test_retry_on_network_error_retries_transient_failures():
    attempts = []
    delays = []

    def flaky():
        attempts.append(1)
        if len(attempts) < 3:
            raise httpx.ConnectError("connection refused")
        return "ok"

    assert retry_on_network_error(flaky, max_retries=3, initial_delay=0.5, sleep=delays.append) == "ok"
    assert delays == [0.5, 1.0]


def test_retry_on_network_error_does_not_retry_other_errors():
    attempts = []

    def broken():
        attempts.append(1)
        raise ValueError("bad request")

    with pytest.raises(ValueError):
        retry_on_network_error(broken, max_retries=3, sleep=lambda _: None)
    assert len(attempts) == 1


def test_supabase_config_from_env(monkeypatch):
    monkeypatch.setenv("SUPABASE_URL", "https://project.supabase.co")
    monkeypatch.setenv("SUPABASE_KEY", "service-key")
    monkeypatch.delenv("SUPABASE_SCHEMA", raising=False)

    config = SupabaseConfig.from_env()

    assert config == SupabaseConfig("https://project.supabase.co", "service-key", "public")


def test_supabase_config_requires_url_and_key(monkeypatch):
    monkeypatch.setenv("SUPABASE_URL", "https://project.supabase.co")
    monkeypatch.delenv("SUPABASE_KEY", raising=False)

    with pytest.raises(ConfigurationError, match="SUPABASE_KEY"):
        SupabaseConfig.from_env()
