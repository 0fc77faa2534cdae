"""HTTP tests for the todo and recommendation endpoints."""

from contextlib import asynccontextmanager

import httpx
import pytest
from redis.exceptions import LockError, LockNotOwnedError

from conftest import make_todo
from doubles import FlakyPinStore
from nextup.api.deps import get_recommendation_service, get_todo_store
from nextup.cache.redis_client import get_redis
from nextup.db.engine import get_db
from nextup.main import app
from nextup.recommend.service import RecommendationService


@pytest.fixture
async def client(store):
    app.dependency_overrides[get_todo_store] = lambda: store
    # rng 0.0 always picks the first open todo
    app.dependency_overrides[get_recommendation_service] = lambda: RecommendationService(
        store, rng=lambda: 0.0
    )
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


async def _create(client, title: str, priority: int) -> dict:
    resp = await client.post("/todos", json={"title": title, "priority": priority})
    assert resp.status_code == 201
    return resp.json()


class TestTodosApi:
    async def test_create_and_list(self, client):
        await _create(client, "b", 2)
        await _create(client, "a", 1)

        resp = await client.get("/todos")
        assert resp.status_code == 200
        assert [t["title"] for t in resp.json()] == ["a", "b"]

    async def test_priority_must_be_positive(self, client):
        resp = await client.post("/todos", json={"title": "x", "priority": 0})
        assert resp.status_code == 422

    async def test_get_update_delete(self, client):
        todo = await _create(client, "a", 3)

        resp = await client.patch(f"/todos/{todo['id']}", json={"priority": 1})
        assert resp.json()["priority"] == 1

        assert (await client.delete(f"/todos/{todo['id']}")).status_code == 204
        assert (await client.get(f"/todos/{todo['id']}")).status_code == 404

    async def test_check_and_uncheck(self, client):
        todo = await _create(client, "a", 1)

        resp = await client.post(f"/todos/{todo['id']}/check")
        assert resp.json()["done"] is True
        assert (await client.get("/todos", params={"status": "open"})).json() == []

        resp = await client.post(f"/todos/{todo['id']}/uncheck")
        assert resp.json()["done"] is False

    async def test_check_missing_returns_404(self, client):
        assert (await client.post("/todos/999/check")).status_code == 404

    async def test_trace_id_is_echoed(self, client):
        resp = await client.get("/todos", headers={"X-Trace-ID": "trace-123"})
        assert resp.headers["X-Trace-ID"] == "trace-123"


class TestRecommendationApi:
    async def test_empty_returns_null(self, client):
        resp = await client.get("/recommendation")
        assert resp.status_code == 200
        assert resp.json() == {"todo": None}

    async def test_recommendation_is_sticky_until_checked(self, client):
        a = await _create(client, "a", 2)
        b = await _create(client, "b", 3)

        first = (await client.get("/recommendation")).json()["todo"]
        assert first["id"] == a["id"]
        assert first["pinned"] is True

        # raising b's priority does not move the pin
        await client.patch(f"/todos/{b['id']}", json={"priority": 1})
        assert (await client.get("/recommendation")).json()["todo"]["id"] == a["id"]

        await client.post(f"/todos/{a['id']}/check")
        assert (await client.get("/recommendation")).json()["todo"]["id"] == b["id"]

    async def test_uncheck_does_not_restore_pin(self, client):
        a = await _create(client, "a", 1)
        await client.get("/recommendation")
        await client.post(f"/todos/{a['id']}/check")
        await client.post(f"/todos/{a['id']}/uncheck")

        assert (await client.get(f"/todos/{a['id']}")).json()["pinned"] is False

    async def test_clear_pin(self, client):
        a = await _create(client, "a", 1)
        await client.get("/recommendation")

        resp = await client.delete("/recommendation")
        assert resp.json()["cleared"]["id"] == a["id"]
        assert (await client.get(f"/todos/{a['id']}")).json()["pinned"] is False

        assert (await client.delete("/recommendation")).json() == {"cleared": None}


class TestRecommendationErrors:
    async def test_exhausted_pin_retries_return_409(self, client):
        store = FlakyPinStore([make_todo(1, 1)], failures=10)
        app.dependency_overrides[get_recommendation_service] = lambda: RecommendationService(
            store, rng=lambda: 0.0, max_retries=1
        )

        resp = await client.get("/recommendation")

        assert resp.status_code == 409
        assert store.pinned_ids() == []

    async def test_lock_acquire_failure_returns_503(self, client, store):
        @asynccontextmanager
        async def busy_lock():
            raise LockError("Unable to acquire lock within the time specified")
            yield

        await _create(client, "a", 1)
        app.dependency_overrides[get_recommendation_service] = lambda: RecommendationService(
            store, rng=lambda: 0.0, lock=busy_lock
        )

        resp = await client.get("/recommendation")

        assert resp.status_code == 503
        assert await store.get_pinned_todo() is None

    async def test_lock_expired_on_release_still_returns_pin(self, client, store):
        @asynccontextmanager
        async def expiring_lock():
            yield
            raise LockNotOwnedError("lock expired before release")

        a = await _create(client, "a", 1)
        app.dependency_overrides[get_recommendation_service] = lambda: RecommendationService(
            store, rng=lambda: 0.0, lock=expiring_lock
        )

        resp = await client.get("/recommendation")

        assert resp.status_code == 200
        assert resp.json()["todo"]["id"] == a["id"]
        assert (await store.get_pinned_todo()).id == a["id"]


class _DownRedis:
    async def ping(self):
        raise ConnectionError("redis down")


class TestHealth:
    async def test_redis_outage_is_reported_but_not_degrading_without_lock(
        self, client, session_factory
    ):
        async def _db():
            async with session_factory() as db:
                yield db

        app.dependency_overrides[get_db] = _db
        app.dependency_overrides[get_redis] = lambda: _DownRedis()

        body = (await client.get("/health")).json()
        assert body["database"] == "ok"
        assert body["redis"].startswith("error")
        assert body["status"] == "ok"
