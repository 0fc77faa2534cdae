"""Tests for the SQLAlchemy TodoStore against SQLite."""

import asyncio

import pytest
from sqlalchemy import false, select, update
from sqlalchemy.exc import IntegrityError

import nextup.todo.store as store_module
from nextup.db.models.todo import Todo
from nextup.recommend.service import RecommendationService
from nextup.todo.base import TodoNotFoundError
from nextup.todo.schemas import TodoCreate, TodoUpdate


class TestCrud:
    async def test_create_defaults(self, store):
        todo = await store.create_todo(TodoCreate(title="write report", priority=2))
        assert todo.id is not None
        assert todo.done is False
        assert todo.pinned is False
        assert todo.created_at is not None

    async def test_get_and_missing(self, store, seed):
        [todo] = await seed(("a", 1))
        assert (await store.get_todo(todo.id)).title == "a"
        with pytest.raises(TodoNotFoundError):
            await store.get_todo(999)

    async def test_update_only_touches_given_fields(self, store, seed):
        [todo] = await seed(("a", 3))
        updated = await store.update_todo(todo.id, TodoUpdate(priority=1))
        assert updated.priority == 1
        assert updated.title == "a"

    async def test_update_missing_raises(self, store):
        with pytest.raises(TodoNotFoundError):
            await store.update_todo(999, TodoUpdate(title="x"))

    async def test_delete(self, store, seed):
        [todo] = await seed(("a", 1))
        await store.delete_todo(todo.id)
        assert await store.list_todos() == []
        with pytest.raises(TodoNotFoundError):
            await store.delete_todo(todo.id)


class TestListing:
    async def test_ordered_by_priority_then_id(self, store, seed):
        await seed(("c", 3), ("a1", 1), ("b", 2), ("a2", 1))
        titles = [t.title for t in await store.list_todos()]
        assert titles == ["a1", "a2", "b", "c"]

    async def test_status_filters(self, store, seed):
        a, b = await seed(("a", 1), ("b", 2))
        await store.set_done(b.id, True)

        assert [t.id for t in await store.list_open_todos()] == [a.id]
        assert [t.id for t in await store.list_todos("done")] == [b.id]
        assert len(await store.list_todos()) == 2


class TestPinPrimitives:
    async def test_pin_and_read_back(self, store, seed):
        a, _ = await seed(("a", 1), ("b", 2))
        assert await store.set_pinned(a.id, True) is True
        assert (await store.get_pinned_todo()).id == a.id

    async def test_second_pin_is_rejected(self, store, seed):
        a, b = await seed(("a", 1), ("b", 2))
        assert await store.set_pinned(a.id, True) is True
        assert await store.set_pinned(b.id, True) is False
        assert (await store.get_pinned_todo()).id == a.id

    async def test_done_todo_cannot_be_pinned(self, store, seed):
        [a] = await seed(("a", 1))
        await store.set_done(a.id, True)
        assert await store.set_pinned(a.id, True) is False
        assert await store.get_pinned_todo() is None

    async def test_pin_missing_todo_fails(self, store):
        assert await store.set_pinned(999, True) is False

    async def test_unpin(self, store, seed):
        [a] = await seed(("a", 1))
        await store.set_pinned(a.id, True)
        assert await store.set_pinned(a.id, False) is True
        assert await store.get_pinned_todo() is None

    async def test_set_done_clears_pin_in_one_write(self, store, seed):
        [a] = await seed(("a", 1))
        await store.set_pinned(a.id, True)
        assert await store.set_done(a.id, True, pinned=False) is True

        todo = await store.get_todo(a.id)
        assert todo.done is True
        assert todo.pinned is False

    async def test_set_done_without_pin_argument_keeps_pin(self, store, seed):
        [a] = await seed(("a", 1))
        await store.set_pinned(a.id, True)
        await store.set_done(a.id, False)
        assert (await store.get_todo(a.id)).pinned is True

    async def test_set_done_cannot_pin(self, store, seed):
        [a] = await seed(("a", 1))
        with pytest.raises(ValueError):
            await store.set_done(a.id, False, pinned=True)

    async def test_set_done_missing_todo(self, store):
        assert await store.set_done(999, True, pinned=False) is False

    async def test_unique_index_blocks_second_pinned_row(self, store, seed, session_factory):
        a, b = await seed(("a", 1), ("b", 2))
        await store.set_pinned(a.id, True)

        async with session_factory() as db:
            with pytest.raises(IntegrityError):
                await db.execute(update(Todo).where(Todo.id == b.id).values(pinned=True))
                await db.commit()

    async def test_write_rejected_by_unique_index_reports_lost_race(self, store, seed, monkeypatch):
        a, b = await seed(("a", 1), ("b", 2))
        await store.set_pinned(a.id, True)

        # the existing pin is invisible to the NOT EXISTS guard, as with two
        # uncommitted writers under READ COMMITTED
        monkeypatch.setattr(store_module, "select", lambda *cols: select(*cols).where(false()))
        assert await store.set_pinned(b.id, True) is False
        monkeypatch.undo()

        assert (await store.get_pinned_todo()).id == a.id
        assert (await store.get_todo(b.id)).pinned is False


class TestRecommendationOnSql:
    async def test_idempotent_and_invalidated_by_done(self, store, seed):
        a, b = await seed(("a", 1), ("b", 1))
        service = RecommendationService(store, rng=lambda: 0.3)

        first = await service.get_recommendation()
        assert first.id == a.id
        assert (await service.get_recommendation()).id == a.id

        await service.mark_done(a.id)
        assert (await service.get_recommendation()).id == b.id

    async def test_concurrent_first_calls_pin_exactly_one(self, store, seed):
        await seed(*[(f"t{i}", i) for i in range(1, 6)])
        draws = iter([i / 10 for i in range(10)])
        service = RecommendationService(store, rng=lambda: next(draws))

        results = await asyncio.gather(*(service.get_recommendation() for _ in range(10)))

        pinned = [t for t in await store.list_todos() if t.pinned]
        assert len(pinned) == 1
        assert {t.id for t in results} == {pinned[0].id}
