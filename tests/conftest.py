"""Shared fixtures: SQLite-backed store and todo builders."""

import os

# 必须在导入 nextup 之前设置，Settings 在模块导入时即被实例化
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["DB_SCHEMA"] = ""
os.environ["RECOMMEND_LOCK_ENABLED"] = "false"
os.environ["ENV"] = "test"

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from nextup.db.models import Base
from nextup.todo.schemas import TodoCreate, TodoRead
from nextup.todo.store import TodoStore


def make_todo(todo_id: int, priority: int, **overrides) -> TodoRead:
    """Build a detached TodoRead for pure-function and in-memory tests."""
    fields = {"id": todo_id, "title": f"todo-{todo_id}", "priority": priority}
    fields.update(overrides)
    return TodoRead(**fields)


@pytest.fixture
async def session_factory(tmp_path):
    """File-backed SQLite so concurrent sessions get separate connections."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'nextup.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
def store(session_factory) -> TodoStore:
    return TodoStore(session_factory)


@pytest.fixture
def seed(store):
    """Create todos from (title, priority) pairs, returning them in creation order."""

    async def _seed(*items: tuple[str, int]) -> list[TodoRead]:
        return [await store.create_todo(TodoCreate(title=t, priority=p)) for t, p in items]

    return _seed
