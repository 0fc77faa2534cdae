"""
Todo PG 存储层（SQLAlchemy AsyncSession）

每个方法独立开启一个 Session / 事务，返回脱离 Session 的 TodoRead。

置顶写入的并发保护：
- set_pinned(id, True) 是单条条件 UPDATE：仅当全表无置顶行时生效
- PG READ COMMITTED 下两个并发 UPDATE 可能都看到“无置顶”，
  由部分唯一索引 uq_todos_single_pinned 拦下后到者，IntegrityError 视为竞争落败
"""

import structlog
from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import aliased

from nextup.db.models.todo import Todo
from nextup.todo.base import BaseTodoStore, TodoNotFoundError
from nextup.todo.schemas import TodoCreate, TodoRead, TodoStatus, TodoUpdate

log = structlog.get_logger()

# 批量 UPDATE / DELETE 不回写 identity map（每次操作都是新 Session），rowcount 保持可靠
_NO_SYNC = {"synchronize_session": False}


class TodoStore(BaseTodoStore):
    """Todo 表的 CRUD + 推荐引擎所需的置顶原语"""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    # ── 查询 ──

    async def list_todos(self, status: TodoStatus | None = None) -> list[TodoRead]:
        """列出 Todo，可按 open / done 过滤，统一按 priority、id 排序"""
        query = select(Todo).order_by(Todo.priority, Todo.id)
        if status == "open":
            query = query.where(Todo.done.is_(False))
        elif status == "done":
            query = query.where(Todo.done.is_(True))

        async with self._session_factory() as db:
            result = await db.execute(query)
            return [TodoRead.model_validate(row) for row in result.scalars().all()]

    async def list_open_todos(self) -> list[TodoRead]:
        return await self.list_todos("open")

    async def get_todo(self, todo_id: int) -> TodoRead:
        """按 id 读取，不存在抛 TodoNotFoundError"""
        async with self._session_factory() as db:
            row = await db.get(Todo, todo_id)
            if row is None:
                raise TodoNotFoundError(todo_id)
            return TodoRead.model_validate(row)

    async def get_pinned_todo(self) -> TodoRead | None:
        async with self._session_factory() as db:
            result = await db.execute(select(Todo).where(Todo.pinned.is_(True)))
            row = result.scalars().first()
            return TodoRead.model_validate(row) if row else None

    # ── 写入 ──

    async def create_todo(self, data: TodoCreate) -> TodoRead:
        async with self._session_factory() as db:
            row = Todo(title=data.title, priority=data.priority)
            db.add(row)
            await db.commit()
            await db.refresh(row)
            log.info("Todo 已创建", todo_id=row.id, priority=row.priority)
            return TodoRead.model_validate(row)

    async def update_todo(self, todo_id: int, data: TodoUpdate) -> TodoRead:
        """部分更新 title / priority；不影响置顶标记"""
        async with self._session_factory() as db:
            row = await db.get(Todo, todo_id)
            if row is None:
                raise TodoNotFoundError(todo_id)
            for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
                setattr(row, field, value)
            await db.commit()
            await db.refresh(row)
            return TodoRead.model_validate(row)

    async def delete_todo(self, todo_id: int) -> None:
        stmt = delete(Todo).where(Todo.id == todo_id).execution_options(**_NO_SYNC)
        async with self._session_factory() as db:
            deleted = (await db.execute(stmt)).rowcount
            await db.commit()
        if deleted == 0:
            raise TodoNotFoundError(todo_id)
        log.info("Todo 已删除", todo_id=todo_id)

    # ── 置顶原语 ──

    async def set_pinned(self, todo_id: int, pinned: bool) -> bool:
        stmt = (
            update(Todo)
            .where(Todo.id == todo_id)
            .values(pinned=pinned)
            .execution_options(**_NO_SYNC)
        )
        if pinned:
            # 必须用别名，否则子查询会被关联到外层 UPDATE 的同一张表
            other = aliased(Todo)
            already_pinned = select(other.id).where(other.pinned.is_(True)).exists()
            stmt = stmt.where(Todo.done.is_(False), ~already_pinned)

        async with self._session_factory() as db:
            try:
                updated = (await db.execute(stmt)).rowcount
                await db.commit()
            except IntegrityError:
                # 唯一索引冲突：并发请求已先一步置顶
                await db.rollback()
                log.warning("置顶写入冲突，已回滚", todo_id=todo_id)
                return False
        return updated > 0

    async def set_done(self, todo_id: int, done: bool, pinned: bool | None = None) -> bool:
        if pinned:
            raise ValueError("置顶只能通过 set_pinned 条件写入")

        values: dict[str, bool] = {"done": done}
        if pinned is not None:
            values["pinned"] = pinned

        stmt = (
            update(Todo)
            .where(Todo.id == todo_id)
            .values(**values)
            .execution_options(**_NO_SYNC)
        )
        async with self._session_factory() as db:
            updated = (await db.execute(stmt)).rowcount
            await db.commit()
        return updated > 0
