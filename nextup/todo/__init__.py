"""
Todo 模块：待办条目的存储与值对象

TodoStore 提供 SQLAlchemy 持久化，BaseTodoStore 是推荐引擎依赖的最小契约。
"""

from nextup.todo.base import BaseTodoStore, TodoNotFoundError
from nextup.todo.schemas import TodoCreate, TodoRead, TodoUpdate
from nextup.todo.store import TodoStore

__all__ = [
    "BaseTodoStore",
    "TodoCreate",
    "TodoNotFoundError",
    "TodoRead",
    "TodoStore",
    "TodoUpdate",
]
