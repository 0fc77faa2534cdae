"""
推荐引擎依赖的存储契约

RecommendationService 只通过这 4 个方法读写置顶状态，
生产环境由 TodoStore（SQLAlchemy）实现，测试可替换为内存实现。
"""

from abc import ABC, abstractmethod

from nextup.todo.schemas import TodoRead


class TodoNotFoundError(LookupError):
    """按 id 找不到 Todo"""

    def __init__(self, todo_id: int):
        super().__init__(f"Todo {todo_id} 不存在")
        self.todo_id = todo_id


class BaseTodoStore(ABC):
    """推荐引擎所需的最小存储接口"""

    @abstractmethod
    async def list_open_todos(self) -> list[TodoRead]:
        """所有未完成 Todo，按 priority 升序、id 升序（稳定排序）"""

    @abstractmethod
    async def get_pinned_todo(self) -> TodoRead | None:
        """当前置顶的 Todo，没有则返回 None"""

    @abstractmethod
    async def set_pinned(self, todo_id: int, pinned: bool) -> bool:
        """
        修改置顶标记。

        pinned=True 时为条件写：仅当目标未完成且全表无置顶行时生效，
        写入失败（竞争落败 / 行不存在 / 已完成）返回 False。
        """

    @abstractmethod
    async def set_done(self, todo_id: int, done: bool, pinned: bool | None = None) -> bool:
        """
        修改完成状态，可在同一条 UPDATE 中顺带修改 pinned。

        pinned=None 表示不动置顶标记；行不存在返回 False。
        """
