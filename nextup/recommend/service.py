"""
推荐控制器：粘性推荐（pin）状态机

状态完全由存储层中的 pinned 标记决定，本类不持有任何可变状态：
- Unpinned：无置顶行 → 抽签并条件写入置顶
- Pinned：恰有一行置顶 → 原样返回，不重新抽签（幂等）

mark_done 在同一条 UPDATE 中清除置顶；mark_not_done 不恢复置顶；
clear_pin 显式清除，强制下次重新抽签。
"""

import random
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager

import structlog
from redis.exceptions import LockNotOwnedError

from nextup.config import get_settings
from nextup.observability.metrics import PIN_CONFLICT_TOTAL, RECOMMEND_TOTAL
from nextup.recommend.probability import compute_distribution
from nextup.recommend.selector import select_weighted
from nextup.todo.base import BaseTodoStore, TodoNotFoundError
from nextup.todo.schemas import TodoRead

log = structlog.get_logger()
settings = get_settings()


class PinConflictError(RuntimeError):
    """多次置顶写入均失败，且没有其他请求完成置顶"""

    def __init__(self, attempts: int):
        super().__init__(f"置顶写入连续 {attempts} 次冲突")
        self.attempts = attempts


class RecommendationService:
    """加权随机推荐 + 粘性置顶"""

    def __init__(
        self,
        store: BaseTodoStore,
        rng: Callable[[], float] = random.random,
        lock: Callable[[], AbstractAsyncContextManager] | None = None,
        max_retries: int | None = None,
    ):
        """
        Args:
            store: 存储层，置顶状态的唯一数据源
            rng: [0, 1) 均匀分布随机源，测试可注入固定值
            lock: 可选的锁工厂（如 Redis 分布式锁），串行化“查置顶-抽签-置顶”
            max_retries: 置顶写入冲突后的最大尝试次数
        """
        self.store = store
        self.rng = rng
        self.lock = lock
        self.max_retries = settings.RECOMMEND_MAX_RETRIES if max_retries is None else max_retries
        if self.max_retries < 1:
            raise ValueError(f"max_retries 必须 >= 1，实际为 {self.max_retries}")

    # ── 推荐 ──

    async def get_recommendation(self) -> TodoRead | None:
        """返回当前推荐；无未完成 Todo 时返回 None"""
        if self.lock is None:
            return await self._get_or_pin()
        result = None
        finished = False
        try:
            async with self.lock():
                result = await self._get_or_pin()
                finished = True
        except LockNotOwnedError as e:
            # 锁在持有期间过期：置顶已提交，释放失败不影响结果
            if not finished:
                raise
            log.warning("推荐锁释放时已过期", error=str(e), todo_id=result.id if result else None)
        return result

    async def _get_or_pin(self) -> TodoRead | None:
        pinned = await self.store.get_pinned_todo()
        if pinned is not None:
            RECOMMEND_TOTAL.labels(outcome="pinned").inc()
            return pinned

        for attempt in range(1, self.max_retries + 1):
            open_todos = await self.store.list_open_todos()
            if not open_todos:
                RECOMMEND_TOTAL.labels(outcome="empty").inc()
                return None

            chosen = select_weighted(compute_distribution(open_todos), self.rng())
            if await self.store.set_pinned(chosen.id, True):
                RECOMMEND_TOTAL.labels(outcome="rolled").inc()
                log.info(
                    "推荐已抽取并置顶",
                    todo_id=chosen.id,
                    priority=chosen.priority,
                    candidates=len(open_todos),
                )
                return chosen.model_copy(update={"pinned": True})

            # 条件写失败：大概率是并发请求抢先置顶，直接采用对方结果
            PIN_CONFLICT_TOTAL.inc()
            winner = await self.store.get_pinned_todo()
            if winner is not None:
                RECOMMEND_TOTAL.labels(outcome="pinned").inc()
                log.info("置顶竞争落败，采用已置顶结果", todo_id=winner.id, lost_todo_id=chosen.id)
                return winner

            # 选中的条目在抽签后被完成或删除，重新抽签
            log.warning("置顶写入失败，重新抽签", todo_id=chosen.id, attempt=attempt)

        log.error("置顶重试耗尽", attempts=self.max_retries)
        raise PinConflictError(self.max_retries)

    # ── 状态变更 ──

    async def mark_done(self, todo_id: int) -> None:
        """标记完成，并在同一次写入中清除置顶（Pinned → Unpinned）"""
        if not await self.store.set_done(todo_id, True, pinned=False):
            raise TodoNotFoundError(todo_id)
        log.info("Todo 已完成", todo_id=todo_id)

    async def mark_not_done(self, todo_id: int) -> None:
        """取消完成；不恢复置顶"""
        if not await self.store.set_done(todo_id, False):
            raise TodoNotFoundError(todo_id)
        log.info("Todo 已取消完成", todo_id=todo_id)

    async def clear_pin(self) -> TodoRead | None:
        """清除当前置顶，返回被清除的 Todo；本就无置顶时为 no-op"""
        pinned = await self.store.get_pinned_todo()
        if pinned is None:
            return None

        if not await self.store.set_pinned(pinned.id, False):
            # 读写之间该行被删除，置顶随之消失
            log.info("待清除的置顶已不存在", todo_id=pinned.id)
            return None

        log.info("推荐置顶已清除", todo_id=pinned.id)
        return pinned.model_copy(update={"pinned": False})
