"""
接口层依赖注入：Store / RecommendationService 组装
"""

import redis.asyncio as aioredis
from fastapi import Depends

from nextup.cache.redis_client import get_redis
from nextup.config import get_settings
from nextup.db.engine import async_session
from nextup.recommend.lock import redis_recommend_lock
from nextup.recommend.service import RecommendationService
from nextup.todo.store import TodoStore

settings = get_settings()


def get_todo_store() -> TodoStore:
    """FastAPI 依赖注入：Todo 存储层（每个操作自带 Session）"""
    return TodoStore(async_session)


def get_recommendation_service(
    store: TodoStore = Depends(get_todo_store),
    redis: aioredis.Redis = Depends(get_redis),
) -> RecommendationService:
    """FastAPI 依赖注入：推荐控制器，按配置决定是否启用 Redis 锁"""
    lock = redis_recommend_lock(redis) if settings.RECOMMEND_LOCK_ENABLED else None
    return RecommendationService(store, lock=lock)
