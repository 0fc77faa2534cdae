"""
推荐分布式锁：Redis Lock 串行化多 worker 的“查置顶-抽签-置顶”

锁只减少无效抽签，正确性仍由存储层条件写 + 部分唯一索引保证。
"""

from collections.abc import Callable

import redis.asyncio as aioredis
from redis.asyncio.lock import Lock

from nextup.cache.redis_client import RedisKeys
from nextup.config import get_settings

settings = get_settings()


def redis_recommend_lock(redis: aioredis.Redis) -> Callable[[], Lock]:
    """构造锁工厂；每次推荐请求取一把新的 Lock 实例"""

    def factory() -> Lock:
        return redis.lock(
            RedisKeys.recommend_lock(),
            timeout=settings.RECOMMEND_LOCK_TIMEOUT,
            blocking_timeout=settings.RECOMMEND_LOCK_BLOCKING_TIMEOUT,
        )

    return factory
