"""
健康检查接口：探活 + 依赖服务状态
"""

import redis.asyncio as aioredis
import structlog
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from nextup.cache.redis_client import get_redis
from nextup.config import get_settings
from nextup.db.engine import get_db

router = APIRouter(tags=["健康检查"])
log = structlog.get_logger()
settings = get_settings()


@router.get("/health")
async def health_check(
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
):
    """健康检查：校验数据库 + Redis 连接；Redis 仅在启用推荐锁时影响整体状态"""
    status = {"status": "ok", "database": "ok", "redis": "ok"}

    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        status["database"] = f"error: {e}"
        status["status"] = "degraded"
        log.error("数据库健康检查失败", error=str(e))

    try:
        await redis.ping()
    except Exception as e:
        status["redis"] = f"error: {e}"
        if settings.RECOMMEND_LOCK_ENABLED:
            status["status"] = "degraded"
        log.error("Redis 健康检查失败", error=str(e))

    return status
