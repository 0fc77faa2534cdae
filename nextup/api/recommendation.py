"""
/recommendation 接口：获取 / 清除当前推荐

- GET    /recommendation：有置顶返回置顶，否则抽签并置顶
- DELETE /recommendation：清除置顶，下次 GET 重新抽签
"""

import structlog
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from redis.exceptions import LockError

from nextup.api.deps import get_recommendation_service
from nextup.recommend.service import PinConflictError, RecommendationService
from nextup.todo.schemas import TodoRead

router = APIRouter(prefix="/recommendation", tags=["推荐"])
log = structlog.get_logger()


class RecommendationResponse(BaseModel):
    todo: TodoRead | None = None  # 无未完成 Todo 时为 null


class ClearPinResponse(BaseModel):
    cleared: TodoRead | None = None  # 本就无置顶时为 null


@router.get("", response_model=RecommendationResponse)
async def get_recommendation(
    service: RecommendationService = Depends(get_recommendation_service),
):
    """获取推荐（幂等：置顶期间重复调用返回同一条）"""
    try:
        todo = await service.get_recommendation()
    except PinConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except LockError as e:
        log.error("推荐锁获取失败", error=str(e))
        raise HTTPException(status_code=503, detail="推荐服务繁忙，请稍后重试")
    return RecommendationResponse(todo=todo)


@router.delete("", response_model=ClearPinResponse)
async def clear_recommendation(
    service: RecommendationService = Depends(get_recommendation_service),
):
    """清除当前置顶，强制下次重新抽签"""
    cleared = await service.clear_pin()
    return ClearPinResponse(cleared=cleared)
