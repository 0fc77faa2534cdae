"""
/todos 接口：Todo 增删改查 + 勾选 / 取消勾选
"""

from fastapi import APIRouter, Depends, HTTPException, Response

from nextup.api.deps import get_recommendation_service, get_todo_store
from nextup.recommend.service import RecommendationService
from nextup.todo.base import TodoNotFoundError
from nextup.todo.schemas import TodoCreate, TodoRead, TodoStatus, TodoUpdate
from nextup.todo.store import TodoStore

router = APIRouter(prefix="/todos", tags=["待办"])


def _not_found(e: TodoNotFoundError) -> HTTPException:
    return HTTPException(status_code=404, detail=str(e))


@router.get("", response_model=list[TodoRead])
async def list_todos(
    status: TodoStatus | None = None,
    store: TodoStore = Depends(get_todo_store),
):
    """列出 Todo，按 priority 升序"""
    return await store.list_todos(status)


@router.post("", response_model=TodoRead, status_code=201)
async def create_todo(body: TodoCreate, store: TodoStore = Depends(get_todo_store)):
    return await store.create_todo(body)


@router.get("/{todo_id}", response_model=TodoRead)
async def get_todo(todo_id: int, store: TodoStore = Depends(get_todo_store)):
    try:
        return await store.get_todo(todo_id)
    except TodoNotFoundError as e:
        raise _not_found(e)


@router.patch("/{todo_id}", response_model=TodoRead)
async def update_todo(
    todo_id: int,
    body: TodoUpdate,
    store: TodoStore = Depends(get_todo_store),
):
    """修改标题 / 优先级；不会清除置顶，需要时调用 DELETE /recommendation"""
    try:
        return await store.update_todo(todo_id, body)
    except TodoNotFoundError as e:
        raise _not_found(e)


@router.delete("/{todo_id}", status_code=204)
async def delete_todo(todo_id: int, store: TodoStore = Depends(get_todo_store)):
    try:
        await store.delete_todo(todo_id)
    except TodoNotFoundError as e:
        raise _not_found(e)
    return Response(status_code=204)


@router.post("/{todo_id}/check", response_model=TodoRead)
async def check_todo(
    todo_id: int,
    store: TodoStore = Depends(get_todo_store),
    service: RecommendationService = Depends(get_recommendation_service),
):
    """标记完成（同时清除置顶）"""
    try:
        await service.mark_done(todo_id)
        return await store.get_todo(todo_id)
    except TodoNotFoundError as e:
        raise _not_found(e)


@router.post("/{todo_id}/uncheck", response_model=TodoRead)
async def uncheck_todo(
    todo_id: int,
    store: TodoStore = Depends(get_todo_store),
    service: RecommendationService = Depends(get_recommendation_service),
):
    """取消完成（不恢复置顶）"""
    try:
        await service.mark_not_done(todo_id)
        return await store.get_todo(todo_id)
    except TodoNotFoundError as e:
        raise _not_found(e)
