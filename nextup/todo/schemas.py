"""
Todo 数据模型（接口层 / 存储层之间传递的值对象）

TodoRead 与 ORM 行解耦：Store 返回时已脱离 Session，可安全跨协程传递。
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

TodoStatus = Literal["open", "done"]


class TodoCreate(BaseModel):
    """创建 Todo"""

    title: str = Field(min_length=1, max_length=255)
    priority: int = Field(ge=1, description="数值越小越紧急")


class TodoUpdate(BaseModel):
    """部分更新 Todo；done / pinned 走专门的接口，不在这里改"""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    priority: int | None = Field(default=None, ge=1)


class TodoRead(BaseModel):
    """单个 Todo 条目"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    priority: int = Field(ge=1)
    done: bool = False
    pinned: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None
