"""
Todo 模型：待办条目 + 推荐置顶标记

pinned 为“粘性推荐”标记，全表至多一行为 true。
约束由部分唯一索引 uq_todos_single_pinned 兜底（PG / SQLite 均支持 WHERE 子句索引）。
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, Integer, String, false, func, text
from sqlalchemy.orm import Mapped, mapped_column

from nextup.db.models.base import Base


class Todo(Base):
    """待办表"""

    __tablename__ = "todos"
    __table_args__ = (
        Index(
            "uq_todos_single_pinned",
            "pinned",
            unique=True,
            postgresql_where=text("pinned"),
            sqlite_where=text("pinned = 1"),
        ),
        Index("ix_todos_done_priority", "done", "priority"),
        {"schema": Base.__table_args__["schema"]},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False, comment="标题")
    priority: Mapped[int] = mapped_column(
        Integer, nullable=False, comment="优先级，>= 1，数值越小越紧急"
    )
    done: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false(), comment="是否已完成"
    )
    pinned: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false(), comment="是否为当前推荐"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), comment="创建时间"
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), comment="更新时间"
    )
