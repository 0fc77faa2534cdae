"""
模型统一导出：Alembic 自动发现需要导入所有模型
"""

from nextup.db.models.base import Base
from nextup.db.models.todo import Todo

__all__ = ["Base", "Todo"]
