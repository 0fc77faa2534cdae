"""
种子数据脚本：写入示例 Todo

运行方式：
    python scripts/seed_todos.py

幂等设计：按 title 判断是否已存在，存在则更新 priority，不存在则插入。
"""

import asyncio
import sys
from pathlib import Path

# 确保项目根目录在 sys.path 中
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import select

from nextup.db.engine import async_session, engine
from nextup.db.models.todo import Todo

SEED_TODOS = [
    {"title": "回复客户邮件", "priority": 1},
    {"title": "整理周报", "priority": 2},
    {"title": "修复登录页样式", "priority": 3},
    {"title": "更新依赖版本", "priority": 5},
    {"title": "清理旧分支", "priority": 8},
]


async def seed() -> None:
    async with async_session() as db:
        for item in SEED_TODOS:
            result = await db.execute(select(Todo).where(Todo.title == item["title"]))
            existing = result.scalars().first()
            if existing:
                existing.priority = item["priority"]
                print(f"  [更新] {item['title']} (priority={item['priority']})")
            else:
                db.add(Todo(**item))
                print(f"  [新增] {item['title']} (priority={item['priority']})")
        await db.commit()
    await engine.dispose()


if __name__ == "__main__":
    print("=== 开始写入示例 Todo ===\n")
    asyncio.run(seed())
    print("\n=== 完成 ===")
