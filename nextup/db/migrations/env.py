"""
Alembic 迁移环境配置
- 使用 async engine
- PG 下自动创建独立 schema
- 自动发现所有模型
"""

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool, text
from sqlalchemy.ext.asyncio import async_engine_from_config

from nextup.config import get_settings
from nextup.db.models import Base  # noqa: F401 - 触发所有模型注册

settings = get_settings()
config = context.config

# 日志配置
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# 直接使用异步驱动 URL，在 run_async_migrations 中处理
config.set_main_option("sqlalchemy.url", settings.DATABASE_URL)

target_metadata = Base.metadata

# 只管理自己的 schema，忽略其他 schema 中的表
MANAGED_SCHEMA = settings.db_schema


def include_name(name, type_, parent_names) -> bool:
    """过滤器：只关注我们自己的 schema，忽略 public / 其他项目的表"""
    if type_ == "schema" and MANAGED_SCHEMA:
        return name == MANAGED_SCHEMA
    return True


def _configure_kwargs() -> dict:
    if not MANAGED_SCHEMA:
        return {"render_as_batch": settings.is_sqlite}
    return {
        "version_table_schema": MANAGED_SCHEMA,
        "include_schemas": True,
        "include_name": include_name,
    }


def run_migrations_offline() -> None:
    """离线模式：生成 SQL 脚本"""
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_configure_kwargs(),
    )
    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection) -> None:
    """执行迁移"""
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        **_configure_kwargs(),
    )
    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    """异步模式：在线迁移"""
    connectable = async_engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    async with connectable.connect() as connection:
        if MANAGED_SCHEMA and not settings.is_sqlite:
            # 先创建 schema（如果不存在）
            await connection.execute(text(f"CREATE SCHEMA IF NOT EXISTS {MANAGED_SCHEMA}"))
            await connection.commit()

        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


def run_migrations_online() -> None:
    """在线模式入口"""
    asyncio.run(run_async_migrations())


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
