"""
全局配置模块：通过 pydantic-settings 读取 .env 环境变量
"""

from functools import lru_cache
from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """应用全局配置，从 .env 文件加载"""

    model_config = SettingsConfigDict(
        env_file=Path(__file__).parent / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── 数据库 ──
    DATABASE_URL: str  # postgresql+asyncpg://... ；本地调试可用 sqlite+aiosqlite://...
    DB_SCHEMA: str = "nextup"  # 置空则不加 schema 前缀（SQLite 不支持 schema）

    DB_ECHO: bool = False  # 打印 SQL 日志，调试时可在 .env 设为 true

    # ── 连接池（SQLite 下忽略） ──
    DB_POOL_SIZE: int = 20
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800

    # ── Redis ──
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_MAX_CONNECTIONS: int = 10

    # ── 推荐引擎 ──
    RECOMMEND_MAX_RETRIES: int = 3  # 置顶写入冲突后的最大重抽次数
    RECOMMEND_LOCK_ENABLED: bool = True  # 是否用 Redis 分布式锁串行化“查置顶-抽签-置顶”
    RECOMMEND_LOCK_TIMEOUT: float = 10.0  # 锁自动过期（秒），防止持锁进程崩溃后死锁
    RECOMMEND_LOCK_BLOCKING_TIMEOUT: float = 5.0  # 等锁上限（秒）

    # ── 应用 ──
    ENV: str = "development"  # development | production
    APP_NAME: str = "nextup"
    APP_PORT: int = 8000

    @property
    def db_schema(self) -> str | None:
        """空字符串视为不使用 schema"""
        return self.DB_SCHEMA or None

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    @model_validator(mode="after")
    def _check_recommend_retries(self) -> "Settings":
        """至少要尝试一次置顶写入"""
        if self.RECOMMEND_MAX_RETRIES < 1:
            raise ValueError("RECOMMEND_MAX_RETRIES 必须 >= 1")
        return self


@lru_cache
def get_settings() -> Settings:
    """单例获取配置（带缓存）"""
    return Settings()
