"""
关系引擎服务层的全局配置。
Global settings for the relationship core, read from the environment / .env.
"""
from typing import Optional

from pydantic_settings import BaseSettings


class ServiceConfig(BaseSettings):
    """服务层配置。"""

    # 数据库路径（":memory:" 用于测试）
    DB_PATH: str = "data/videnest.db"
    # 完整 SQLAlchemy URL，设置后覆盖 DB_PATH
    DATABASE_URL: Optional[str] = None

    # 分页策略
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    # Dashboard 增长序列窗口（天）
    GROWTH_WINDOW_DAYS: int = 30

    # Session
    SESSION_COOKIE_NAME: str = "vn_session"
    SESSION_TTL_DAYS: int = 30

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = True
    TOGGLE_RATE_LIMIT: str = "120/minute"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"  # 为空则不写文件日志

    CORS_ORIGINS: str = "*"

    class Config:
        env_file = ".env"
        env_prefix = "VN_"
        extra = "ignore"


# 全局配置实例
config = ServiceConfig()
