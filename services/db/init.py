"""Initialize database schema."""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.engine import Engine
from sqlmodel import SQLModel

from .connection import get_engine
from .models import *  # noqa: F401,F403

log = logging.getLogger(__name__)


def init_db(db_path: Optional[str] = None, engine: Optional[Engine] = None) -> Engine:
    """建表 (幂等)。传入 engine 时直接使用，否则按 db_path / 配置创建。"""
    engine = engine or get_engine(db_path)
    SQLModel.metadata.create_all(engine)
    log.info(f"Schema ready: {len(SQLModel.metadata.tables)} tables on {engine.url}")
    return engine
