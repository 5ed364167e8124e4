"""Engine helpers shared by the services, the web layer and scripts."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Optional

from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import create_engine

from services.config import config

log = logging.getLogger(__name__)

_engines: Dict[str, Engine] = {}


def _database_url(db_path: Optional[str]) -> str:
    if db_path is None and config.DATABASE_URL:
        return config.DATABASE_URL
    path = db_path or config.DB_PATH
    if path == ":memory:":
        return "sqlite://"
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    return f"sqlite:///{path}"


def get_engine(db_path: Optional[str] = None) -> Engine:
    """返回 (并缓存) 指定路径的 Engine。

    ":memory:" 每次调用都会新建一个独立的内存库，测试之间互不影响。
    """
    url = _database_url(db_path)
    if url == "sqlite://":
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    engine = _engines.get(url)
    if engine is None:
        # FastAPI 在线程池里跑同步路由，SQLite 连接需要跨线程
        connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
        engine = create_engine(url, connect_args=connect_args)
        _engines[url] = engine
        log.info(f"Engine created for {engine.url}")
    return engine

