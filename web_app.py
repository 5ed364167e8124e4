import logging
import sys
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError

from services.config import config
from services.errors import RelationError, TransactionFailed


# 自定义日志格式化器, 统一使用 UTC
class UTCFormatter(logging.Formatter):
    """使用 UTC 时间的日志格式化器"""

    def formatTime(self, record, datefmt=None):
        dt = datetime.fromtimestamp(record.created, tz=timezone.utc)
        if datefmt:
            return dt.strftime(datefmt)
        return dt.strftime("%Y-%m-%d %H:%M:%S UTC")

    def format(self, record):
        result = super().format(record)
        # 多行长消息增加缩进
        if len(record.message) > 100 and '\n' in record.message:
            lines = record.message.split('\n')
            indent = ' ' * 4
            formatted_msg = '\n'.join([lines[0]] + [indent + line for line in lines[1:]])
            result = result.replace(record.message, formatted_msg)
        return result


# 配置日志
def setup_logging():
    """配置应用程序日志"""
    formatter = UTCFormatter(
        fmt='%(asctime)s [%(levelname)s] %(name)s:%(lineno)d - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S UTC'
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(config.LOG_LEVEL.upper())

    # 移除现有handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # 文件handler (按天轮转, 保留30天); LOG_DIR 为空时只输出到控制台
    if config.LOG_DIR:
        log_dir = Path(config.LOG_DIR)
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = TimedRotatingFileHandler(
            filename=log_dir / "app.log",
            when="midnight",
            interval=1,
            backupCount=30,
            encoding="utf-8"
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


logger = logging.getLogger(__name__)

from services.db.init import init_db
from web.dependencies import limiter
from web.routers import dashboard, notification, relationship


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    logger.info("Starting Videnest relationship service...")
    engine = init_db()
    logger.info(f"✓ Database initialized: {engine.url}")
    yield
    logger.info("Videnest relationship service stopped")


app = FastAPI(lifespan=lifespan)
app.state.limiter = limiter


async def relation_error_handler(request: Request, exc: RelationError):
    """服务层错误映射为稳定的状态码和 code"""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.code}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc.code} {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def storage_error_handler(request: Request, exc: SQLAlchemyError):
    """未被服务层处理的存储错误，不透出驱动信息"""
    logger.error(f"{request.method} {request.url.path} storage error: {exc}", exc_info=exc)
    error = TransactionFailed()
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


async def friendly_rate_limit_handler(request: Request, exc: RateLimitExceeded):
    """处理请求频率超限的情况"""
    return JSONResponse(
        status_code=429,
        content={
            "success": False,
            "code": "RATE_LIMITED",
            "message": f"Too many requests, limit is {exc.detail}",
        },
    )


app.add_exception_handler(RelationError, relation_error_handler)
app.add_exception_handler(SQLAlchemyError, storage_error_handler)
app.add_exception_handler(RateLimitExceeded, friendly_rate_limit_handler)

# 跨域资源共享 (CORS)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in config.CORS_ORIGINS.split(",")],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(relationship.router)
app.include_router(dashboard.router)
app.include_router(notification.router)


@app.get("/healthz")
def healthz():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("web_app:app", host="0.0.0.0", port=8000, reload=True)
