"""Base models and enums shared across SQLModel tables."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    """Return a timezone-aware UTC timestamp.

    SQLModel 默认使用 naive datetime，如果不做处理 SQLite 会混用本地时间。
    统一调用该 helper，确保所有表都保存 UTC 时间。
    """

    return datetime.now(timezone.utc)


def new_id() -> str:
    """Opaque 32-hex identifier for profiles and targets."""
    return uuid.uuid4().hex


class TimeStamped(SQLModel, table=False):
    """Mixin that stores creation/update timestamps in UTC."""

    created_at: datetime = Field(default_factory=utcnow, nullable=False, index=True)
    updated_at: datetime = Field(default_factory=utcnow, nullable=False)


class SoftDelete(SQLModel, table=False):
    """Mixin for soft-delete semantics."""

    is_deleted: bool = Field(default=False, nullable=False, index=True)
    deleted_at: Optional[datetime] = Field(default=None, nullable=True)


class EdgeKind(str, Enum):
    SUBSCRIPTION = "subscription"
    VIDEO_LIKE = "video_like"
    COMMENT_LIKE = "comment_like"
    TWEET_LIKE = "tweet_like"


class TargetKind(str, Enum):
    """Like 的多态目标 / Notification 的关联对象。"""
    VIDEO = "video"
    COMMENT = "comment"
    TWEET = "tweet"


class NotificationKind(str, Enum):
    LIKE = "like"
    COMMENT = "comment"
    SUBSCRIPTION = "subscription"
    VIDEO_UPLOAD = "video_upload"
