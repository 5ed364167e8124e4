"""Relationship edges.

每种关系一张表；(actor, target) 的唯一性由数据库约束保证，
并发下重复插入会直接抛 IntegrityError，而不是依赖先查后写。
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Index
from sqlmodel import Field, SQLModel, UniqueConstraint

from .base import TargetKind, utcnow


class Subscription(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    subscriber_id: str = Field(foreign_key="user.id", index=True, max_length=32)
    channel_id: str = Field(foreign_key="user.id", index=True, max_length=32)
    created_at: datetime = Field(default_factory=utcnow, nullable=False, index=True)

    __table_args__ = (UniqueConstraint("subscriber_id", "channel_id",
                                       name="uq_subscriber_channel"),)


class Like(SQLModel, table=True):
    """点赞。目标是 (target_kind, target_id) 的 tagged variant。"""
    id: Optional[int] = Field(default=None, primary_key=True)
    liker_id: str = Field(foreign_key="user.id", index=True, max_length=32)
    target_kind: TargetKind = Field()
    target_id: str = Field(max_length=32)
    created_at: datetime = Field(default_factory=utcnow, nullable=False, index=True)

    __table_args__ = (
        UniqueConstraint("liker_id", "target_kind", "target_id", name="uq_liker_kind_target"),
        Index("ix_like_target", "target_kind", "target_id"),
    )
