from datetime import datetime
from typing import Optional

from sqlalchemy import Index
from sqlmodel import Field, SQLModel

from .base import NotificationKind, TargetKind, utcnow


class Notification(SQLModel, table=True):
    """
    站内通知
    由 ToggleEngine (点赞/订阅) 或评论、上传流程写入；只有收件人可以已读/删除。
    """
    id: Optional[int] = Field(default=None, primary_key=True)
    recipient_id: str = Field(foreign_key="user.id", max_length=32)
    sender_id: Optional[str] = Field(default=None, foreign_key="user.id", max_length=32)
    kind: NotificationKind = Field(index=True)
    message: str = Field(max_length=512)
    is_read: bool = Field(default=False)

    # 关联对象 (可选)
    related_kind: Optional[TargetKind] = Field(default=None)
    related_id: Optional[str] = Field(default=None, max_length=32)

    created_at: datetime = Field(default_factory=utcnow, nullable=False)

    __table_args__ = (
        Index("ix_notification_inbox", "recipient_id", "is_read", "created_at"),
    )
