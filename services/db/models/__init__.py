"""Aggregate exports for SQLModel tables."""

from .base import (
    EdgeKind,
    NotificationKind,
    SoftDelete,
    TargetKind,
    TimeStamped,
    new_id,
    utcnow,
)
from .content import Comment, Tweet, Video
from .edge import Like, Subscription
from .notification import Notification
from .session import UserSession
from .user import User

__all__ = [
    "Comment",
    "EdgeKind",
    "Like",
    "Notification",
    "NotificationKind",
    "SoftDelete",
    "Subscription",
    "TargetKind",
    "TimeStamped",
    "Tweet",
    "User",
    "UserSession",
    "Video",
    "new_id",
    "utcnow",
]
