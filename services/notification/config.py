"""
Notification Configuration & Constants
集中管理通知类型对应的文案模板。
"""
from typing import Dict

from services.db.models import NotificationKind, TargetKind

# 通知类型 -> 文案模板
# 可用占位符: {sender} 发送者用户名, {target} 关联对象的可读名称
MESSAGE_TEMPLATES: Dict[NotificationKind, str] = {
    NotificationKind.SUBSCRIPTION: "{sender} subscribed to your channel",
    NotificationKind.LIKE: "{sender} liked your {target}",
    NotificationKind.COMMENT: "{sender} commented on your {target}",
    NotificationKind.VIDEO_UPLOAD: "{sender} uploaded a new video: {target}",
}

TARGET_NOUNS: Dict[TargetKind, str] = {
    TargetKind.VIDEO: "video",
    TargetKind.COMMENT: "comment",
    TargetKind.TWEET: "post",
}

# 发送者已注销时的显示名
UNKNOWN_SENDER = "Someone"


def render_message(kind: NotificationKind, sender: str = None, target: str = None) -> str:
    return MESSAGE_TEMPLATES[kind].format(
        sender=sender or UNKNOWN_SENDER,
        target=target or "content",
    )
