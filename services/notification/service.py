import logging
from typing import List, Optional

from sqlalchemy import func, update
from sqlmodel import Session, col, select

from services.db.models import (
    Comment,
    Notification,
    NotificationKind,
    Subscription,
    TargetKind,
    Tweet,
    User,
    Video,
)
from services.errors import Forbidden, TargetNotFound
from services.notification.config import TARGET_NOUNS, render_message
from services.relations.kinds import ensure_id
from services.relations.pagination import PageInput, normalize_page
from services.relations.projection import iso, project_user
from services.relations.schemas import NotificationPage

log = logging.getLogger(__name__)


class NotificationService:
    """
    通知服务 - 写入 (fan-out) 与收件人侧的读/已读/删除。

    写入方法 (notify / notify_comment / fan_out_upload) 只把记录加进调用方的
    session，不提交：ToggleEngine 需要把通知和边、计数器放在同一个事务里。
    收件箱操作各自提交。
    """

    def __init__(self, session: Session):
        self.session = session

    # --- Fan-out ---

    def notify(
        self,
        recipient_id: str,
        sender_id: Optional[str],
        kind: NotificationKind,
        related_kind: Optional[TargetKind] = None,
        related_id: Optional[str] = None,
        message: Optional[str] = None,
        target_text: Optional[str] = None,
    ) -> Optional[Notification]:
        """
        记录一条通知。收件人就是发送者本人时跳过，返回 None。
        """
        if sender_id is not None and recipient_id == sender_id:
            return None

        if message is None:
            sender = self.session.get(User, sender_id) if sender_id else None
            if target_text is None and related_kind is not None:
                target_text = TARGET_NOUNS[related_kind]
            message = render_message(kind, sender.username if sender else None, target_text)

        notification = Notification(
            recipient_id=recipient_id,
            sender_id=sender_id,
            kind=kind,
            message=message[:512],
            related_kind=related_kind,
            related_id=related_id,
        )
        self.session.add(notification)
        return notification

    def notify_comment(self, comment: Comment) -> Optional[Notification]:
        """评论创建后通知被评论内容的作者 (供评论流程调用)。"""
        if comment.video_id:
            parent = self.session.get(Video, comment.video_id)
            related_kind = TargetKind.VIDEO
        elif comment.tweet_id:
            parent = self.session.get(Tweet, comment.tweet_id)
            related_kind = TargetKind.TWEET
        else:
            return None

        if parent is None:
            log.warning(f"Comment {comment.id} points at a missing {related_kind.value}, no notification")
            return None

        return self.notify(
            recipient_id=parent.owner_id,
            sender_id=comment.owner_id,
            kind=NotificationKind.COMMENT,
            related_kind=related_kind,
            related_id=parent.id,
        )

    def fan_out_upload(self, video: Video) -> int:
        """新视频发布时通知频道的所有订阅者，返回写入条数。"""
        if not video.is_published:
            return 0

        stmt = (
            select(Subscription.subscriber_id)
            .join(User, User.id == Subscription.subscriber_id)
            .where(Subscription.channel_id == video.owner_id, col(User.is_deleted).is_(False))
        )
        subscriber_ids: List[str] = list(self.session.exec(stmt).all())

        created = 0
        for subscriber_id in subscriber_ids:
            if self.notify(
                recipient_id=subscriber_id,
                sender_id=video.owner_id,
                kind=NotificationKind.VIDEO_UPLOAD,
                related_kind=TargetKind.VIDEO,
                related_id=video.id,
                target_text=video.title,
            ):
                created += 1

        log.info(f"Upload fan-out: video {video.id} -> {created} subscribers")
        return created

    # --- Inbox ---

    def list_for(
        self,
        recipient_id: str,
        page: PageInput = None,
        page_size: PageInput = None,
        is_read: Optional[bool] = None,
    ) -> NotificationPage:
        recipient_id = ensure_id(recipient_id, "user id")
        paging = normalize_page(page, page_size)

        filters = [Notification.recipient_id == recipient_id]
        if is_read is not None:
            filters.append(Notification.is_read == is_read)

        total = self.session.exec(
            select(func.count()).select_from(Notification).where(*filters)
        ).one()
        unread = self.session.exec(
            select(func.count())
            .select_from(Notification)
            .where(Notification.recipient_id == recipient_id, col(Notification.is_read).is_(False))
        ).one()

        stmt = (
            select(Notification, User)
            .outerjoin(User, User.id == Notification.sender_id)
            .where(*filters)
            .order_by(col(Notification.created_at).desc(), col(Notification.id).desc())
            .offset(paging.offset)
            .limit(paging.page_size)
        )
        items = []
        for notification, sender in self.session.exec(stmt).all():
            if sender is not None and sender.is_deleted:
                sender = None
            items.append({
                "id": notification.id,
                "kind": notification.kind.value,
                "message": notification.message,
                "isRead": notification.is_read,
                "sender": project_user(sender),
                "related": (
                    {"kind": notification.related_kind.value, "id": notification.related_id}
                    if notification.related_kind else None
                ),
                "createdAt": iso(notification.created_at),
            })

        return NotificationPage(
            items=items,
            total_count=total,
            page=paging.page,
            page_size=paging.page_size,
            total_pages=paging.total_pages(total),
            has_next_page=paging.has_next(total),
            has_prev_page=paging.has_prev(),
            unread_count=unread,
        )

    def _owned(self, recipient_id: str, notification_id: int) -> Notification:
        notification = self.session.get(Notification, notification_id)
        if notification is None:
            raise TargetNotFound("Notification not found")
        if notification.recipient_id != recipient_id:
            raise Forbidden("Only the recipient can modify this notification")
        return notification

    def mark_read(self, recipient_id: str, notification_id: int) -> Notification:
        notification = self._owned(recipient_id, notification_id)
        if not notification.is_read:
            notification.is_read = True
            self.session.add(notification)
            self.session.commit()
            self.session.refresh(notification)
        return notification

    def mark_all_read(self, recipient_id: str) -> int:
        result = self.session.execute(
            update(Notification)
            .where(Notification.recipient_id == recipient_id, col(Notification.is_read).is_(False))
            .values(is_read=True)
        )
        self.session.commit()
        return result.rowcount

    def delete(self, recipient_id: str, notification_id: int) -> None:
        notification = self._owned(recipient_id, notification_id)
        self.session.delete(notification)
        self.session.commit()
