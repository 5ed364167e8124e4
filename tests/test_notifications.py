"""NotificationService: fan-out 与收件箱操作。"""

import pytest
from sqlmodel import select

from services.db.models import Comment, Notification, NotificationKind, TargetKind
from services.errors import Forbidden, TargetNotFound
from services.notification.config import render_message
from services.notification.service import NotificationService
from services.relations.toggle import ToggleEngine


def test_render_message():
    assert render_message(NotificationKind.SUBSCRIPTION, "alice") == "alice subscribed to your channel"
    assert render_message(NotificationKind.LIKE, None, "post") == "Someone liked your post"


def test_notify_skips_self(session, c1):
    service = NotificationService(session)
    assert service.notify(c1.id, c1.id, NotificationKind.LIKE) is None
    session.commit()
    assert session.exec(select(Notification)).all() == []


def test_notify_does_not_commit(session, u1, c1):
    service = NotificationService(session)
    service.notify(c1.id, u1.id, NotificationKind.SUBSCRIPTION)
    session.rollback()
    assert session.exec(select(Notification)).all() == []


def test_notify_comment(session, u1, c1, video):
    comment = Comment(owner_id=u1.id, content="nice", video_id=video.id)
    session.add(comment)
    notification = NotificationService(session).notify_comment(comment)
    session.commit()

    assert notification.recipient_id == c1.id
    assert notification.related_kind == TargetKind.VIDEO
    assert notification.message == "u1 commented on your video"


def test_fan_out_upload(session, u1, u2, c1, make_video):
    engine = ToggleEngine(session)
    engine.toggle(u1.id, c1.id, "subscription")
    engine.toggle(u2.id, c1.id, "subscription")
    u2.is_deleted = True
    session.add(u2)
    session.commit()

    service = NotificationService(session)
    created = service.fan_out_upload(make_video(c1, title="Episode 2"))
    session.commit()
    assert created == 1

    uploads = session.exec(
        select(Notification).where(Notification.kind == NotificationKind.VIDEO_UPLOAD)
    ).all()
    assert [n.recipient_id for n in uploads] == [u1.id]
    assert uploads[0].message == "c1 uploaded a new video: Episode 2"

    draft = make_video(c1, title="draft", is_published=False)
    assert service.fan_out_upload(draft) == 0


def _inbox(session, recipient, *senders):
    engine = ToggleEngine(session)
    for sender in senders:
        engine.toggle(sender.id, recipient.id, "subscription")


def test_list_for_newest_first(session, u1, u2, c1):
    _inbox(session, c1, u1, u2)
    page = NotificationService(session).list_for(c1.id)

    assert page.total_count == 2
    assert page.unread_count == 2
    assert [item["sender"]["id"] for item in page.items] == [u2.id, u1.id]
    assert page.items[0]["kind"] == "subscription"
    assert page.items[0]["isRead"] is False


def test_list_for_deleted_sender(session, u1, c1):
    _inbox(session, c1, u1)
    u1.is_deleted = True
    session.add(u1)
    session.commit()

    item = NotificationService(session).list_for(c1.id).items[0]
    assert item["sender"] is None


def test_mark_read_and_filter(session, u1, u2, c1):
    _inbox(session, c1, u1, u2)
    service = NotificationService(session)
    first = service.list_for(c1.id).items[0]

    service.mark_read(c1.id, first["id"])

    unread = service.list_for(c1.id, is_read=False)
    assert unread.total_count == 1
    assert unread.unread_count == 1
    assert service.list_for(c1.id, is_read=True).items[0]["id"] == first["id"]


def test_mark_all_read(session, u1, u2, c1):
    _inbox(session, c1, u1, u2)
    service = NotificationService(session)

    assert service.mark_all_read(c1.id) == 2
    assert service.list_for(c1.id).unread_count == 0
    assert service.mark_all_read(c1.id) == 0


def test_only_recipient_can_modify(session, u1, c1):
    _inbox(session, c1, u1)
    service = NotificationService(session)
    notification_id = service.list_for(c1.id).items[0]["id"]

    with pytest.raises(Forbidden):
        service.mark_read(u1.id, notification_id)
    with pytest.raises(Forbidden):
        service.delete(u1.id, notification_id)

    service.delete(c1.id, notification_id)
    with pytest.raises(TargetNotFound):
        service.delete(c1.id, notification_id)
