"""
通知 API Router
收件箱的分页读取、标记已读和删除，只能操作自己的通知
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from services.db.models import User
from services.errors import InvalidArgument
from services.notification.service import NotificationService
from web.dependencies import get_db_session, require_user

router = APIRouter(prefix="/notifications", tags=["notifications"])


def _parse_bool(value: Optional[str]) -> Optional[bool]:
    if value is None or value == "":
        return None
    lowered = value.strip().lower()
    if lowered in ("true", "1"):
        return True
    if lowered in ("false", "0"):
        return False
    raise InvalidArgument(f"Invalid isRead: {value!r}")


def _parse_notification_id(value: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise InvalidArgument("Invalid notification id") from None


@router.get("")
def list_notifications(
    page: Optional[str] = None,
    limit: Optional[str] = None,
    is_read: Optional[str] = Query(None, alias="isRead"),
    user: User = Depends(require_user),
    db: Session = Depends(get_db_session),
):
    result = NotificationService(db).list_for(user.id, page=page, page_size=limit, is_read=_parse_bool(is_read))
    return result.to_wire()


@router.patch("/read-all")
def mark_all_read(user: User = Depends(require_user), db: Session = Depends(get_db_session)):
    updated = NotificationService(db).mark_all_read(user.id)
    return {"success": True, "updated": updated}


@router.patch("/{notification_id}/read")
def mark_read(notification_id: str, user: User = Depends(require_user), db: Session = Depends(get_db_session)):
    notification = NotificationService(db).mark_read(user.id, _parse_notification_id(notification_id))
    return {"success": True, "id": notification.id, "isRead": notification.is_read}


@router.delete("/{notification_id}")
def delete_notification(notification_id: str, user: User = Depends(require_user), db: Session = Depends(get_db_session)):
    NotificationService(db).delete(user.id, _parse_notification_id(notification_id))
    return {"success": True}
