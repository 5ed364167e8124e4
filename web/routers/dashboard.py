"""
频道 Dashboard API Router
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from services.dashboard.service import DashboardService
from services.db.models import User
from web.dependencies import get_current_user, get_db_session, require_user

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/stats/{channel_id}")
def channel_stats(
    channel_id: str,
    user: User = Depends(require_user),
    db: Session = Depends(get_db_session),
):
    """频道统计，仅频道所有者可查看"""
    return DashboardService(db).channel_stats(channel_id, user.id)


@router.get("/videos/{channel_id}")
def channel_videos(
    channel_id: str,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    sort_by: str = Query("created_at", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder"),
    user: Optional[User] = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    """频道视频列表；所有者能看到未发布的视频"""
    result = DashboardService(db).channel_videos(
        channel_id,
        viewer_id=user.id if user else None,
        page=page,
        page_size=limit,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return result.to_wire()
