"""频道 Dashboard 统计。

和关系视图同一套 filter → join → 聚合 的思路，只是多了按天分桶和求和。
按天分桶在 Python 侧做，避免依赖数据库方言的日期函数 (SQLite 的局限性)。
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlmodel import Session, col, select

from services.config import config
from services.db.models import Comment, Like, Subscription, TargetKind, User, Video
from services.errors import Forbidden, InvalidArgument, TargetNotFound
from services.relations.kinds import ensure_id
from services.relations.pagination import PageInput, normalize_page
from services.relations.projection import project_user, project_video
from services.relations.schemas import Page
from services.utils.timezone import day_key, now, trailing_days

log = logging.getLogger(__name__)

VIDEO_SORT_FIELDS = {
    "created_at": Video.created_at,
    "createdAt": Video.created_at,
    "views": Video.views,
    "title": Video.title,
}


def _growth_percentage(current: int, previous: int) -> float:
    if previous <= 0:
        return 0.0
    return round((current - previous) / previous * 100, 2)


class DashboardService:
    """频道统计服务 (仅频道所有者可见)。"""

    def __init__(self, session: Session, window_days: Optional[int] = None):
        self.session = session
        self.window_days = window_days or config.GROWTH_WINDOW_DAYS

    def _channel(self, channel_id: str) -> User:
        channel = self.session.get(User, channel_id)
        if channel is None or channel.is_deleted:
            raise TargetNotFound("Channel does not exist")
        return channel

    # --- Scalars ---

    def _scalar(self, stmt) -> int:
        return self.session.exec(stmt).one() or 0

    def _published(self, channel_id: str) -> List:
        return [Video.owner_id == channel_id, col(Video.is_published).is_(True)]

    def _view_sum(self, channel_id: str, since: datetime = None, until: datetime = None) -> int:
        filters = self._published(channel_id)
        if since is not None:
            filters.append(Video.created_at >= since)
        if until is not None:
            filters.append(Video.created_at < until)
        return self._scalar(select(func.coalesce(func.sum(Video.views), 0)).where(*filters))

    def _new_subscribers(self, channel_id: str, since: datetime, until: datetime = None) -> int:
        filters = [Subscription.channel_id == channel_id, Subscription.created_at >= since]
        if until is not None:
            filters.append(Subscription.created_at < until)
        return self._scalar(select(func.count()).select_from(Subscription).where(*filters))

    # --- Series ---

    def _views_series(self, channel_id: str, since: datetime, days: List) -> List[Dict[str, Any]]:
        rows = self.session.exec(
            select(Video.created_at, Video.views).where(
                *self._published(channel_id), Video.created_at >= since
            )
        ).all()
        views: Dict[str, int] = {}
        uploads: Dict[str, int] = {}
        for created_at, video_views in rows:
            key = day_key(created_at)
            views[key] = views.get(key, 0) + (video_views or 0)
            uploads[key] = uploads.get(key, 0) + 1
        return [
            {"date": d.isoformat(), "views": views.get(d.isoformat(), 0), "videoCount": uploads.get(d.isoformat(), 0)}
            for d in days
        ]

    def _subscriber_series(self, channel_id: str, since: datetime, days: List) -> List[Dict[str, Any]]:
        rows = self.session.exec(
            select(Subscription.created_at).where(
                Subscription.channel_id == channel_id, Subscription.created_at >= since
            )
        ).all()
        counts: Dict[str, int] = {}
        for created_at in rows:
            key = day_key(created_at)
            counts[key] = counts.get(key, 0) + 1
        return [{"date": d.isoformat(), "newSubscribers": counts.get(d.isoformat(), 0)} for d in days]

    # --- Public API ---

    def channel_stats(self, channel_id: str, viewer_id: str) -> Dict[str, Any]:
        """
        频道统计：总量、最近窗口的按天增长序列、播放量最高的视频。

        Raises:
            InvalidArgument: id 格式错误
            TargetNotFound: 频道不存在
            Forbidden: 查看者不是频道所有者
        """
        channel_id = ensure_id(channel_id, "channel id")
        viewer_id = ensure_id(viewer_id, "user id")
        self._channel(channel_id)
        if viewer_id != channel_id:
            raise Forbidden("You are not authorized to view stats of this channel")

        current = now()
        # 按天分桶的序列从窗口第一天的 0 点开始
        days = trailing_days(self.window_days, current)
        series_start = datetime.combine(days[0], datetime.min.time(), tzinfo=current.tzinfo)
        window_start = current - timedelta(days=self.window_days)
        previous_start = window_start - timedelta(days=self.window_days)

        total_videos = self._scalar(
            select(func.count()).select_from(Video).where(*self._published(channel_id))
        )
        total_views = self._view_sum(channel_id)
        total_likes = self._scalar(
            select(func.count())
            .select_from(Like)
            .join(Video, col(Video.id) == Like.target_id)
            .where(Like.target_kind == TargetKind.VIDEO, Video.owner_id == channel_id)
        )
        total_subscribers = self._scalar(
            select(func.count())
            .select_from(Subscription)
            .join(User, col(User.id) == Subscription.subscriber_id)
            .where(Subscription.channel_id == channel_id, col(User.is_deleted).is_(False))
        )
        total_comments = self._scalar(
            select(func.count())
            .select_from(Comment)
            .join(Video, col(Video.id) == Comment.video_id)
            .where(Video.owner_id == channel_id)
        )

        current_views = self._view_sum(channel_id, since=window_start)
        previous_views = self._view_sum(channel_id, since=previous_start, until=window_start)
        new_subscribers = self._new_subscribers(channel_id, since=window_start)
        previous_subscribers = self._new_subscribers(channel_id, since=previous_start, until=window_start)

        top_video = self.session.exec(
            select(Video)
            .where(*self._published(channel_id))
            .order_by(col(Video.views).desc(), col(Video.created_at).desc())
            .limit(1)
        ).first()

        log.info(f"Dashboard stats for channel {channel_id}: videos={total_videos} subs={total_subscribers}")
        return {
            "channelStats": {
                "totalVideos": total_videos,
                "totalViews": total_views,
                "totalLikes": total_likes,
                "totalSubscribers": total_subscribers,
                "totalComments": total_comments,
            },
            "growthMetrics": {
                "windowDays": self.window_days,
                "viewsGrowth": self._views_series(channel_id, series_start, days),
                "subscribersGrowth": self._subscriber_series(channel_id, series_start, days),
                "last30Days": {
                    "views": current_views,
                    "viewsGrowthPercentage": _growth_percentage(current_views, previous_views),
                    "newSubscribers": new_subscribers,
                    "subscriberGrowthPercentage": _growth_percentage(new_subscribers, previous_subscribers),
                },
            },
            "additionalMetrics": {
                "averageViewsPerVideo": round(total_views / total_videos, 2) if total_videos else 0.0,
                "engagementRate": round(total_likes / total_views * 100, 2) if total_views else 0.0,
                "mostPopularVideo": project_video(top_video) if top_video else None,
            },
        }

    def channel_videos(
        self,
        channel_id: str,
        viewer_id: Optional[str] = None,
        page: PageInput = None,
        page_size: PageInput = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> Page:
        """频道视频列表；非所有者只能看到已发布的视频。"""
        channel_id = ensure_id(channel_id, "channel id")
        channel = self._channel(channel_id)
        paging = normalize_page(page, page_size)

        sort_column = VIDEO_SORT_FIELDS.get(sort_by or "created_at")
        if sort_column is None:
            raise InvalidArgument(f"Unsupported sortBy: {sort_by!r}")
        order = (sort_order or "desc").lower()
        if order not in ("asc", "desc"):
            raise InvalidArgument(f"Unsupported sortOrder: {sort_order!r}")

        filters = [Video.owner_id == channel_id]
        if viewer_id != channel_id:
            filters.append(col(Video.is_published).is_(True))

        total = self._scalar(select(func.count()).select_from(Video).where(*filters))
        ordering = col(sort_column).asc() if order == "asc" else col(sort_column).desc()
        videos = self.session.exec(
            select(Video)
            .where(*filters)
            .order_by(ordering, col(Video.id).desc())
            .offset(paging.offset)
            .limit(paging.page_size)
        ).all()

        owner = project_user(channel)
        items = []
        for video in videos:
            item = project_video(video)
            item["isPublished"] = video.is_published
            item["owner"] = owner
            items.append(item)

        return Page(
            items=items,
            total_count=total,
            page=paging.page,
            page_size=paging.page_size,
            total_pages=paging.total_pages(total),
            has_next_page=paging.has_next(total),
            has_prev_page=paging.has_prev(),
        )
