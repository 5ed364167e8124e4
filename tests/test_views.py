"""EdgeViewBuilder 与分页策略。"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlmodel import select

from services.config import config
from services.db.models import Like, Subscription, TargetKind, new_id
from services.errors import InvalidArgument, TargetNotFound
from services.relations.pagination import MAX_OFFSET, normalize_page
from services.relations.toggle import ToggleEngine
from services.relations.views import EdgeViewBuilder


def _seed_subscribers(session, make_user, channel, count):
    base = datetime(2026, 3, 1, tzinfo=timezone.utc)
    fans = []
    for i in range(count):
        fan = make_user(f"fan{i:02d}")
        session.add(Subscription(subscriber_id=fan.id, channel_id=channel.id, created_at=base + timedelta(minutes=i)))
        fans.append(fan)
    session.commit()
    return fans


# --- Pagination policy ---

def test_normalize_page_defaults():
    paging = normalize_page()
    assert paging.page == 1
    assert paging.page_size == config.DEFAULT_PAGE_SIZE


def test_normalize_page_clamps():
    assert normalize_page(0, 0).page == 1
    assert normalize_page(-3, -1).page_size == config.DEFAULT_PAGE_SIZE
    assert normalize_page(2, 10_000).page_size == config.MAX_PAGE_SIZE
    assert normalize_page("3", "25") == normalize_page(3, 25)


def test_normalize_page_rejects_garbage():
    with pytest.raises(InvalidArgument):
        normalize_page("abc")
    with pytest.raises(InvalidArgument):
        normalize_page(1, "1.5")
    with pytest.raises(InvalidArgument):
        normalize_page(True)


def test_page_math():
    paging = normalize_page(3, 10)
    assert paging.offset == 20
    assert paging.total_pages(25) == 3
    assert paging.has_next(25) is False
    assert paging.has_next(31) is True
    assert paging.has_prev() is True
    assert paging.total_pages(0) == 0


# --- Incoming ---

def test_pages_cover_every_edge_once(session, make_user, c1):
    fans = _seed_subscribers(session, make_user, c1, 25)
    view = EdgeViewBuilder(session)

    seen = []
    for page in (1, 2, 3):
        result = view.list_edges(c1.id, "subscription", "incoming", page=page, page_size=10)
        assert result.total_count == 25
        assert result.total_pages == 3
        seen.extend(item["subscriber"]["id"] for item in result.items)

    assert len(seen) == 25
    assert set(seen) == {fan.id for fan in fans}
    # 最新的订阅排在最前
    assert seen[0] == fans[-1].id
    assert seen[-1] == fans[0].id


def test_last_page_flags(session, make_user, c1):
    _seed_subscribers(session, make_user, c1, 25)
    result = EdgeViewBuilder(session).list_edges(c1.id, "subscription", "incoming", page=3, page_size=10)
    assert len(result.items) == 5
    assert result.has_next_page is False
    assert result.has_prev_page is True

    beyond = EdgeViewBuilder(session).list_edges(c1.id, "subscription", "incoming", page=9, page_size=10)
    assert beyond.items == []
    assert beyond.total_count == 25


def test_projection_hides_private_fields(session, make_user, c1):
    _seed_subscribers(session, make_user, c1, 1)
    item = EdgeViewBuilder(session).list_edges(c1.id, "subscription", "incoming").items[0]

    assert set(item) == {"id", "subscriber", "subscribedAt"}
    assert set(item["subscriber"]) == {"id", "username", "fullName", "avatar"}
    assert item["subscribedAt"].startswith("2026-03-01T00:00:00")


def test_deleted_profiles_are_excluded(session, make_user, c1):
    fans = _seed_subscribers(session, make_user, c1, 4)

    fans[0].is_deleted = True
    session.add(fans[0])
    session.delete(fans[1])  # 资料被硬删除，边成了悬空引用
    session.commit()

    result = EdgeViewBuilder(session).list_edges(c1.id, "subscription", "incoming")
    assert result.total_count == 2
    assert {item["subscriber"]["id"] for item in result.items} == {fans[2].id, fans[3].id}


def test_incoming_likes_filter_by_target_kind(session, u1, u2, video, comment):
    engine = ToggleEngine(session)
    engine.toggle(u1.id, video.id, "video_like")
    engine.toggle(u2.id, video.id, "video_like")
    engine.toggle(u1.id, comment.id, "comment_like")

    result = EdgeViewBuilder(session).list_edges(video.id, "video_like", "incoming")
    assert result.total_count == 2
    assert all("likedAt" in item for item in result.items)

    # target_id 相同但 kind 不同的点赞不会混进来
    session.add(Like(liker_id=u2.id, target_kind=TargetKind.TWEET, target_id=video.id))
    session.commit()
    assert EdgeViewBuilder(session).list_edges(video.id, "video_like", "incoming").total_count == 2


# --- Outgoing ---

def test_outgoing_subscriptions(session, u1, c1, make_user):
    other = make_user("other")
    engine = ToggleEngine(session)
    engine.toggle(u1.id, c1.id, "subscription")
    engine.toggle(u1.id, other.id, "subscription")

    result = EdgeViewBuilder(session).list_edges(u1.id, "subscription", "outgoing")
    assert result.total_count == 2
    assert {item["channel"]["id"] for item in result.items} == {c1.id, other.id}


def test_outgoing_liked_videos_include_owner(session, u1, c1, video, make_video):
    gone = make_video(c1, title="gone")
    engine = ToggleEngine(session)
    engine.toggle(u1.id, video.id, "video_like")
    engine.toggle(u1.id, gone.id, "video_like")

    session.delete(gone)
    session.commit()

    result = EdgeViewBuilder(session).list_edges(u1.id, "video_like", "outgoing")
    assert result.total_count == 1
    item = result.items[0]
    assert item["video"]["id"] == video.id
    assert item["video"]["title"] == "Intro"
    assert item["owner"]["id"] == c1.id
    assert "likedAt" in item


# --- Errors ---

def test_missing_subject(session, u1):
    view = EdgeViewBuilder(session)
    with pytest.raises(TargetNotFound):
        view.list_edges(new_id(), "subscription", "incoming")
    with pytest.raises(TargetNotFound):
        view.list_edges(new_id(), "video_like", "outgoing")


def test_bad_direction_and_kind(session, c1):
    view = EdgeViewBuilder(session)
    with pytest.raises(InvalidArgument):
        view.list_edges(c1.id, "subscription", "sideways")
    with pytest.raises(InvalidArgument):
        view.list_edges(c1.id, "friendship", "incoming")


def test_page_beyond_offset_range(session, make_user, c1):
    _seed_subscribers(session, make_user, c1, 1)

    with pytest.raises(InvalidArgument):
        normalize_page(10 ** 20, 10)
    with pytest.raises(InvalidArgument):
        EdgeViewBuilder(session).list_edges(c1.id, "subscription", "incoming", page=10 ** 20, page_size=10)

    # 刚好在上限以内的页码仍然合法，只是没有数据
    last_valid = MAX_OFFSET // 10 + 1
    assert normalize_page(last_valid, 10).offset <= MAX_OFFSET


def test_same_timestamp_ordered_by_edge_id(session, make_user, c1):
    stamp = datetime(2026, 3, 1, tzinfo=timezone.utc)
    for i in range(5):
        fan = make_user(f"tie{i}")
        session.add(Subscription(subscriber_id=fan.id, channel_id=c1.id, created_at=stamp))
    session.commit()

    view = EdgeViewBuilder(session)
    edge_ids = []
    for page in (1, 2, 3):
        result = view.list_edges(c1.id, "subscription", "incoming", page=page, page_size=2)
        assert result.total_count == 5
        edge_ids.extend(item["id"] for item in result.items)

    stored = [edge.id for edge in session.exec(select(Subscription)).all()]
    assert len(edge_ids) == 5
    assert edge_ids == sorted(stored, reverse=True)
