"""共享的测试夹具：内存数据库 + 几个种子用户和视频。"""

import sys
from pathlib import Path

import pytest
from sqlmodel import Session, SQLModel

# 添加项目根目录到 Python 路径
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from services.db.connection import get_engine
from services.db.models import Comment, Tweet, User, Video


@pytest.fixture
def engine():
    engine = get_engine(":memory:")  # 使用内存数据库进行测试
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def make_user(session):
    def _make(username: str, **fields) -> User:
        user = User(username=username, full_name=username.upper(), **fields)
        session.add(user)
        session.commit()
        session.refresh(user)
        return user
    return _make


@pytest.fixture
def make_video(session):
    def _make(owner: User, title: str = "video", **fields) -> Video:
        video = Video(owner_id=owner.id, title=title, **fields)
        session.add(video)
        session.commit()
        session.refresh(video)
        return video
    return _make


@pytest.fixture
def u1(make_user):
    return make_user("u1")


@pytest.fixture
def u2(make_user):
    return make_user("u2")


@pytest.fixture
def c1(make_user):
    return make_user("c1")


@pytest.fixture
def video(make_video, c1):
    return make_video(c1, title="Intro")


@pytest.fixture
def tweet(session, c1):
    tweet = Tweet(owner_id=c1.id, content="hello")
    session.add(tweet)
    session.commit()
    session.refresh(tweet)
    return tweet


@pytest.fixture
def comment(session, c1, video):
    comment = Comment(owner_id=c1.id, content="first", video_id=video.id)
    session.add(comment)
    session.commit()
    session.refresh(comment)
    return comment
