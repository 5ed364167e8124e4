"""Like targets owned by the video / comment / tweet collaborators.

这里只声明本模块需要读的身份字段和需要写的 like_count。
"""

from typing import Optional

from sqlmodel import Field, SQLModel

from .base import TimeStamped, new_id


class Video(TimeStamped, SQLModel, table=True):
    id: str = Field(default_factory=new_id, primary_key=True, max_length=32)
    owner_id: str = Field(foreign_key="user.id", index=True, max_length=32)
    title: str = Field(max_length=256)
    description: Optional[str] = Field(default=None)
    thumbnail: Optional[str] = Field(default=None, max_length=512)
    duration: float = Field(default=0)  # 秒
    views: int = Field(default=0, index=True)
    is_published: bool = Field(default=True, index=True)
    like_count: int = Field(default=0, nullable=False)


class Tweet(TimeStamped, SQLModel, table=True):
    id: str = Field(default_factory=new_id, primary_key=True, max_length=32)
    owner_id: str = Field(foreign_key="user.id", index=True, max_length=32)
    content: str
    image: Optional[str] = Field(default=None, max_length=512)
    like_count: int = Field(default=0, nullable=False)


class Comment(TimeStamped, SQLModel, table=True):
    id: str = Field(default_factory=new_id, primary_key=True, max_length=32)
    owner_id: str = Field(foreign_key="user.id", index=True, max_length=32)
    content: str = Field(max_length=500)
    # 评论挂在视频或动态下
    video_id: Optional[str] = Field(default=None, foreign_key="video.id", index=True, max_length=32)
    tweet_id: Optional[str] = Field(default=None, foreign_key="tweet.id", index=True, max_length=32)
    parent_comment_id: Optional[str] = Field(default=None, max_length=32)
    like_count: int = Field(default=0, nullable=False)
