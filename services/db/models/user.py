# services/db/models/user.py
from typing import Optional

from sqlmodel import Field, SQLModel

from .base import SoftDelete, TimeStamped, new_id


class User(TimeStamped, SoftDelete, SQLModel, table=True):
    """用户 / 频道。频道就是用户本身，订阅关系两端都指向这张表。"""
    id: str = Field(default_factory=new_id, primary_key=True, max_length=32)
    username: str = Field(index=True, unique=True, max_length=64)
    full_name: Optional[str] = Field(default=None, max_length=128)
    avatar: Optional[str] = Field(default=None, max_length=512)
    email: Optional[str] = Field(default=None, max_length=255)

    # 内部字段，永远不出现在聚合视图里
    password_hash: Optional[str] = Field(default=None, max_length=255)

    # 冗余计数器，只允许 ToggleEngine 通过 ±1 修改
    subscriber_count: int = Field(default=0, nullable=False)
