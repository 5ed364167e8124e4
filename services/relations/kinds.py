"""
Edge kind registry.

每种关系 (订阅 / 视频点赞 / 评论点赞 / 动态点赞) 在这里登记一次：
用哪张边表、哪一列是 actor、哪一列是 target、目标表和冗余计数器。
ToggleEngine 和 EdgeViewBuilder 都只通过 EdgeSpec 访问存储，不再各写一份。
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Type

from sqlmodel import SQLModel

from services.db.models import (
    Comment,
    EdgeKind,
    Like,
    NotificationKind,
    Subscription,
    TargetKind,
    Tweet,
    User,
    Video,
)
from services.errors import InvalidArgument

ID_PATTERN = re.compile(r"^[0-9a-f]{32}$")


class Direction(str, Enum):
    INCOMING = "incoming"  # 谁指向 subject (频道的订阅者、视频的点赞者)
    OUTGOING = "outgoing"  # subject 指向了什么 (我订阅的频道、我赞过的视频)


@dataclass(frozen=True)
class EdgeSpec:
    kind: EdgeKind
    edge_model: Type[SQLModel]
    actor_field: str
    target_field: str
    target_model: Type[SQLModel]
    counter_field: str
    notification_kind: NotificationKind
    timestamp_label: str
    actor_label: str
    target_label: str
    target_kind: Optional[TargetKind] = None
    forbid_self_target: bool = False

    @property
    def actor_column(self):
        return getattr(self.edge_model, self.actor_field)

    @property
    def target_column(self):
        return getattr(self.edge_model, self.target_field)

    @property
    def counter_column(self):
        return getattr(self.target_model, self.counter_field)

    def kind_clauses(self) -> List:
        """Like 表里多种目标共存，按 target_kind 过滤。"""
        if self.target_kind is None:
            return []
        return [self.edge_model.target_kind == self.target_kind]

    def edge_clauses(self, actor_id: str, target_id: str) -> List:
        return [
            self.actor_column == actor_id,
            self.target_column == target_id,
            *self.kind_clauses(),
        ]

    def new_edge(self, actor_id: str, target_id: str) -> SQLModel:
        values = {self.actor_field: actor_id, self.target_field: target_id}
        if self.target_kind is not None:
            values["target_kind"] = self.target_kind
        return self.edge_model(**values)

    def owner_of(self, target: SQLModel) -> str:
        """目标的所有者：频道就是用户本身，其余看 owner_id。"""
        if self.target_model is User:
            return target.id
        return target.owner_id


EDGE_SPECS: Dict[EdgeKind, EdgeSpec] = {
    EdgeKind.SUBSCRIPTION: EdgeSpec(
        kind=EdgeKind.SUBSCRIPTION,
        edge_model=Subscription,
        actor_field="subscriber_id",
        target_field="channel_id",
        target_model=User,
        counter_field="subscriber_count",
        notification_kind=NotificationKind.SUBSCRIPTION,
        timestamp_label="subscribedAt",
        actor_label="subscriber",
        target_label="channel",
        forbid_self_target=True,
    ),
    EdgeKind.VIDEO_LIKE: EdgeSpec(
        kind=EdgeKind.VIDEO_LIKE,
        edge_model=Like,
        actor_field="liker_id",
        target_field="target_id",
        target_model=Video,
        counter_field="like_count",
        notification_kind=NotificationKind.LIKE,
        timestamp_label="likedAt",
        actor_label="liker",
        target_label="video",
        target_kind=TargetKind.VIDEO,
    ),
    EdgeKind.COMMENT_LIKE: EdgeSpec(
        kind=EdgeKind.COMMENT_LIKE,
        edge_model=Like,
        actor_field="liker_id",
        target_field="target_id",
        target_model=Comment,
        counter_field="like_count",
        notification_kind=NotificationKind.LIKE,
        timestamp_label="likedAt",
        actor_label="liker",
        target_label="comment",
        target_kind=TargetKind.COMMENT,
    ),
    EdgeKind.TWEET_LIKE: EdgeSpec(
        kind=EdgeKind.TWEET_LIKE,
        edge_model=Like,
        actor_field="liker_id",
        target_field="target_id",
        target_model=Tweet,
        counter_field="like_count",
        notification_kind=NotificationKind.LIKE,
        timestamp_label="likedAt",
        actor_label="liker",
        target_label="tweet",
        target_kind=TargetKind.TWEET,
    ),
}


def parse_kind(value) -> EdgeKind:
    if isinstance(value, EdgeKind):
        return value
    try:
        return EdgeKind(str(value).strip().lower())
    except ValueError:
        raise InvalidArgument(f"Unknown relationship kind: {value!r}") from None


def parse_direction(value) -> Direction:
    if isinstance(value, Direction):
        return value
    try:
        return Direction(str(value).strip().lower())
    except ValueError:
        raise InvalidArgument(f"Unknown direction: {value!r}") from None


def get_spec(kind) -> EdgeSpec:
    return EDGE_SPECS[parse_kind(kind)]


def ensure_id(value, field: str = "id") -> str:
    """校验标识符格式 (32 位小写十六进制)，返回规范化后的值。"""
    if value is None:
        raise InvalidArgument(f"{field} not provided")
    normalized = str(value).strip().lower()
    if not ID_PATTERN.match(normalized):
        raise InvalidArgument(f"Invalid {field}")
    return normalized
