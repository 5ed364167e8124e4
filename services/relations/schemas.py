from typing import Any, Dict, List

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """对外 JSON 使用 camelCase，Python 侧保留 snake_case。"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class ToggleResult(CamelModel):
    is_active: bool


class Page(CamelModel):
    items: List[Dict[str, Any]]
    total_count: int
    page: int
    page_size: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool


class EdgePage(Page):
    """关系视图的一页 (items 为已投影的 join 结果)。"""


class NotificationPage(Page):
    unread_count: int
