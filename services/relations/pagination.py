"""分页参数归一化。

page < 1 归一到 1，page_size < 1 用默认值，超过上限时截断，
以此限制单次聚合查询的成本。非整数输入视为参数错误。
"""

import math
from dataclasses import dataclass
from typing import Optional, Union

from services.config import config
from services.errors import InvalidArgument

PageInput = Optional[Union[int, str]]

# SQLite INTEGER 上限，OFFSET 超过它会在驱动层溢出
MAX_OFFSET = 2 ** 63 - 1


def _to_int(value: PageInput, field: str) -> Optional[int]:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise InvalidArgument(f"Invalid {field}")
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        raise InvalidArgument(f"Invalid {field}: {value!r}") from None


@dataclass(frozen=True)
class PageRequest:
    page: int
    page_size: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    def total_pages(self, total_count: int) -> int:
        return math.ceil(total_count / self.page_size) if total_count else 0

    def has_next(self, total_count: int) -> bool:
        return self.page * self.page_size < total_count

    def has_prev(self) -> bool:
        return self.page > 1


def normalize_page(page: PageInput = None, page_size: PageInput = None) -> PageRequest:
    page_num = _to_int(page, "page")
    size = _to_int(page_size, "limit")

    if page_num is None or page_num < 1:
        page_num = 1
    if size is None or size < 1:
        size = config.DEFAULT_PAGE_SIZE
    size = min(size, config.MAX_PAGE_SIZE)
    if (page_num - 1) * size > MAX_OFFSET:
        raise InvalidArgument(f"page out of range: {page_num}")
    return PageRequest(page=page_num, page_size=size)
