"""
Aggregated View Builder - 分页的 "谁关注了 X / X 关注了什么" 查询。

每个视图都是同一套分阶段查询：
    filter  固定一端 (incoming 固定 target，outgoing 固定 actor)
    join    另一端的资料表 (内连接：资料已删除的边直接丢掉，不返回悬空引用)
    project 只投影公开身份字段，createdAt 改名为 subscribedAt / likedAt
    sort    边的 created_at 倒序，同一时刻再按边 id 倒序，保证全序
    paginate offset/limit；总数在同一个 join 之后计算，和分页结果口径一致

只读，不加锁；与进行中的 toggle 并发时读到的是已提交的状态。
"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy import func
from sqlalchemy.orm import aliased
from sqlmodel import Session, col, select

from services.db.models import User
from services.errors import TargetNotFound
from services.relations.kinds import Direction, EdgeSpec, ensure_id, get_spec, parse_direction
from services.relations.pagination import PageInput, normalize_page
from services.relations.projection import iso, project, project_user
from services.relations.schemas import EdgePage

log = logging.getLogger(__name__)


class EdgeViewBuilder:
    """关系聚合视图。"""

    def __init__(self, session: Session):
        self.session = session

    def list_edges(
        self,
        subject_id: str,
        kind,
        direction,
        page: PageInput = None,
        page_size: PageInput = None,
    ) -> EdgePage:
        """
        分页列出 subject 的一侧关系。

        Args:
            subject_id: 固定端的 id (incoming 时是 target，outgoing 时是 actor)
            kind: EdgeKind
            direction: "incoming" | "outgoing"
            page, page_size: 分页参数，按 pagination.normalize_page 归一化

        Returns:
            EdgePage，items 的形状取决于 kind 和 direction
        """
        spec = get_spec(kind)
        direction = parse_direction(direction)
        subject_id = ensure_id(subject_id, "subject id")
        paging = normalize_page(page, page_size)

        self._ensure_subject(spec, direction, subject_id)

        if direction is Direction.INCOMING:
            stmt = self._incoming(spec, subject_id)
            to_item = self._incoming_item
        else:
            stmt = self._outgoing(spec, subject_id)
            to_item = self._outgoing_item

        total = self.session.exec(select(func.count()).select_from(stmt.subquery())).one()

        page_stmt = (
            stmt.order_by(col(spec.edge_model.created_at).desc(), col(spec.edge_model.id).desc())
            .offset(paging.offset)
            .limit(paging.page_size)
        )
        items = [to_item(spec, row) for row in self.session.exec(page_stmt).all()]

        log.debug(
            f"list_edges {spec.kind.value}/{direction.value} {subject_id}: "
            f"page={paging.page} size={paging.page_size} total={total}"
        )
        return EdgePage(
            items=items,
            total_count=total,
            page=paging.page,
            page_size=paging.page_size,
            total_pages=paging.total_pages(total),
            has_next_page=paging.has_next(total),
            has_prev_page=paging.has_prev(),
        )

    # --- Stages ---

    def _ensure_subject(self, spec: EdgeSpec, direction: Direction, subject_id: str) -> None:
        model = spec.target_model if direction is Direction.INCOMING else User
        subject = self.session.get(model, subject_id)
        if subject is None or getattr(subject, "is_deleted", False):
            label = spec.target_label if direction is Direction.INCOMING else "user"
            raise TargetNotFound(f"{label.capitalize()} not found")

    def _incoming(self, spec: EdgeSpec, subject_id: str):
        """谁指向 subject：join 发起者的用户资料。"""
        return (
            select(spec.edge_model, User)
            .join(User, col(User.id) == spec.actor_column)
            .where(
                spec.target_column == subject_id,
                *spec.kind_clauses(),
                col(User.is_deleted).is_(False),
            )
        )

    def _outgoing(self, spec: EdgeSpec, subject_id: str):
        """subject 指向了什么：join 目标；视频/评论/动态再 join 作者。"""
        target = spec.target_model
        if target is User:
            return (
                select(spec.edge_model, User)
                .join(User, col(User.id) == spec.target_column)
                .where(
                    spec.actor_column == subject_id,
                    col(User.is_deleted).is_(False),
                )
            )

        owner = aliased(User)
        return (
            select(spec.edge_model, target, owner)
            .join(target, col(target.id) == spec.target_column)
            .join(owner, owner.id == target.owner_id)
            .where(
                spec.actor_column == subject_id,
                *spec.kind_clauses(),
                owner.is_deleted.is_(False),
            )
        )

    # --- Projection ---

    @staticmethod
    def _incoming_item(spec: EdgeSpec, row) -> Dict[str, Any]:
        edge, actor = row
        return {
            "id": edge.id,
            spec.actor_label: project_user(actor),
            spec.timestamp_label: iso(edge.created_at),
        }

    @staticmethod
    def _outgoing_item(spec: EdgeSpec, row) -> Dict[str, Any]:
        edge, target, *rest = row
        item: Dict[str, Optional[Any]] = {
            "id": edge.id,
            spec.target_label: project(target),
        }
        if rest:
            item["owner"] = project_user(rest[0])
        item[spec.timestamp_label] = iso(edge.created_at)
        return item
