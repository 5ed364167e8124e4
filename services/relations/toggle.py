"""
Toggle Engine - 关系边的原子翻转。

一次 toggle 在同一个事务里完成三件事：
    1. 插入或删除一条边
    2. 目标上的冗余计数器 ±1 (SQL 表达式 counter = counter ± 1，不做赋值)
    3. 激活时给目标所有者写一条通知

要么全部可见，要么全部回滚。计数器只有这一条写入路径。

并发下两个请求可能都看到 "边不存在"：唯一约束让后提交的那个插入失败，
这里回滚并按 "已激活" 返回，计数器不会被重复 +1。
"""

import logging
from typing import Optional

from sqlalchemy import delete, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, SQLModel, col, select

from services.errors import SelfReferenceForbidden, TargetNotFound, TransactionFailed
from services.notification.service import NotificationService
from services.relations.kinds import EdgeSpec, ensure_id, get_spec
from services.relations.schemas import ToggleResult

log = logging.getLogger(__name__)


class ToggleEngine:
    """关系翻转服务。"""

    def __init__(self, session: Session):
        """
        Args:
            session: SQLModel Session，toggle 内部负责 commit / rollback
        """
        self.session = session
        self.notifications = NotificationService(session)

    # --- Validation ---

    def _load_target(self, spec: EdgeSpec, target_id: str) -> SQLModel:
        target = self.session.get(spec.target_model, target_id)
        if target is None or getattr(target, "is_deleted", False):
            raise TargetNotFound(f"{spec.target_label.capitalize()} not found")
        return target

    def _validate(self, kind, actor_id, target_id):
        spec = get_spec(kind)
        actor_id = ensure_id(actor_id, "actor id")
        target_id = ensure_id(target_id, f"{spec.target_label} id")

        if spec.forbid_self_target and actor_id == target_id:
            raise SelfReferenceForbidden("You cannot subscribe to yourself")

        target = self._load_target(spec, target_id)
        owner_id = spec.owner_of(target)
        if not spec.forbid_self_target and owner_id == actor_id:
            raise SelfReferenceForbidden(f"You cannot like your own {spec.target_label}")
        return spec, actor_id, target_id, owner_id

    # --- Public API ---

    def status(self, actor_id: str, target_id: str, kind) -> ToggleResult:
        """只读：当前 actor 与 target 之间是否存在该关系。"""
        spec = get_spec(kind)
        actor_id = ensure_id(actor_id, "actor id")
        target_id = ensure_id(target_id, f"{spec.target_label} id")
        return ToggleResult(is_active=self._find_edge_id(spec, actor_id, target_id) is not None)

    def toggle(self, actor_id: str, target_id: str, kind) -> ToggleResult:
        """
        翻转 (actor, target) 之间的关系。

        Args:
            actor_id: 发起者 (订阅者 / 点赞者)
            target_id: 被订阅的频道 / 被点赞的视频、评论、动态
            kind: EdgeKind 或其字符串值

        Returns:
            ToggleResult(is_active=True) 表示边现在存在，False 表示已移除

        Raises:
            InvalidArgument, SelfReferenceForbidden, TargetNotFound: 校验失败，未做任何写入
            TransactionFailed: 事务已整体回滚，调用方可以重试
        """
        spec, actor_id, target_id, owner_id = self._validate(kind, actor_id, target_id)

        try:
            edge_id = self._find_edge_id(spec, actor_id, target_id)
            if edge_id is not None:
                is_active = self._deactivate(spec, edge_id, target_id)
            else:
                is_active = self._activate(spec, actor_id, target_id, owner_id)
            if is_active is None:
                # 并发竞争已在分支内回滚
                return ToggleResult(is_active=edge_id is None)
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            return self._resolve_duplicate(spec, actor_id, target_id)
        except SQLAlchemyError as e:
            self.session.rollback()
            log.error(f"Toggle {spec.kind.value} {actor_id} -> {target_id} rolled back: {e}", exc_info=True)
            raise TransactionFailed() from e

        log.info(f"Toggle {spec.kind.value}: {actor_id} -> {target_id} is_active={is_active}")
        return ToggleResult(is_active=is_active)

    # --- Internals ---

    def _find_edge_id(self, spec: EdgeSpec, actor_id: str, target_id: str) -> Optional[int]:
        stmt = select(spec.edge_model.id).where(*spec.edge_clauses(actor_id, target_id))
        return self.session.exec(stmt).first()

    def _bump_counter(self, spec: EdgeSpec, target_id: str, delta: int) -> None:
        counter = spec.counter_column
        result = self.session.execute(
            update(spec.target_model)
            .where(col(spec.target_model.id) == target_id)
            .values({spec.counter_field: counter + delta})
        )
        if result.rowcount != 1:
            # 目标在校验之后被删掉了
            raise TargetNotFound(f"{spec.target_label.capitalize()} not found")

    def _deactivate(self, spec: EdgeSpec, edge_id: int, target_id: str) -> Optional[bool]:
        result = self.session.execute(
            delete(spec.edge_model).where(col(spec.edge_model.id) == edge_id)
        )
        if result.rowcount == 0:
            # 另一个 toggle 已经删掉了这条边，它也已经 -1 过
            self.session.rollback()
            log.warning(f"Toggle {spec.kind.value}: edge {edge_id} already removed concurrently")
            return None
        try:
            self._bump_counter(spec, target_id, -1)
        except TargetNotFound:
            self.session.rollback()
            raise
        return False

    def _activate(self, spec: EdgeSpec, actor_id: str, target_id: str, owner_id: str) -> bool:
        self.session.add(spec.new_edge(actor_id, target_id))
        self.session.flush()  # 唯一约束在这里生效
        try:
            self._bump_counter(spec, target_id, +1)
        except TargetNotFound:
            self.session.rollback()
            raise
        self.notifications.notify(
            recipient_id=owner_id,
            sender_id=actor_id,
            kind=spec.notification_kind,
            related_kind=spec.target_kind,
            related_id=target_id if spec.target_kind else None,
        )
        return True

    def _resolve_duplicate(self, spec: EdgeSpec, actor_id: str, target_id: str) -> ToggleResult:
        """插入撞上唯一约束：确认边确实已存在，按已激活返回。"""
        try:
            exists = self._find_edge_id(spec, actor_id, target_id) is not None
        except SQLAlchemyError as e:
            raise TransactionFailed() from e
        if not exists:
            log.error(f"Toggle {spec.kind.value} {actor_id} -> {target_id}: integrity error without duplicate edge")
            raise TransactionFailed()
        log.warning(f"Toggle {spec.kind.value} {actor_id} -> {target_id}: concurrent activation, edge already present")
        return ToggleResult(is_active=True)

