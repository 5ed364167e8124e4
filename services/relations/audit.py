"""计数器对账：把目标上的冗余计数和实际边数逐个比较。只读，不修正。"""

import logging
from dataclasses import dataclass
from typing import List

from sqlalchemy import func
from sqlmodel import Session, col, select

from services.relations.kinds import get_spec

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class CounterDrift:
    kind: str
    target_id: str
    stored: int
    actual: int

    @property
    def delta(self) -> int:
        return self.stored - self.actual


def find_counter_drift(session: Session, kind) -> List[CounterDrift]:
    """
    全表扫描某种关系的目标，返回计数器与边数不一致的记录。

    Args:
        session: SQLModel Session
        kind: EdgeKind 或其字符串值

    Returns:
        CounterDrift 列表，按 target_id 排序；空列表表示账实一致
    """
    spec = get_spec(kind)
    target = spec.target_model

    edge_counts = (
        select(spec.target_column.label("target_id"), func.count().label("edges"))
        .where(*spec.kind_clauses())
        .group_by(spec.target_column)
        .subquery()
    )
    actual = func.coalesce(edge_counts.c.edges, 0)
    stmt = (
        select(target.id, spec.counter_column, actual)
        .outerjoin(edge_counts, edge_counts.c.target_id == target.id)
        .where(spec.counter_column != actual)
        .order_by(col(target.id))
    )

    drifts = [
        CounterDrift(kind=spec.kind.value, target_id=target_id, stored=stored, actual=edges)
        for target_id, stored, edges in session.exec(stmt).all()
    ]
    if drifts:
        log.warning(f"Counter drift for {spec.kind.value}: {len(drifts)} targets")
    return drifts
