"""
关系 API Router
订阅 / 点赞的翻转、状态查询和分页的关系视图
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlmodel import Session

from services.config import config
from services.db.models import User
from services.relations.toggle import ToggleEngine
from services.relations.views import EdgeViewBuilder
from web.dependencies import get_db_session, limiter, require_user

router = APIRouter(prefix="/relationship", tags=["relationship"])


@router.post("/{kind}/{target_id}")
@limiter.limit(config.TOGGLE_RATE_LIMIT)
def toggle_relationship(
    request: Request,
    kind: str,
    target_id: str,
    user: User = Depends(require_user),
    db: Session = Depends(get_db_session),
):
    """翻转当前用户与目标之间的关系，返回翻转后的状态"""
    result = ToggleEngine(db).toggle(user.id, target_id, kind)
    return result.to_wire()


@router.get("/{kind}/{target_id}/status")
def relationship_status(
    kind: str,
    target_id: str,
    user: User = Depends(require_user),
    db: Session = Depends(get_db_session),
):
    return ToggleEngine(db).status(user.id, target_id, kind).to_wire()


@router.get("/{kind}/{subject_id}/{direction}")
def list_relationships(
    kind: str,
    subject_id: str,
    direction: str,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    db: Session = Depends(get_db_session),
):
    """
    公开接口，无需登录。
    incoming: 谁指向 subject (频道的订阅者 / 内容的点赞者)
    outgoing: subject 指向了什么 (订阅的频道 / 赞过的内容)
    """
    result = EdgeViewBuilder(db).list_edges(subject_id, kind, direction, page=page, page_size=limit)
    return result.to_wire()
