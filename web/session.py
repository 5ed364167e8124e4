"""
Session 管理 - 使用 SQLite 持久化

身份由外部登录流程签发 (写入 user_session 表)，这里只负责把请求里的
session id 解析为 user id。session id 可以放在 Cookie，也可以放在
Authorization: Bearer 头里。
"""
import logging
from typing import Optional

from fastapi import Request
from sqlmodel import Session

from services.config import config
from services.db.models import UserSession

log = logging.getLogger(__name__)

SESSION_COOKIE_NAME = config.SESSION_COOKIE_NAME


def extract_session_id(request: Request) -> Optional[str]:
    """优先读 Cookie，其次读 Bearer 头。"""
    session_id = request.cookies.get(SESSION_COOKIE_NAME)
    if session_id:
        return session_id

    auth = request.headers.get("Authorization", "")
    scheme, _, token = auth.partition(" ")
    if scheme.lower() == "bearer" and token.strip():
        return token.strip()
    return None


def get_session_user_id(db: Session, session_id: Optional[str]) -> Optional[str]:
    """从数据库获取 Session 对应的 user id，不存在或已过期返回 None"""
    if not session_id:
        return None

    user_session = db.get(UserSession, session_id)
    if user_session is None:
        return None
    if user_session.is_expired():
        log.debug(f"Session {session_id[:8]}... expired")
        return None
    return user_session.user_id


def create_session(db: Session, user_id: str) -> UserSession:
    """签发 Session (供登录流程和测试使用)"""
    user_session = UserSession.create(user_id, expires_days=config.SESSION_TTL_DAYS)
    db.add(user_session)
    db.commit()
    db.refresh(user_session)
    return user_session
