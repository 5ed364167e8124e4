import logging
from typing import Iterator, Optional

from fastapi import Depends, Request
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlmodel import Session

from services.config import config
from services.db.connection import get_engine
from services.db.models import User
from services.errors import Unauthenticated
from web.session import extract_session_id, get_session_user_id

logger = logging.getLogger(__name__)


# Initialize Limiter
limiter = Limiter(key_func=get_remote_address, enabled=config.RATE_LIMIT_ENABLED)


# --- Database Session Dependency ---
def get_db_session() -> Iterator[Session]:
    """FastAPI dependency for database session"""
    engine = get_engine()
    with Session(engine) as session:
        yield session


# --- Auth Dependency ---
def get_current_user(request: Request, db: Session = Depends(get_db_session)) -> Optional[User]:
    """从 Cookie / Bearer 获取当前登录用户，未登录返回 None"""
    user_id = get_session_user_id(db, extract_session_id(request))
    if user_id is None:
        return None

    user = db.get(User, user_id)
    if user is None or user.is_deleted:
        logger.warning(f"Session points at missing user {user_id}")
        return None
    return user


def require_user(user: Optional[User] = Depends(get_current_user)) -> User:
    """需要登录的接口使用"""
    if user is None:
        raise Unauthenticated()
    return user
