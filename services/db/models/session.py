"""
Session 数据模型
身份由外部认证流程签发，这里只负责把 session id 解析为 user id。
"""
from datetime import datetime, timedelta
import secrets

from sqlmodel import Field, SQLModel

from services.utils.timezone import make_aware, now as get_now


class UserSession(SQLModel, table=True):
    """持久化用户 Session"""
    __tablename__ = "user_session"

    session_id: str = Field(primary_key=True, max_length=64)
    user_id: str = Field(index=True, max_length=32)
    created_at: datetime = Field(default_factory=get_now)
    expires_at: datetime = Field(index=True)

    @classmethod
    def create(cls, user_id: str, expires_days: int = 30) -> "UserSession":
        """创建新 Session"""
        now_time = get_now()
        return cls(
            session_id=secrets.token_urlsafe(32),
            user_id=user_id,
            created_at=now_time,
            expires_at=now_time + timedelta(days=expires_days),
        )

    def is_expired(self) -> bool:
        """检查 Session 是否过期"""
        return get_now() > make_aware(self.expires_at)
