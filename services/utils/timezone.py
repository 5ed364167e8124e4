"""
统一时区管理模块
所有时间相关操作必须使用此模块，确保时区一致性

数据库统一存 UTC。SQLite 读回来的是 naive datetime，
比较前用 make_aware() 补上 UTC 时区。

使用方法:
    from services.utils.timezone import now

    current_time = now()
"""
from datetime import date, datetime, timedelta, timezone

TIMEZONE = timezone.utc


def now() -> datetime:
    """
    获取当前 UTC 时间 (带时区信息)
    替代 datetime.now() / datetime.utcnow()
    """
    return datetime.now(TIMEZONE)


def make_aware(dt: datetime) -> datetime:
    """
    将 naive datetime 视为 UTC 并补上时区

    Args:
        dt: naive 或 aware 的 datetime

    Returns:
        datetime: 带 UTC 时区信息的 datetime
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=TIMEZONE)
    return dt.astimezone(TIMEZONE)


def day_key(dt: datetime) -> str:
    """按 UTC 日期分桶用的 key, 格式 YYYY-MM-DD"""
    return make_aware(dt).strftime("%Y-%m-%d")


def trailing_days(days: int, end: datetime = None) -> list:
    """返回截止到 end (含) 的最近 days 天的日期列表, 旧的在前"""
    end_day: date = make_aware(end or now()).date()
    return [end_day - timedelta(days=offset) for offset in range(days - 1, -1, -1)]
