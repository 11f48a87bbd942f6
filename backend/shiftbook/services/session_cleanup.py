"""登入 session 清理：刪除已過期或已登出的 session（每日排程執行）。"""
import logging
from datetime import datetime
from typing import Optional, Tuple

from shiftbook import crud
from shiftbook.database import AsyncSessionLocal

logger = logging.getLogger(__name__)


def parse_schedule_time(value: str) -> Tuple[int, int]:
    """解析 HH:MM；格式錯誤時 fallback 03:00。"""
    try:
        parts = (value or "").strip().split(":")
        hour = int(parts[0])
        minute = int(parts[1]) if len(parts) > 1 else 0
    except (ValueError, IndexError):
        return 3, 0
    if not (0 <= hour < 24 and 0 <= minute < 60):
        return 3, 0
    return hour, minute


async def purge_expired_sessions(session_factory=None, now: Optional[datetime] = None) -> int:
    factory = session_factory or AsyncSessionLocal
    async with factory() as db:
        removed = await crud.purge_auth_sessions(db, now=now)
        await db.commit()
    if removed:
        logger.info("purged %d expired/revoked auth session(s)", removed)
    return removed
