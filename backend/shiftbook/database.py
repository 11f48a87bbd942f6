"""
資料庫連線與 Session（Async SQLAlchemy）
- 應用程式一律走 async driver：PostgreSQL → asyncpg、SQLite → aiosqlite
- Alembic 跑 sync，由 sync_database_url 轉回 psycopg2 / sqlite
- 正式環境關閉 auto_create_tables，建表交給 Alembic
"""
import logging
from pathlib import Path
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from shiftbook.config import BASE_DIR, settings

logger = logging.getLogger(__name__)

_PG_PREFIXES = ("postgres://", "postgresql://", "postgresql+psycopg2://", "postgresql+asyncpg://")


def _replace_pg_driver(url: str, driver: str) -> str:
    for prefix in _PG_PREFIXES:
        if url.startswith(prefix):
            return f"postgresql+{driver}://" + url[len(prefix):]
    return url


def normalize_database_url(url: str) -> str:
    """託管服務常給 postgres:// 或 postgresql://，async 連線改成 postgresql+asyncpg://"""
    return _replace_pg_driver(str(url or "").strip(), "asyncpg")


def sync_database_url(url: str, base_dir: Optional[Path] = None) -> str:
    """Alembic 用的 sync URL；SQLite 相對路徑以 backend/ 為基準轉成絕對路徑。"""
    url = str(url or "").strip()
    if url.startswith("sqlite"):
        url = url.replace("sqlite+aiosqlite", "sqlite", 1)
        if url.startswith("sqlite:///./"):
            path = ((base_dir or BASE_DIR) / url[len("sqlite:///./"):]).resolve()
            url = "sqlite:///" + path.as_posix()
        return url
    return _replace_pg_driver(url, "psycopg2")


db_url = normalize_database_url(settings.database_url)
_is_sqlite = db_url.startswith("sqlite")

engine = create_async_engine(
    db_url,
    echo=settings.debug,
    # SQLite 檔案不需要 pre-ping；連線在同一 event loop 內跨 thread 使用
    pool_pre_ping=not _is_sqlite,
    connect_args={"check_same_thread": False} if _is_sqlite else {},
)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


class Base(DeclarativeBase):
    pass


async def get_db():
    """每個 request 一個 session：正常結束 commit，例外時 rollback 後往外拋。"""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        else:
            await session.commit()


async def init_db():
    if not settings.auto_create_tables:
        return
    # 確保 models 已載入，metadata 才完整
    from shiftbook import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("database tables ensured (%s)", engine.url.get_backend_name())
