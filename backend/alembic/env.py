"""Alembic 環境：metadata 取自 shiftbook.models，連線字串取自 settings 並轉成 sync driver。"""
from pathlib import Path
import sys

from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine

# backend/ 加入 sys.path，alembic 可從任何目錄執行
_backend_dir = Path(__file__).resolve().parent.parent
if str(_backend_dir) not in sys.path:
    sys.path.insert(0, str(_backend_dir))

from shiftbook.config import settings
from shiftbook.database import Base, sync_database_url
from shiftbook.models import User, AuthSession, Company, Shift  # noqa: F401

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata
config.set_main_option("sqlalchemy.url", sync_database_url(settings.database_url, _backend_dir))


def run_migrations_offline() -> None:
    """只輸出 SQL"""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = create_engine(config.get_main_option("sqlalchemy.url"))
    with connectable.connect() as connection:
        # SQLite 的 ALTER 以 batch 模式重建表
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            render_as_batch=connection.dialect.name == "sqlite",
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
