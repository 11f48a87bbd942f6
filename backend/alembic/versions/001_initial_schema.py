"""初始 schema：users / auth_sessions / companies / shifts

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("email", sa.String(255), nullable=False, comment="登入 email（小寫）"),
        sa.Column("password_hash", sa.String(255), nullable=False, comment="密碼雜湊"),
        sa.Column("user_metadata", sa.JSON(), nullable=True, comment="個人資料 name / avatar_url"),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)

    op.create_table(
        "auth_sessions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("token", sa.String(128), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("expires_at", sa.DateTime(), nullable=False, comment="到期時間（UTC）"),
        sa.Column("revoked_at", sa.DateTime(), nullable=True, comment="登出時間（UTC），未登出為空"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_auth_sessions_user_id"), "auth_sessions", ["user_id"], unique=False)
    op.create_index(op.f("ix_auth_sessions_token"), "auth_sessions", ["token"], unique=True)

    op.create_table(
        "companies",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(100), nullable=False, comment="公司名稱"),
        sa.Column("hourly_wage", sa.Numeric(10, 2), nullable=False, comment="時給"),
        sa.Column("color", sa.String(20), nullable=True, comment="顏色 key：emerald/red/blue/orange/purple/yellow"),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "name", name="uq_companies_user_name"),
    )
    op.create_index(op.f("ix_companies_user_id"), "companies", ["user_id"], unique=False)

    op.create_table(
        "shifts",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=False, comment="公司 ID（不設 FK，公司刪除後保留）"),
        sa.Column("date", sa.Date(), nullable=False, comment="勤務日"),
        sa.Column("start_time", sa.Time(), nullable=False, comment="開始時間"),
        sa.Column("end_time", sa.Time(), nullable=False, comment="結束時間"),
        sa.Column("memo", sa.Text(), nullable=True, comment="備註"),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_shifts_user_id"), "shifts", ["user_id"], unique=False)
    op.create_index(op.f("ix_shifts_company_id"), "shifts", ["company_id"], unique=False)
    op.create_index(op.f("ix_shifts_date"), "shifts", ["date"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_shifts_date"), table_name="shifts")
    op.drop_index(op.f("ix_shifts_company_id"), table_name="shifts")
    op.drop_index(op.f("ix_shifts_user_id"), table_name="shifts")
    op.drop_table("shifts")
    op.drop_index(op.f("ix_companies_user_id"), table_name="companies")
    op.drop_table("companies")
    op.drop_index(op.f("ix_auth_sessions_token"), table_name="auth_sessions")
    op.drop_index(op.f("ix_auth_sessions_user_id"), table_name="auth_sessions")
    op.drop_table("auth_sessions")
    op.drop_index(op.f("ix_users_email"), table_name="users")
    op.drop_table("users")
