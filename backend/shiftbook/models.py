"""資料庫模型 - 使用者、登入 session、勤務先（公司）、シフト。
公司與シフト一律以 user_id 限定擁有者；shifts.company_id 不設 FK，刪除公司後該筆シフト保留並顯示為 Unknown。"""
from datetime import date, datetime, time
from decimal import Decimal
from typing import Optional, List
from sqlalchemy import String, Date, Time, Text, Numeric, ForeignKey, DateTime, Integer, UniqueConstraint, JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship
from shiftbook.database import Base

# 公司顏色：調色盤 key（未指定時由 company id 雜湊決定）
COMPANY_COLORS = ("emerald", "red", "blue", "orange", "purple", "yellow")


class User(Base):
    """使用者帳號。email 一律小寫儲存；user_metadata 存 name / avatar_url 等個人資料。"""
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, comment="登入 email（小寫）")
    password_hash: Mapped[str] = mapped_column(String(255), comment="密碼雜湊")
    user_metadata: Mapped[dict] = mapped_column(JSON, default=dict, comment="個人資料 name / avatar_url")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    sessions: Mapped[List["AuthSession"]] = relationship("AuthSession", back_populates="user", cascade="all, delete-orphan")
    companies: Mapped[List["Company"]] = relationship("Company", back_populates="user", cascade="all, delete-orphan")


class AuthSession(Base):
    """登入 session：token 為不透明字串，前端以 Bearer 帶入。"""
    __tablename__ = "auth_sessions"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    token: Mapped[str] = mapped_column(String(128), unique=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    expires_at: Mapped[datetime] = mapped_column(DateTime, comment="到期時間（UTC）")
    revoked_at: Mapped[Optional[datetime]] = mapped_column(DateTime, comment="登出時間（UTC），未登出為空")

    user: Mapped["User"] = relationship("User", back_populates="sessions")


class Company(Base):
    """勤務先：時給 hourly_wage 用於計算シフト收入。同一使用者底下名稱不可重複。"""
    __tablename__ = "companies"
    __table_args__ = (UniqueConstraint("user_id", "name", name="uq_companies_user_name"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    name: Mapped[str] = mapped_column(String(100), comment="公司名稱")
    hourly_wage: Mapped[Decimal] = mapped_column(Numeric(10, 2), comment="時給")
    color: Mapped[Optional[str]] = mapped_column(String(20), comment="顏色 key：emerald/red/blue/orange/purple/yellow")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user: Mapped["User"] = relationship("User", back_populates="companies")


class Shift(Base):
    """シフト：某日某公司的一段勤務（同日內 start_time < end_time，不支援跨日）。"""
    __tablename__ = "shifts"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    company_id: Mapped[int] = mapped_column(Integer, index=True, comment="公司 ID（不設 FK，公司刪除後保留）")
    date: Mapped[date] = mapped_column(Date, index=True, comment="勤務日")
    start_time: Mapped[time] = mapped_column(Time, comment="開始時間")
    end_time: Mapped[time] = mapped_column(Time, comment="結束時間")
    memo: Mapped[Optional[str]] = mapped_column(Text, comment="備註")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
