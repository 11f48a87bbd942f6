"""CRUD 操作 - 使用者、登入 session、公司、シフト；公司與シフト一律以 user_id 限定擁有者"""
from datetime import date, datetime
from typing import Optional, List
from sqlalchemy import select, delete, or_
from sqlalchemy.ext.asyncio import AsyncSession

from shiftbook.models import User, AuthSession, Company, Shift
from shiftbook.schemas import CompanyCreate, CompanyUpdate, ShiftCreate, ShiftUpdate
from shiftbook.services.month_period import month_range


# ---------- 使用者 / session ----------
async def get_user(db: AsyncSession, user_id: int) -> Optional[User]:
    r = await db.execute(select(User).where(User.id == user_id))
    return r.scalar_one_or_none()


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    if not email or not email.strip():
        return None
    r = await db.execute(select(User).where(User.email == email.strip().lower()))
    return r.scalar_one_or_none()


async def create_user(db: AsyncSession, email: str, password_hash: str, user_metadata: Optional[dict] = None) -> User:
    u = User(email=email.strip().lower(), password_hash=password_hash, user_metadata=dict(user_metadata or {}))
    db.add(u)
    await db.flush()
    await db.refresh(u)
    return u


async def update_user(db: AsyncSession, u: User, **fields) -> User:
    for k, v in fields.items():
        setattr(u, k, v)
    await db.flush()
    await db.refresh(u)
    return u


async def create_auth_session(db: AsyncSession, user_id: int, token: str, expires_at: datetime) -> AuthSession:
    s = AuthSession(user_id=user_id, token=token, expires_at=expires_at)
    db.add(s)
    await db.flush()
    await db.refresh(s)
    return s


async def get_auth_session_by_token(db: AsyncSession, token: str) -> Optional[AuthSession]:
    r = await db.execute(select(AuthSession).where(AuthSession.token == token))
    return r.scalar_one_or_none()


async def revoke_auth_session(db: AsyncSession, s: AuthSession, now: Optional[datetime] = None) -> AuthSession:
    s.revoked_at = now or datetime.utcnow()
    await db.flush()
    return s


async def revoke_user_sessions(db: AsyncSession, user_id: int, keep_token: Optional[str] = None) -> int:
    """登出某使用者其他 session（變更密碼時使用）；回傳撤銷筆數。"""
    q = select(AuthSession).where(AuthSession.user_id == user_id, AuthSession.revoked_at.is_(None))
    if keep_token:
        q = q.where(AuthSession.token != keep_token)
    r = await db.execute(q)
    sessions = list(r.scalars().all())
    now = datetime.utcnow()
    for s in sessions:
        s.revoked_at = now
    await db.flush()
    return len(sessions)


async def purge_auth_sessions(db: AsyncSession, now: Optional[datetime] = None) -> int:
    """刪除已過期或已登出的 session；回傳刪除筆數。"""
    now = now or datetime.utcnow()
    r = await db.execute(
        delete(AuthSession).where(or_(AuthSession.expires_at <= now, AuthSession.revoked_at.is_not(None)))
    )
    return r.rowcount or 0


# ---------- 公司 companies ----------
class CompanyNameConflictError(ValueError):
    """同一使用者底下已有同名公司"""
    pass


async def list_companies(db: AsyncSession, user_id: int) -> List[Company]:
    q = select(Company).where(Company.user_id == user_id).order_by(Company.name, Company.id)
    r = await db.execute(q)
    return list(r.scalars().all())


async def get_company(db: AsyncSession, user_id: int, company_id: int) -> Optional[Company]:
    r = await db.execute(select(Company).where(Company.id == company_id, Company.user_id == user_id))
    return r.scalar_one_or_none()


async def _check_company_name(db: AsyncSession, user_id: int, name: str, exclude_id: Optional[int] = None) -> None:
    q = select(Company.id).where(Company.user_id == user_id, Company.name == name)
    if exclude_id is not None:
        q = q.where(Company.id != exclude_id)
    r = await db.execute(q.limit(1))
    if r.scalar_one_or_none() is not None:
        raise CompanyNameConflictError("同じ名前の会社がすでに存在します")


async def create_company(db: AsyncSession, user_id: int, data: CompanyCreate) -> Company:
    raw = data.model_dump()
    await _check_company_name(db, user_id, raw["name"])
    c = Company(user_id=user_id, **raw)
    db.add(c)
    await db.flush()
    await db.refresh(c)
    return c


async def update_company(db: AsyncSession, c: Company, data: CompanyUpdate) -> Company:
    update_data = data.model_dump(exclude_unset=True)
    if update_data.get("name") and update_data["name"] != c.name:
        await _check_company_name(db, c.user_id, update_data["name"], exclude_id=c.id)
    for k, v in update_data.items():
        if k in ("name", "hourly_wage") and v is None:
            continue
        setattr(c, k, v)
    await db.flush()
    await db.refresh(c)
    return c


async def delete_company(db: AsyncSession, c: Company) -> None:
    """只刪公司；該公司的シフト保留（統計時視為 Unknown）。"""
    await db.delete(c)
    await db.flush()


# ---------- シフト shifts ----------
async def list_shifts(
    db: AsyncSession,
    user_id: int,
    year: Optional[int] = None,
    month: Optional[int] = None,
    company_id: Optional[int] = None,
) -> List[Shift]:
    q = select(Shift).where(Shift.user_id == user_id).order_by(Shift.date.desc(), Shift.start_time.desc(), Shift.id.desc())
    if year is not None and month is not None:
        first, last = month_range(year, month)
        q = q.where(Shift.date >= first, Shift.date <= last)
    elif year is not None:
        q = q.where(Shift.date >= date(year, 1, 1), Shift.date <= date(year, 12, 31))
    if company_id is not None:
        q = q.where(Shift.company_id == company_id)
    r = await db.execute(q)
    return list(r.scalars().all())


async def get_shift(db: AsyncSession, user_id: int, shift_id: int) -> Optional[Shift]:
    r = await db.execute(select(Shift).where(Shift.id == shift_id, Shift.user_id == user_id))
    return r.scalar_one_or_none()


async def create_shift(db: AsyncSession, user_id: int, data: ShiftCreate) -> Shift:
    raw = data.model_dump()
    sh = Shift(user_id=user_id, **raw)
    db.add(sh)
    await db.flush()
    await db.refresh(sh)
    return sh


async def update_shift(db: AsyncSession, sh: Shift, data: ShiftUpdate) -> Shift:
    """只更新有傳的欄位（PATCH）；時間區間需由呼叫端先檢查。"""
    update_data = data.model_dump(exclude_unset=True)
    for k, v in update_data.items():
        if k != "memo" and v is None:
            continue
        setattr(sh, k, v)
    await db.flush()
    await db.refresh(sh)
    return sh


async def delete_shift(db: AsyncSession, sh: Shift) -> None:
    await db.delete(sh)
    await db.flush()
