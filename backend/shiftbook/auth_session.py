"""登入與 session：email + 密碼驗證，發出不透明 access_token（前端以 Bearer 帶入）。

AuthSessionProvider 由 main 建立並掛在 app.state.auth，經 Depends 傳入各 router；
認證事件（SIGNED_IN / SIGNED_OUT / USER_UPDATED）以 subscribe() 訂閱，回傳的 Subscription 須在結束時 unsubscribe()。
"""
import logging
import secrets
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, List, Optional, Tuple

from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from shiftbook import crud
from shiftbook.models import AuthSession, User

logger = logging.getLogger(__name__)

EMAIL_TAKEN = "このメールアドレスはすでに登録されています"


class AuthEvent(str, Enum):
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    USER_UPDATED = "USER_UPDATED"


AuthListener = Callable[[AuthEvent, Optional[User]], None]


class AuthError(ValueError):
    """認證失敗；status_code 供 router 轉成 HTTPException。"""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class Subscription:
    def __init__(self, provider: "AuthSessionProvider", listener: AuthListener):
        self._provider = provider
        self.listener = listener
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self._provider._remove(self)
            self.active = False


class AuthSessionProvider:
    def __init__(self, session_ttl_hours: int = 24 * 7, password_min_length: int = 6):
        self.session_ttl = timedelta(hours=session_ttl_hours)
        self.password_min_length = password_min_length
        self._pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
        self._subscriptions: List[Subscription] = []

    # ---------- 事件 ----------
    def subscribe(self, listener: AuthListener) -> Subscription:
        sub = Subscription(self, listener)
        self._subscriptions.append(sub)
        return sub

    def _remove(self, sub: Subscription) -> None:
        if sub in self._subscriptions:
            self._subscriptions.remove(sub)

    @property
    def listener_count(self) -> int:
        return len(self._subscriptions)

    def emit(self, event: AuthEvent, user: Optional[User]) -> None:
        for sub in list(self._subscriptions):
            try:
                sub.listener(event, user)
            except Exception:
                logger.exception("auth listener failed on %s", event.value)

    # ---------- 密碼 ----------
    def hash_password(self, password: str) -> str:
        return self._pwd_context.hash(password)

    def verify_password(self, password: str, password_hash: str) -> bool:
        return self._pwd_context.verify(password, password_hash)

    def _check_password_strength(self, password: str) -> None:
        if not password or len(password) < self.password_min_length:
            raise AuthError(f"パスワードは{self.password_min_length}文字以上にしてください", status_code=400)

    # ---------- session ----------
    async def _open_session(self, db: AsyncSession, user: User) -> AuthSession:
        token = secrets.token_urlsafe(32)
        return await crud.create_auth_session(db, user.id, token, datetime.utcnow() + self.session_ttl)

    async def sign_up(self, db: AsyncSession, email: str, password: str) -> Tuple[User, AuthSession]:
        self._check_password_strength(password)
        if await crud.get_user_by_email(db, email):
            raise AuthError(EMAIL_TAKEN, status_code=400)
        try:
            user = await crud.create_user(db, email, self.hash_password(password))
        except IntegrityError:
            # 同時註冊同一 email：後到者撞 users.email unique；session 由 get_db rollback
            logger.warning("sign up raced on an existing email")
            raise AuthError(EMAIL_TAKEN, status_code=400)
        session = await self._open_session(db, user)
        logger.info("user %s signed up", user.id)
        self.emit(AuthEvent.SIGNED_IN, user)
        return user, session

    async def sign_in(self, db: AsyncSession, email: str, password: str) -> Tuple[User, AuthSession]:
        user = await crud.get_user_by_email(db, email)
        if not user or not self.verify_password(password, user.password_hash):
            raise AuthError("メールアドレスまたはパスワードが正しくありません", status_code=401)
        session = await self._open_session(db, user)
        self.emit(AuthEvent.SIGNED_IN, user)
        return user, session

    async def sign_out(self, db: AsyncSession, token: str) -> None:
        session = await crud.get_auth_session_by_token(db, token)
        if not session or session.revoked_at is not None:
            return
        await crud.revoke_auth_session(db, session)
        user = await crud.get_user(db, session.user_id)
        self.emit(AuthEvent.SIGNED_OUT, user)

    async def get_user(self, db: AsyncSession, token: Optional[str]) -> Optional[User]:
        """token 有效（未登出、未過期）時回傳使用者，否則 None。"""
        if not token:
            return None
        session = await crud.get_auth_session_by_token(db, token)
        if not session or session.revoked_at is not None:
            return None
        if session.expires_at <= datetime.utcnow():
            return None
        return await crud.get_user(db, session.user_id)

    # ---------- 個人資料 ----------
    async def update_profile(self, db: AsyncSession, user: User, profile: dict) -> User:
        """與既有 user_metadata 合併（只覆蓋有傳的 key）。"""
        merged = {**(user.user_metadata or {}), **profile}
        user = await crud.update_user(db, user, user_metadata=merged)
        self.emit(AuthEvent.USER_UPDATED, user)
        return user

    async def update_password(
        self,
        db: AsyncSession,
        user: User,
        current_password: str,
        new_password: str,
        keep_token: Optional[str] = None,
    ) -> User:
        """先以目前密碼驗證，再更新；其他裝置的 session 一併登出。"""
        if not self.verify_password(current_password, user.password_hash):
            raise AuthError("現在のパスワードが正しくありません", status_code=400)
        self._check_password_strength(new_password)
        user = await crud.update_user(db, user, password_hash=self.hash_password(new_password))
        revoked = await crud.revoke_user_sessions(db, user.id, keep_token=keep_token)
        if revoked:
            logger.info("user %s changed password, %d other session(s) revoked", user.id, revoked)
        self.emit(AuthEvent.USER_UPDATED, user)
        return user
