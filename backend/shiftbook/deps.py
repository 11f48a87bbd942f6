"""Router 共用 Depends：認證 provider、Bearer token、目前使用者。"""
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from shiftbook.auth_session import AuthSessionProvider
from shiftbook.database import get_db
from shiftbook.models import User


def get_auth_provider(request: Request) -> AuthSessionProvider:
    return request.app.state.auth


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Authorization: Bearer <token>；scheme 不分大小寫（RFC 7235）。"""
    scheme, _, token = (authorization or "").strip().partition(" ")
    if scheme.lower() == "bearer" and token.strip():
        return token.strip()
    return None


def get_bearer_token(authorization: Optional[str] = Header(None)) -> str:
    token = extract_bearer_token(authorization)
    if not token:
        raise HTTPException(status_code=401, detail="ログインしてください")
    return token


async def get_current_user(
    token: str = Depends(get_bearer_token),
    db: AsyncSession = Depends(get_db),
    auth: AuthSessionProvider = Depends(get_auth_provider),
) -> User:
    user = await auth.get_user(db, token)
    if not user:
        raise HTTPException(status_code=401, detail="セッションが無効です。再度ログインしてください")
    return user
