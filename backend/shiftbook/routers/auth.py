"""登入與帳號：註冊、登入、登出、目前使用者、個人資料與密碼變更。"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from shiftbook.auth_session import AuthError, AuthSessionProvider
from shiftbook.database import get_db
from shiftbook.deps import get_auth_provider, get_bearer_token, get_current_user
from shiftbook.models import User
from shiftbook import schemas

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _session_response(user: User, session) -> schemas.SessionResponse:
    return schemas.SessionResponse(
        access_token=session.token,
        expires_at=session.expires_at,
        user=schemas.UserRead.model_validate(user),
    )


@router.post("/signup", response_model=schemas.SessionResponse, status_code=201, summary="アカウント作成")
async def sign_up(
    body: schemas.SignUpRequest,
    db: AsyncSession = Depends(get_db),
    auth: AuthSessionProvider = Depends(get_auth_provider),
):
    try:
        user, session = await auth.sign_up(db, body.email, body.password)
    except AuthError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return _session_response(user, session)


@router.post("/login", response_model=schemas.SessionResponse, summary="ログイン")
async def login(
    body: schemas.SignInRequest,
    db: AsyncSession = Depends(get_db),
    auth: AuthSessionProvider = Depends(get_auth_provider),
):
    """帳密驗證：成功回傳 access_token，否則 401。"""
    try:
        user, session = await auth.sign_in(db, body.email, body.password)
    except AuthError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return _session_response(user, session)


@router.post("/logout", status_code=204, summary="ログアウト")
async def logout(
    token: str = Depends(get_bearer_token),
    db: AsyncSession = Depends(get_db),
    auth: AuthSessionProvider = Depends(get_auth_provider),
):
    await auth.sign_out(db, token)


@router.get("/me", response_model=schemas.UserRead, summary="目前登入者")
async def me(user: User = Depends(get_current_user)):
    return schemas.UserRead.model_validate(user)


@router.patch("/me/profile", response_model=schemas.UserRead, summary="更新個人資料（與既有資料合併）")
async def update_profile(
    body: schemas.ProfileUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    auth: AuthSessionProvider = Depends(get_auth_provider),
):
    user = await auth.update_profile(db, user, body.model_dump(exclude_unset=True))
    return schemas.UserRead.model_validate(user)


@router.put("/me/password", status_code=204, summary="變更密碼（須驗證目前密碼）")
async def update_password(
    body: schemas.PasswordUpdate,
    token: str = Depends(get_bearer_token),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    auth: AuthSessionProvider = Depends(get_auth_provider),
):
    try:
        await auth.update_password(db, user, body.current_password, body.new_password, keep_token=token)
    except AuthError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
