"""シフト管理 API - 勤務先、シフト、月曆與收入統計"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from shiftbook.auth_session import AuthEvent, AuthSessionProvider
from shiftbook.config import settings
from shiftbook.database import init_db
from shiftbook.models import User
from shiftbook.routers import auth, companies, shifts
from shiftbook.services.session_cleanup import parse_schedule_time, purge_expired_sessions

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)
_scheduler: AsyncIOScheduler | None = None


def log_auth_event(event: AuthEvent, user: Optional[User]) -> None:
    logger.info("auth event %s (user=%s)", event.value, user.id if user else None)


async def _session_purge_job():
    try:
        await purge_expired_sessions()
    except Exception:
        logger.exception("每日 session 清理排程執行失敗")


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    subscription = app.state.auth.subscribe(log_auth_event)
    global _scheduler
    _scheduler = AsyncIOScheduler()
    hour, minute = parse_schedule_time(settings.session_purge_time)
    _scheduler.add_job(
        _session_purge_job,
        "cron",
        hour=hour,
        minute=minute,
        id="auth_session_purge",
        replace_existing=True,
    )
    _scheduler.start()
    yield
    subscription.unsubscribe()
    if _scheduler:
        _scheduler.shutdown(wait=False)


app = FastAPI(
    title=settings.app_name,
    description="Shift tracking API",
    version="1.0.0",
    lifespan=lifespan,
)
app.state.auth = AuthSessionProvider(
    session_ttl_hours=settings.session_ttl_hours,
    password_min_length=settings.password_min_length,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(companies.router)
app.include_router(shifts.router)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request, exc):
    if isinstance(exc, HTTPException):
        raise exc
    # 細節只寫 log，不回給使用者
    logger.exception("unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"detail": "予期せぬエラーが発生しました"},
    )


@app.get("/")
def home():
    return {"message": "シフト管理 API 運行中"}
