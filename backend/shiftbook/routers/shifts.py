"""シフト CRUD、月曆事件、一覧（工時/收入）、月統計、預估收入與 Excel 匯出。"""
import io
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from shiftbook.database import get_db
from shiftbook.deps import get_current_user
from shiftbook.models import User
from shiftbook import crud, schemas
from shiftbook.services.calendar_events import build_calendar_events
from shiftbook.services.month_period import resolve_month
from shiftbook.services.shift_export import build_shift_workbook
from shiftbook.services.shift_stats import build_shift_ledger, calculate_monthly_stats, estimate_wage
from shiftbook.services.wage_calc import InvalidShiftTimeError, ensure_valid_shift_times
from shiftbook.utils.http_headers import build_content_disposition

router = APIRouter(prefix="/api/shifts", tags=["shifts"])

SHIFT_NOT_FOUND = "シフトが見つかりません"
COMPANY_NOT_FOUND = "会社が見つかりません"

RESPONSE_404 = {
    404: {
        "description": "資源不存在",
        "content": {"application/json": {"example": {"detail": SHIFT_NOT_FOUND}}},
    }
}

RESPONSE_422 = {422: {"description": "請求參數或 body 驗證失敗（例：終了時間が開始時間以前）"}}


async def _ensure_company(db: AsyncSession, user: User, company_id: int):
    c = await crud.get_company(db, user.id, company_id)
    if not c:
        raise HTTPException(status_code=404, detail=COMPANY_NOT_FOUND)
    return c


# ---------- 衍生資料（須在 /{shift_id} 之前宣告） ----------
@router.get("/calendar", response_model=List[schemas.CalendarEvent], summary="月曆事件（未指定年月則回傳全部）")
async def get_calendar_events(
    year: Optional[int] = Query(None, description="西元年"),
    month: Optional[int] = Query(None, ge=1, le=12, description="月份"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if month is not None and year is None:
        year = resolve_month(None, month).year
    companies = await crud.list_companies(db, user.id)
    shifts = await crud.list_shifts(db, user.id, year=year, month=month)
    return build_calendar_events(shifts, companies)


@router.get("/ledger", response_model=schemas.ShiftLedger, summary="シフト一覧：每筆工時、收入與合計")
async def get_shift_ledger(
    year: Optional[int] = Query(None, description="西元年"),
    month: Optional[int] = Query(None, ge=1, le=12, description="月份"),
    company_id: Optional[int] = Query(None, description="篩選單一公司"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if month is not None and year is None:
        year = resolve_month(None, month).year
    companies = await crud.list_companies(db, user.id)
    shifts = await crud.list_shifts(db, user.id, year=year, month=month, company_id=company_id)
    return build_shift_ledger(shifts, companies)


@router.get("/stats/monthly", response_model=schemas.MonthlyShiftSummary, summary="某月總工時、總收入與公司別出勤日數/工時")
async def get_monthly_stats(
    year: Optional[int] = Query(None, description="西元年，預設今年"),
    month: Optional[int] = Query(None, ge=1, le=12, description="月份，預設本月"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    ref = resolve_month(year, month)
    companies = await crud.list_companies(db, user.id)
    shifts = await crud.list_shifts(db, user.id, year=ref.year, month=ref.month)
    stats, company_stats = calculate_monthly_stats(shifts, companies, ref)
    return schemas.MonthlyShiftSummary(year=ref.year, month=ref.month, stats=stats, companies=company_stats)


@router.post("/estimate", response_model=schemas.WageEstimate, summary="預估收入（不寫入）", responses={**RESPONSE_422})
async def estimate_shift_wage(
    data: schemas.WageEstimateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    company = await _ensure_company(db, user, data.company_id)
    return estimate_wage(data.start_time, data.end_time, company)


@router.get("/export", summary="某月シフト匯出 Excel")
async def export_month(
    year: Optional[int] = Query(None, description="西元年，預設今年"),
    month: Optional[int] = Query(None, ge=1, le=12, description="月份，預設本月"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    ref = resolve_month(year, month)
    companies = await crud.list_companies(db, user.id)
    shifts = await crud.list_shifts(db, user.id, year=ref.year, month=ref.month)
    ledger = build_shift_ledger(shifts, companies)
    stats, company_stats = calculate_monthly_stats(shifts, companies, ref)
    content = build_shift_workbook(ledger, stats, company_stats)
    ascii_name = f"shifts_{ref.year}_{ref.month:02d}.xlsx"
    unicode_name = f"シフト_{ref.year}年{ref.month}月.xlsx"
    return StreamingResponse(
        io.BytesIO(content),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": build_content_disposition(ascii_name, unicode_name)},
    )


# ---------- シフト CRUD ----------
@router.get("", response_model=List[schemas.ShiftRead], summary="シフト列表（日期新到舊）")
async def list_shifts(
    year: Optional[int] = Query(None, description="西元年"),
    month: Optional[int] = Query(None, ge=1, le=12, description="月份"),
    company_id: Optional[int] = Query(None, description="篩選單一公司"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    items = await crud.list_shifts(db, user.id, year=year, month=month, company_id=company_id)
    return [schemas.ShiftRead.model_validate(sh) for sh in items]


@router.get("/{shift_id}", response_model=schemas.ShiftRead, summary="取得單一シフト", responses=RESPONSE_404)
async def get_shift(
    shift_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    sh = await crud.get_shift(db, user.id, shift_id)
    if not sh:
        raise HTTPException(status_code=404, detail=SHIFT_NOT_FOUND)
    return schemas.ShiftRead.model_validate(sh)


@router.post("", response_model=schemas.ShiftRead, status_code=201, summary="新增シフト", responses={**RESPONSE_404, **RESPONSE_422})
async def create_shift(
    data: schemas.ShiftCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await _ensure_company(db, user, data.company_id)
    sh = await crud.create_shift(db, user.id, data)
    return schemas.ShiftRead.model_validate(sh)


@router.patch("/{shift_id}", response_model=schemas.ShiftRead, summary="更新シフト（只改有傳的欄位）", responses={**RESPONSE_404, **RESPONSE_422})
async def update_shift(
    shift_id: int,
    data: schemas.ShiftUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    sh = await crud.get_shift(db, user.id, shift_id)
    if not sh:
        raise HTTPException(status_code=404, detail=SHIFT_NOT_FOUND)
    if data.company_id is not None and data.company_id != sh.company_id:
        await _ensure_company(db, user, data.company_id)
    # 與既有資料合併後再檢查時間區間
    start_time = data.start_time if data.start_time is not None else sh.start_time
    end_time = data.end_time if data.end_time is not None else sh.end_time
    try:
        ensure_valid_shift_times(start_time, end_time)
    except InvalidShiftTimeError as e:
        raise HTTPException(status_code=422, detail=str(e))
    sh = await crud.update_shift(db, sh, data)
    return schemas.ShiftRead.model_validate(sh)


@router.delete("/{shift_id}", status_code=204, summary="刪除シフト", responses=RESPONSE_404)
async def delete_shift(
    shift_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    sh = await crud.get_shift(db, user.id, shift_id)
    if not sh:
        raise HTTPException(status_code=404, detail=SHIFT_NOT_FOUND)
    await crud.delete_shift(db, sh)
