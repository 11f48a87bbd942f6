"""
勤務先與シフト API 測試（直接呼叫 router 函式，sqlite 記憶體 DB）。
覆蓋：公司 CRUD 與名稱衝突、擁有者隔離、シフト CRUD 與時間檢查、月統計、Excel 匯出。
"""
from datetime import date, time
from decimal import Decimal
import io
import pytest
from fastapi import HTTPException
from openpyxl import load_workbook
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from shiftbook.database import Base
from shiftbook import crud, schemas
from shiftbook.routers import companies as companies_router
from shiftbook.routers import shifts as shifts_router


@pytest.fixture
async def async_engine_and_session():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    yield engine, async_session
    await engine.dispose()


async def _user(db, email="staff@example.com"):
    return await crud.create_user(db, email, "not-a-real-hash")


async def _company(db, user, name="カフェ", wage="1000", color=None):
    return await companies_router.create_company(
        data=schemas.CompanyCreate(name=name, hourly_wage=Decimal(wage), color=color), user=user, db=db
    )


async def _shift(db, user, company_id, d, start, end, memo=None):
    return await shifts_router.create_shift(
        data=schemas.ShiftCreate(company_id=company_id, date=d, start_time=start, end_time=end, memo=memo),
        user=user,
        db=db,
    )


# ---------- 公司 ----------
@pytest.mark.asyncio
async def test_company_crud_and_name_conflict(async_engine_and_session):
    """同一使用者底下公司名稱不可重複；更新只改有傳的欄位"""
    _, async_session = async_engine_and_session
    async with async_session() as db:
        user = await _user(db)
        cafe = await _company(db, user, "カフェ", "1000", color="Blue")
        assert cafe.color == "blue"
        await _company(db, user, "書店", "1100")

        with pytest.raises(HTTPException) as exc:
            await _company(db, user, "カフェ", "1200")
        assert exc.value.status_code == 409

        with pytest.raises(HTTPException) as exc:
            await companies_router.update_company(
                company_id=cafe.id, data=schemas.CompanyUpdate(name="書店"), user=user, db=db
            )
        assert exc.value.status_code == 409

        updated = await companies_router.update_company(
            company_id=cafe.id, data=schemas.CompanyUpdate(hourly_wage=Decimal("1250")), user=user, db=db
        )
        assert updated.name == "カフェ"
        assert updated.hourly_wage == Decimal("1250")

        items = await companies_router.list_companies(user=user, db=db)
        assert [c.name for c in items] == sorted(["カフェ", "書店"])


def test_company_validation():
    """時給須大於 0、名稱必填、顏色須在調色盤內"""
    with pytest.raises(ValueError):
        schemas.CompanyCreate(name="A", hourly_wage=Decimal("0"))
    with pytest.raises(ValueError):
        schemas.CompanyCreate(name="A", hourly_wage=Decimal("-10"))
    with pytest.raises(ValueError):
        schemas.CompanyCreate(name="   ", hourly_wage=Decimal("1000"))
    with pytest.raises(ValueError):
        schemas.CompanyCreate(name="A", hourly_wage=Decimal("1000"), color="pink")
    assert schemas.CompanyCreate(name=" A ", hourly_wage=Decimal("1000"), color="").color is None


@pytest.mark.asyncio
async def test_companies_are_scoped_to_owner(async_engine_and_session):
    _, async_session = async_engine_and_session
    async with async_session() as db:
        owner = await _user(db, "owner@example.com")
        other = await _user(db, "other@example.com")
        cafe = await _company(db, owner)
        # 不同使用者可用同名公司
        await _company(db, other, "カフェ")

        with pytest.raises(HTTPException) as exc:
            await companies_router.get_company(company_id=cafe.id, user=other, db=db)
        assert exc.value.status_code == 404
        with pytest.raises(HTTPException) as exc:
            await companies_router.delete_company(company_id=cafe.id, user=other, db=db)
        assert exc.value.status_code == 404
        assert len(await companies_router.list_companies(user=other, db=db)) == 1


# ---------- シフト ----------
@pytest.mark.asyncio
async def test_shift_create_requires_own_company(async_engine_and_session):
    _, async_session = async_engine_and_session
    async with async_session() as db:
        owner = await _user(db, "owner@example.com")
        other = await _user(db, "other@example.com")
        cafe = await _company(db, owner)
        with pytest.raises(HTTPException) as exc:
            await _shift(db, other, cafe.id, date(2024, 6, 1), time(9, 0), time(17, 0))
        assert exc.value.status_code == 404


def test_shift_create_rejects_end_before_start():
    with pytest.raises(ValueError):
        schemas.ShiftCreate(company_id=1, date=date(2024, 6, 1), start_time=time(17, 0), end_time=time(9, 0))
    with pytest.raises(ValueError):
        schemas.ShiftCreate(company_id=1, date=date(2024, 6, 1), start_time=time(9, 0), end_time=time(9, 0))


@pytest.mark.asyncio
async def test_shift_list_filter_and_order(async_engine_and_session):
    """列表依日期新到舊；可依年月與公司篩選"""
    _, async_session = async_engine_and_session
    async with async_session() as db:
        user = await _user(db)
        cafe = await _company(db, user, "カフェ")
        shop = await _company(db, user, "書店")
        await _shift(db, user, cafe.id, date(2024, 6, 1), time(9, 0), time(12, 0))
        await _shift(db, user, shop.id, date(2024, 6, 20), time(13, 0), time(18, 0))
        await _shift(db, user, cafe.id, date(2024, 7, 2), time(9, 0), time(12, 0))

        all_items = await shifts_router.list_shifts(year=None, month=None, company_id=None, user=user, db=db)
        assert [s.date for s in all_items] == [date(2024, 7, 2), date(2024, 6, 20), date(2024, 6, 1)]

        june = await shifts_router.list_shifts(year=2024, month=6, company_id=None, user=user, db=db)
        assert len(june) == 2
        june_cafe = await shifts_router.list_shifts(year=2024, month=6, company_id=cafe.id, user=user, db=db)
        assert [s.date for s in june_cafe] == [date(2024, 6, 1)]


@pytest.mark.asyncio
async def test_shift_patch_merges_and_validates(async_engine_and_session):
    """PATCH 只改有傳的欄位；與既有時間合併後 end <= start 回 422"""
    _, async_session = async_engine_and_session
    async with async_session() as db:
        user = await _user(db)
        cafe = await _company(db, user)
        sh = await _shift(db, user, cafe.id, date(2024, 6, 1), time(9, 0), time(17, 0), memo="初日")

        with pytest.raises(HTTPException) as exc:
            await shifts_router.update_shift(
                shift_id=sh.id, data=schemas.ShiftUpdate(end_time=time(8, 0)), user=user, db=db
            )
        assert exc.value.status_code == 422

        with pytest.raises(HTTPException) as exc:
            await shifts_router.update_shift(
                shift_id=sh.id, data=schemas.ShiftUpdate(company_id=9999), user=user, db=db
            )
        assert exc.value.status_code == 404

        updated = await shifts_router.update_shift(
            shift_id=sh.id, data=schemas.ShiftUpdate(end_time=time(18, 0)), user=user, db=db
        )
        assert updated.start_time == time(9, 0)
        assert updated.end_time == time(18, 0)
        assert updated.date == date(2024, 6, 1)
        assert updated.memo == "初日"

        cleared = await shifts_router.update_shift(
            shift_id=sh.id, data=schemas.ShiftUpdate(memo=None), user=user, db=db
        )
        assert cleared.memo is None


@pytest.mark.asyncio
async def test_shift_delete(async_engine_and_session):
    _, async_session = async_engine_and_session
    async with async_session() as db:
        user = await _user(db)
        cafe = await _company(db, user)
        sh = await _shift(db, user, cafe.id, date(2024, 6, 1), time(9, 0), time(17, 0))
        await shifts_router.delete_shift(shift_id=sh.id, user=user, db=db)
        with pytest.raises(HTTPException) as exc:
            await shifts_router.get_shift(shift_id=sh.id, user=user, db=db)
        assert exc.value.status_code == 404


# ---------- 衍生資料 ----------
@pytest.mark.asyncio
async def test_monthly_stats_endpoint(async_engine_and_session):
    _, async_session = async_engine_and_session
    async with async_session() as db:
        user = await _user(db)
        cafe = await _company(db, user, "カフェ", "1000")
        shop = await _company(db, user, "書店", "1200")
        await _shift(db, user, cafe.id, date(2024, 6, 1), time(9, 0), time(12, 0))
        await _shift(db, user, cafe.id, date(2024, 6, 1), time(13, 0), time(17, 0))
        await _shift(db, user, cafe.id, date(2024, 5, 31), time(9, 0), time(17, 0))

        summary = await shifts_router.get_monthly_stats(year=2024, month=6, user=user, db=db)
        assert (summary.year, summary.month) == (2024, 6)
        assert summary.stats.total_hours == 7.0
        assert summary.stats.total_salary == 7000
        by_id = {cs.company_id: cs for cs in summary.companies}
        assert by_id[cafe.id].working_days == 1
        assert by_id[cafe.id].working_hours == 7.0
        assert by_id[shop.id].working_days == 0
        assert by_id[shop.id].working_hours == 0


@pytest.mark.asyncio
async def test_deleted_company_shows_as_unknown(async_engine_and_session):
    """刪除公司後シフト保留：月曆/一覧顯示 Unknown，只計入總工時"""
    _, async_session = async_engine_and_session
    async with async_session() as db:
        user = await _user(db)
        cafe = await _company(db, user, "カフェ", "1000")
        await _shift(db, user, cafe.id, date(2024, 6, 3), time(10, 0), time(12, 0))
        await companies_router.delete_company(company_id=cafe.id, user=user, db=db)

        events = await shifts_router.get_calendar_events(year=2024, month=6, user=user, db=db)
        assert events[0].title == "Unknown 10:00 - 12:00"

        ledger = await shifts_router.get_shift_ledger(year=2024, month=6, company_id=None, user=user, db=db)
        assert ledger.entries[0].company_name == "Unknown"
        assert ledger.total_pay == 0

        summary = await shifts_router.get_monthly_stats(year=2024, month=6, user=user, db=db)
        assert summary.stats.total_hours == 2.0
        assert summary.stats.total_salary == 0
        assert summary.companies == []


@pytest.mark.asyncio
async def test_estimate_endpoint(async_engine_and_session):
    _, async_session = async_engine_and_session
    async with async_session() as db:
        user = await _user(db)
        cafe = await _company(db, user, "カフェ", "1000")
        est = await shifts_router.estimate_shift_wage(
            data=schemas.WageEstimateRequest(company_id=cafe.id, start_time=time(9, 0), end_time=time(17, 30)),
            user=user,
            db=db,
        )
        assert est.hours == 8.5
        assert est.pay == 8500


@pytest.mark.asyncio
async def test_export_month_workbook(async_engine_and_session):
    _, async_session = async_engine_and_session
    async with async_session() as db:
        user = await _user(db)
        cafe = await _company(db, user, "カフェ", "1000")
        await _shift(db, user, cafe.id, date(2024, 6, 2), time(13, 0), time(15, 0), memo="午後")
        await _shift(db, user, cafe.id, date(2024, 6, 1), time(9, 0), time(12, 0))

        resp = await shifts_router.export_month(year=2024, month=6, user=user, db=db)
        assert 'filename="shifts_2024_06.xlsx"' in resp.headers["content-disposition"]
        body = b"".join([chunk async for chunk in resp.body_iterator])

    wb = load_workbook(io.BytesIO(body))
    assert wb.sheetnames == ["シフト", "集計"]
    ws = wb["シフト"]
    assert ws.cell(row=2, column=1).value == "2024-06-01"
    assert ws.cell(row=3, column=7).value == "午後"
    assert ws.cell(row=4, column=1).value == "合計"
    assert ws.cell(row=4, column=6).value == 5000
    ws_sum = wb["集計"]
    assert ws_sum.cell(row=2, column=1).value == "カフェ"
    assert ws_sum.cell(row=2, column=2).value == 2
