"""
シフト月統計與一覧（純函式，不碰 DB）。

- 月統計只取 date 與參考日同年同月的シフト（本地日曆，不處理時區）。
- 每筆シフト都計入總工時；公司存在且時給 > 0 才計入總收入。
- 公司別：出勤日數為相異日期數（同公司同日兩筆只算 1 天），工時加總。
- 公司清單內每家公司都會出現在結果中（無シフト則為 0），順序同傳入清單。
- 找不到公司的シフト：計入總工時，不計入收入與任何公司別統計。
"""
import logging
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Set, Tuple

from shiftbook.models import COMPANY_COLORS
from shiftbook.schemas import (
    CompanyStats, MonthlyStats, ShiftLedger, ShiftLedgerEntry, WageEstimate,
)
from shiftbook.services.month_period import is_in_month
from shiftbook.services.wage_calc import (
    minutes_to_hours, pay_for_minutes, round_amount, shift_duration_minutes,
)

logger = logging.getLogger(__name__)

UNKNOWN_COMPANY_LABEL = "Unknown"

# 調色盤 key → 前端 class（順序即雜湊索引）
COLOR_CLASSES: Dict[str, str] = {
    "emerald": "bg-emerald-200 text-emerald-800",
    "red": "bg-red-200 text-red-800",
    "blue": "bg-blue-200 text-blue-800",
    "orange": "bg-orange-200 text-orange-800",
    "purple": "bg-purple-200 text-purple-800",
    "yellow": "bg-yellow-200 text-yellow-800",
}


def company_color_key(company_id) -> str:
    """company id 各字元碼總和 mod 調色盤大小；同一 id 永遠同色。"""
    total = sum(ord(ch) for ch in str(company_id))
    return COMPANY_COLORS[total % len(COMPANY_COLORS)]


def company_color_class(company_id) -> str:
    return COLOR_CLASSES[company_color_key(company_id)]


def color_class_for(company) -> str:
    """公司有指定 color 時優先使用，否則依 id 雜湊。"""
    key = getattr(company, "color", None)
    if key in COLOR_CLASSES:
        return COLOR_CLASSES[key]
    return company_color_class(company.id)


def _has_positive_wage(company) -> bool:
    wage = getattr(company, "hourly_wage", None)
    return wage is not None and Decimal(str(wage)) > 0


def calculate_monthly_stats(
    shifts: Iterable,
    companies: Iterable,
    ref: date,
) -> Tuple[MonthlyStats, List[CompanyStats]]:
    companies = list(companies)
    by_id = {c.id: c for c in companies}
    days: Dict[int, Set[date]] = {c.id: set() for c in companies}
    minutes_by_company: Dict[int, int] = {c.id: 0 for c in companies}

    total_minutes = 0
    total_salary = Decimal("0")
    unknown = 0
    for sh in shifts:
        if not is_in_month(sh.date, ref.year, ref.month):
            continue
        minutes = shift_duration_minutes(sh.start_time, sh.end_time)
        total_minutes += minutes
        company = by_id.get(sh.company_id)
        if company is None:
            unknown += 1
            continue
        if _has_positive_wage(company):
            total_salary += pay_for_minutes(minutes, company.hourly_wage)
        days[company.id].add(sh.date)
        minutes_by_company[company.id] += minutes

    if unknown:
        logger.debug("monthly stats %04d-%02d: %d shift(s) with unknown company", ref.year, ref.month, unknown)

    stats = MonthlyStats(
        total_hours=minutes_to_hours(total_minutes, 1),
        total_salary=round_amount(total_salary),
    )
    company_stats = [
        CompanyStats(
            company_id=c.id,
            name=c.name,
            working_days=len(days[c.id]),
            working_hours=minutes_to_hours(minutes_by_company[c.id], 1),
            color_class=color_class_for(c),
        )
        for c in companies
    ]
    return stats, company_stats


def build_shift_ledger(shifts: Iterable, companies: Iterable) -> ShiftLedger:
    """シフト一覧：每列工時（小數兩位）與收入；找不到公司時名稱為 Unknown、收入 0。"""
    by_id = {c.id: c for c in companies}
    entries: List[ShiftLedgerEntry] = []
    total_minutes = 0
    total_pay = Decimal("0")
    for sh in shifts:
        minutes = shift_duration_minutes(sh.start_time, sh.end_time)
        company = by_id.get(sh.company_id)
        amount = pay_for_minutes(minutes, company.hourly_wage) if company is not None else Decimal("0")
        total_minutes += minutes
        total_pay += amount
        entries.append(
            ShiftLedgerEntry(
                id=sh.id,
                date=sh.date,
                company_id=sh.company_id,
                company_name=company.name if company is not None else UNKNOWN_COMPANY_LABEL,
                start_time=sh.start_time,
                end_time=sh.end_time,
                hours=minutes_to_hours(minutes, 2),
                pay=round_amount(amount),
                memo=sh.memo,
            )
        )
    return ShiftLedger(
        entries=entries,
        total_hours=minutes_to_hours(total_minutes, 2),
        total_pay=round_amount(total_pay),
    )


def estimate_wage(start_time, end_time, company: Optional[object]) -> WageEstimate:
    """シフト入力畫面的預估收入；公司不存在或時給為 0 時收入為 0。"""
    minutes = shift_duration_minutes(start_time, end_time)
    pay = 0
    if company is not None and _has_positive_wage(company):
        pay = round_amount(pay_for_minutes(minutes, company.hourly_wage))
    return WageEstimate(hours=minutes_to_hours(minutes, 2), pay=pay)
