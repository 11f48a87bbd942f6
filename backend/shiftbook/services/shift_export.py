"""某月シフト一覧與公司別統計匯出 Excel（欄位與 /api/shifts/ledger、/stats/monthly 一致）。"""
import io
from typing import List

from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, Border, Side

from shiftbook.schemas import CompanyStats, MonthlyStats, ShiftLedger

LEDGER_HEADERS = ["日付", "会社", "開始", "終了", "時間", "給与", "メモ"]
SUMMARY_HEADERS = ["会社", "勤務日数", "勤務時間"]


def _write_headers(ws, headers: List[str], row_idx: int = 1) -> None:
    thin = Side(style="thin")
    header_font = Font(bold=True)
    header_alignment = Alignment(horizontal="center", vertical="center", wrap_text=True)
    for col, h in enumerate(headers, start=1):
        cell = ws.cell(row=row_idx, column=col, value=h)
        cell.font = header_font
        cell.alignment = header_alignment
        cell.border = Border(top=thin, bottom=thin, left=thin, right=thin)


def _apply_default_width(ws, columns: int, width: int = 14) -> None:
    for col in range(1, columns + 1):
        ws.column_dimensions[ws.cell(row=1, column=col).column_letter].width = width


def build_shift_workbook(
    ledger: ShiftLedger,
    stats: MonthlyStats,
    company_stats: List[CompanyStats],
    sheet_name: str = "シフト",
) -> bytes:
    """
    工作表一：シフト一覧（每列一筆，末列合計）。
    工作表二：公司別統計與當月總計。
    """
    wb = Workbook()
    ws = wb.active
    ws.title = sheet_name[:31]  # Excel 表單名稱長度限制

    _write_headers(ws, LEDGER_HEADERS)
    row_idx = 2
    # 匯出依日期由舊到新
    for e in sorted(ledger.entries, key=lambda x: (x.date, x.start_time, x.id)):
        ws.cell(row=row_idx, column=1, value=e.date.isoformat())
        ws.cell(row=row_idx, column=2, value=e.company_name)
        ws.cell(row=row_idx, column=3, value=e.start_time.strftime("%H:%M"))
        ws.cell(row=row_idx, column=4, value=e.end_time.strftime("%H:%M"))
        ws.cell(row=row_idx, column=5, value=e.hours)
        ws.cell(row=row_idx, column=6, value=e.pay)
        ws.cell(row=row_idx, column=7, value=e.memo or "")
        row_idx += 1
    ws.cell(row=row_idx, column=1, value="合計").font = Font(bold=True)
    ws.cell(row=row_idx, column=5, value=ledger.total_hours)
    ws.cell(row=row_idx, column=6, value=ledger.total_pay)
    _apply_default_width(ws, len(LEDGER_HEADERS))

    ws_sum = wb.create_sheet("集計")
    _write_headers(ws_sum, SUMMARY_HEADERS)
    row_idx = 2
    for cs in company_stats:
        ws_sum.cell(row=row_idx, column=1, value=cs.name)
        ws_sum.cell(row=row_idx, column=2, value=cs.working_days)
        ws_sum.cell(row=row_idx, column=3, value=cs.working_hours)
        row_idx += 1
    ws_sum.cell(row=row_idx + 1, column=1, value="総勤務時間").font = Font(bold=True)
    ws_sum.cell(row=row_idx + 1, column=3, value=stats.total_hours)
    ws_sum.cell(row=row_idx + 2, column=1, value="総給与").font = Font(bold=True)
    ws_sum.cell(row=row_idx + 2, column=3, value=stats.total_salary)
    _apply_default_width(ws_sum, len(SUMMARY_HEADERS))

    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()
