"""
月份區間之純函式（月統計、月曆與匯出共用）。

- 月份一律以本地日曆判斷，不處理時區。
- 未指定年月時以今天所在月份為準。
"""
from calendar import monthrange
from datetime import date
from typing import Optional, Tuple


def first_day_of_month(year: int, month: int) -> date:
    """指定年月的第一天"""
    return date(year, month, 1)


def last_day_of_month(year: int, month: int) -> date:
    """指定年月的最後一天"""
    _, last = monthrange(year, month)
    return date(year, month, last)


def month_range(year: int, month: int) -> Tuple[date, date]:
    """(首日, 末日)，兩端皆含"""
    return first_day_of_month(year, month), last_day_of_month(year, month)


def is_in_month(d: date, year: int, month: int) -> bool:
    return d.year == year and d.month == month


def resolve_month(year: Optional[int] = None, month: Optional[int] = None, today: Optional[date] = None) -> date:
    """查詢參數 year/month 轉成參考日（該月 1 日）；缺一者以今天補。"""
    today = today or date.today()
    return date(year or today.year, month or today.month, 1)
