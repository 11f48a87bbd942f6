"""
シフト工時與收入之純函式。

規則：
- 工時以「分」為單位計算（秒數忽略），小時 = 分 / 60。
- 收入 = 工時 × 時給，以 Decimal 精確計算後四捨五入（ROUND_HALF_UP）到整數。
- 同日內 end_time 必須晚於 start_time；不支援跨日（夜班）シフト，違反時於寫入前拋出 InvalidShiftTimeError。
- 例：時給 1000、09:00~17:30 → 510 分 → 8.5 小時 → 8500。
"""
from datetime import time
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Union

Number = Union[Decimal, int, float, str]


class InvalidShiftTimeError(ValueError):
    """結束時間未晚於開始時間（含跨日輸入）。"""


def ensure_valid_shift_times(start_time: Optional[time], end_time: Optional[time]) -> None:
    if start_time is None or end_time is None:
        raise InvalidShiftTimeError("開始時間と終了時間を入力してください")
    if _minutes_of_day(end_time) <= _minutes_of_day(start_time):
        raise InvalidShiftTimeError("終了時間は開始時間より後にしてください")


def _minutes_of_day(t: time) -> int:
    return t.hour * 60 + t.minute


def shift_duration_minutes(start_time: time, end_time: time) -> int:
    """同日內的工作分鐘數；呼叫端須先確保 end > start。"""
    return _minutes_of_day(end_time) - _minutes_of_day(start_time)


def shift_duration_hours(start_time: time, end_time: time) -> float:
    return shift_duration_minutes(start_time, end_time) / 60


def _to_decimal(v: Optional[Number]) -> Decimal:
    if v is None:
        return Decimal("0")
    if isinstance(v, Decimal):
        return v
    return Decimal(str(v))


def pay_for_minutes(minutes: int, hourly_wage: Optional[Number]) -> Decimal:
    """分鐘數 × 時給 / 60（未四捨五入）"""
    return Decimal(minutes) * _to_decimal(hourly_wage) / Decimal(60)


def round_amount(amount: Decimal) -> int:
    return int(amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def shift_pay(start_time: time, end_time: time, hourly_wage: Optional[Number]) -> int:
    """單筆シフト收入（四捨五入到整數）。"""
    return round_amount(pay_for_minutes(shift_duration_minutes(start_time, end_time), hourly_wage))


def round_hours(hours: Number, places: int = 1) -> float:
    """工時顯示用四捨五入（ROUND_HALF_UP），預設小數一位。"""
    exp = Decimal(1).scaleb(-places)
    return float(_to_decimal(hours).quantize(exp, rounding=ROUND_HALF_UP))


def minutes_to_hours(minutes: int, places: int = 1) -> float:
    """總分鐘數轉小時並四捨五入，避免浮點累加誤差。"""
    return round_hours(Decimal(minutes) / Decimal(60), places)
