"""
シフト工時與收入純函式單元測試。
覆蓋：分鐘計算、Decimal 收入四捨五入、時間區間檢查。
"""
from datetime import time
from decimal import Decimal
import pytest

from shiftbook.services.wage_calc import (
    InvalidShiftTimeError,
    ensure_valid_shift_times,
    minutes_to_hours,
    pay_for_minutes,
    round_amount,
    round_hours,
    shift_duration_hours,
    shift_duration_minutes,
    shift_pay,
)


def test_duration_and_pay_basic():
    """時給 1000、09:00~17:30 → 8.5 小時 → 8500"""
    assert shift_duration_minutes(time(9, 0), time(17, 30)) == 510
    assert shift_duration_hours(time(9, 0), time(17, 30)) == 8.5
    assert shift_pay(time(9, 0), time(17, 30), Decimal("1000")) == 8500


def test_seconds_are_ignored():
    assert shift_duration_minutes(time(9, 0, 59), time(9, 30, 1)) == 30


def test_pay_accepts_int_float_str_wage():
    assert shift_pay(time(10, 0), time(11, 0), 1200) == 1200
    assert shift_pay(time(10, 0), time(11, 0), "1050.50") == 1051
    assert shift_pay(time(10, 0), time(10, 30), 999.0) == 500  # 499.5 四捨五入


def test_pay_without_wage_is_zero():
    assert shift_pay(time(10, 0), time(12, 0), None) == 0


def test_round_amount_half_up():
    assert round_amount(Decimal("0.5")) == 1
    assert round_amount(Decimal("2.5")) == 3
    assert round_amount(Decimal("2.49")) == 2


def test_pay_for_minutes_is_exact():
    """20 分 × 1000 / 60 不經浮點"""
    assert pay_for_minutes(20, 1000) == Decimal(20000) / Decimal(60)
    assert round_amount(pay_for_minutes(20, 1000) * 3) == 1000


def test_round_hours_and_minutes_to_hours():
    assert round_hours(7.25) == 7.3
    assert round_hours(Decimal("7.245"), places=2) == 7.25
    assert minutes_to_hours(20, 2) == 0.33
    assert minutes_to_hours(0) == 0.0


def test_end_must_be_after_start():
    ensure_valid_shift_times(time(9, 0), time(9, 1))
    with pytest.raises(InvalidShiftTimeError):
        ensure_valid_shift_times(time(9, 0), time(9, 0))
    with pytest.raises(InvalidShiftTimeError):
        ensure_valid_shift_times(time(22, 0), time(6, 0))


def test_missing_time_is_invalid():
    with pytest.raises(ValueError):
        ensure_valid_shift_times(None, time(17, 0))
