"""シフト → 月曆事件。date 與 start/end 時間組成本地（naive）datetime；字串格式錯誤時拋 ValueError 給呼叫端。"""
from datetime import date, datetime, time
from typing import Iterable, List, Union

from shiftbook.schemas import CalendarEvent
from shiftbook.services.shift_stats import UNKNOWN_COMPANY_LABEL, color_class_for, company_color_class


def _as_date(v: Union[date, str]) -> date:
    if isinstance(v, datetime):
        return v.date()
    if isinstance(v, date):
        return v
    return date.fromisoformat(str(v).strip())


def _as_time(v: Union[time, str]) -> time:
    if isinstance(v, time):
        return v
    return time.fromisoformat(str(v).strip())


def format_time_range(start: time, end: time) -> str:
    return f"{start:%H:%M} - {end:%H:%M}"


def shift_to_event(shift, company_name: str, color_class: str = None) -> CalendarEvent:
    d = _as_date(shift.date)
    st = _as_time(shift.start_time)
    et = _as_time(shift.end_time)
    return CalendarEvent(
        id=shift.id,
        title=f"{company_name} {format_time_range(st, et)}",
        start=datetime.combine(d, st),
        end=datetime.combine(d, et),
        company_id=shift.company_id,
        color_class=color_class or company_color_class(shift.company_id),
    )


def build_calendar_events(shifts: Iterable, companies: Iterable) -> List[CalendarEvent]:
    by_id = {c.id: c for c in companies}
    events = []
    for sh in shifts:
        company = by_id.get(sh.company_id)
        if company is None:
            events.append(shift_to_event(sh, UNKNOWN_COMPANY_LABEL))
        else:
            events.append(shift_to_event(sh, company.name, color_class_for(company)))
    return events
