from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import List, Optional, Sequence, Tuple

from ..errors import InvalidGranularityError
from .time_math import DAY_MINUTES, format_clock_12h, minutes_to_time

SUPPORTED_GRANULARITIES: Tuple[int, ...] = (30, 60, 120, 240, 360)
MIN_DATE_SPAN = 1
MAX_DATE_SPAN = 14
MONTH_GRID_DAYS = 42
BUSINESS_HOURS = (8, 18)


@dataclass(frozen=True)
class TimeSlot:
    start_minutes: int
    end_minutes: int
    day: Optional[date] = None
    is_hour_mark: bool = False
    is_major_mark: bool = False
    is_night_time: bool = False
    is_business_hour: bool = False

    @property
    def label(self) -> str:
        return minutes_to_time(self.start_minutes)

    @property
    def short_label(self) -> str:
        return f"{self.start_minutes // 60:02d}"


@dataclass(frozen=True)
class CalendarDay:
    day: date
    is_current_month: bool
    is_today: bool
    time_slots: Tuple[TimeSlot, ...] = field(default_factory=tuple)

    @property
    def day_number(self) -> int:
        return self.day.day


@dataclass(frozen=True)
class DateColumn:
    day: date

    @property
    def day_name(self) -> str:
        return self.day.strftime("%a")

    @property
    def day_month(self) -> str:
        return f"{self.day.strftime('%b')} {self.day.day}"

    @property
    def full_date(self) -> str:
        return f"{self.day.strftime('%B')} {self.day.day}, {self.day.year}"


def first_of_month(anchor: date) -> date:
    return anchor.replace(day=1)


def shift_month(anchor: date, months: int) -> date:
    """First day of the month ``months`` away from ``anchor``'s month."""
    index = anchor.year * 12 + (anchor.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def clamp_date_span(date_span_days: int) -> int:
    return max(MIN_DATE_SPAN, min(MAX_DATE_SPAN, int(date_span_days)))


def validate_granularity(granularity_minutes: int) -> int:
    if granularity_minutes not in SUPPORTED_GRANULARITIES or DAY_MINUTES % granularity_minutes:
        raise InvalidGranularityError(
            f"granularity {granularity_minutes} not in {list(SUPPORTED_GRANULARITIES)}"
        )
    return granularity_minutes


def build_time_columns(granularity_minutes: int, day: Optional[date] = None) -> List[TimeSlot]:
    validate_granularity(granularity_minutes)
    columns = []
    for offset in range(0, DAY_MINUTES, granularity_minutes):
        hour = offset // 60
        columns.append(TimeSlot(
            start_minutes=offset,
            end_minutes=offset + granularity_minutes,
            day=day,
            is_hour_mark=offset % 60 == 0,
            is_major_mark=offset % 360 == 0,
            is_night_time=hour < 6 or hour >= 22,
            is_business_hour=BUSINESS_HOURS[0] <= hour < BUSINESS_HOURS[1],
        ))
    return columns


def build_day_slots(slot_minutes: int = 30) -> List[TimeSlot]:
    """Rows of the single-day view (30 minute rows by default)."""
    if slot_minutes <= 0 or DAY_MINUTES % slot_minutes:
        raise InvalidGranularityError(f"slot size {slot_minutes} does not divide a day")
    return [
        TimeSlot(
            start_minutes=offset,
            end_minutes=offset + slot_minutes,
            is_hour_mark=offset % 60 == 0,
            is_major_mark=offset % 360 == 0,
            is_night_time=offset // 60 < 6 or offset // 60 >= 22,
            is_business_hour=BUSINESS_HOURS[0] <= offset // 60 < BUSINESS_HOURS[1],
        )
        for offset in range(0, DAY_MINUTES, slot_minutes)
    ]


def slot_display_time(slot: TimeSlot) -> str:
    return format_clock_12h(slot.label)


def build_date_window(anchor_date: date, date_span_days: int) -> List[date]:
    span = clamp_date_span(date_span_days)
    return [anchor_date + timedelta(days=i) for i in range(span)]


def build_date_columns(dates: Sequence[date]) -> List[DateColumn]:
    return [DateColumn(day=d) for d in dates]


def build_month_grid(anchor_date: date, today: Optional[date] = None,
                     granularity_minutes: Optional[int] = None) -> List[CalendarDay]:
    """Six Sunday-first weeks covering ``anchor_date``'s month.

    Leading/trailing days from the neighbouring months are included and
    flagged via ``is_current_month``.
    """
    today = today or date.today()
    first = first_of_month(anchor_date)
    # date.weekday(): Monday=0 .. Sunday=6; shift so Sunday starts the row
    lead = (first.weekday() + 1) % 7
    start = first - timedelta(days=lead)
    days = []
    for i in range(MONTH_GRID_DAYS):
        d = start + timedelta(days=i)
        slots = tuple(build_time_columns(granularity_minutes, d)) if granularity_minutes else ()
        days.append(CalendarDay(
            day=d,
            is_current_month=d.month == first.month and d.year == first.year,
            is_today=d == today,
            time_slots=slots,
        ))
    return days


def build_calendar_days(dates: Sequence[date], granularity_minutes: int,
                        today: Optional[date] = None, month_anchor: Optional[date] = None) -> List[CalendarDay]:
    """CalendarDay per timeline date, each carrying its time slots."""
    today = today or date.today()
    month_anchor = month_anchor or (dates[0] if dates else today)
    validate_granularity(granularity_minutes)
    return [
        CalendarDay(
            day=d,
            is_current_month=(d.year, d.month) == (month_anchor.year, month_anchor.month),
            is_today=d == today,
            time_slots=tuple(build_time_columns(granularity_minutes, d)),
        )
        for d in dates
    ]
