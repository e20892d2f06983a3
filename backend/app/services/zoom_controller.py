from __future__ import annotations
from dataclasses import dataclass, field, replace
from datetime import date, timedelta
from typing import List, Optional
import os

from ..domain.enums import NavDirection
from ..errors import OutOfRangeError
from .calendar_grid import (
    MAX_DATE_SPAN,
    MIN_DATE_SPAN,
    SUPPORTED_GRANULARITIES,
    DateColumn,
    TimeSlot,
    build_date_columns,
    build_date_window,
    build_time_columns,
    validate_granularity,
)

DEFAULT_GRANULARITY_MIN = 60
DEFAULT_DATE_SPAN = 6
RESOURCE_COLUMN_WIDTH = 250
DEFAULT_SCREEN_WIDTH = int(os.getenv("SCHEDULER_SCREEN_WIDTH", "1200"))


@dataclass(frozen=True)
class ZoomState:
    granularity_minutes: int = DEFAULT_GRANULARITY_MIN
    date_span_days: int = DEFAULT_DATE_SPAN
    anchor_date: date = field(default_factory=date.today)


@dataclass(frozen=True)
class ResponsiveSettings:
    interval: int
    base_width: float
    font_size: str
    show_all_labels: bool
    header_height: str


@dataclass(frozen=True)
class TimelineGrid:
    state: ZoomState
    dates: List[date]
    date_columns: List[DateColumn]
    time_columns: List[TimeSlot]
    settings: ResponsiveSettings


def responsive_settings(granularity_minutes: int, date_span_days: int,
                        screen_width: Optional[int] = None) -> ResponsiveSettings:
    """Per-date cell width and label density for a zoom level."""
    validate_granularity(granularity_minutes)
    available = (screen_width or DEFAULT_SCREEN_WIDTH) - RESOURCE_COLUMN_WIDTH
    span = max(1, date_span_days)
    if granularity_minutes == 30:
        return ResponsiveSettings(30, max(1200, available / max(1, span - 3)), "10px", True, "60px")
    if granularity_minutes == 60:
        return ResponsiveSettings(60, max(800, available / max(1, span - 1)), "11px", True, "50px")
    floor = {120: 600, 240: 400, 360: 300}[granularity_minutes]
    return ResponsiveSettings(granularity_minutes, max(floor, available / span), "12px", False, "40px")


class ZoomController:
    """Owns the ZoomState; every change bumps ``revision``.

    Grids built for an older revision are stale and must be rebuilt; there is
    no incremental update.
    """

    def __init__(self, state: Optional[ZoomState] = None):
        self.state = state or ZoomState()
        self.revision = 0

    def _set(self, **changes) -> ZoomState:
        new_state = replace(self.state, **changes)
        if new_state != self.state:
            self.state = new_state
            self.revision += 1
        return self.state

    # time axis: "in" means finer columns
    def zoom_time_in(self) -> ZoomState:
        i = SUPPORTED_GRANULARITIES.index(self.state.granularity_minutes)
        if i == 0:
            return self.state
        return self._set(granularity_minutes=SUPPORTED_GRANULARITIES[i - 1])

    def zoom_time_out(self) -> ZoomState:
        i = SUPPORTED_GRANULARITIES.index(self.state.granularity_minutes)
        if i == len(SUPPORTED_GRANULARITIES) - 1:
            return self.state
        return self._set(granularity_minutes=SUPPORTED_GRANULARITIES[i + 1])

    def zoom_date_in(self) -> ZoomState:
        return self._set(date_span_days=min(MAX_DATE_SPAN, self.state.date_span_days + 1))

    def zoom_date_out(self) -> ZoomState:
        return self._set(date_span_days=max(MIN_DATE_SPAN, self.state.date_span_days - 1))

    def reset(self) -> ZoomState:
        return self._set(granularity_minutes=DEFAULT_GRANULARITY_MIN, date_span_days=DEFAULT_DATE_SPAN)

    def set_granularity(self, granularity_minutes: int) -> ZoomState:
        return self._set(granularity_minutes=validate_granularity(granularity_minutes))

    def set_date_span(self, date_span_days: int) -> ZoomState:
        if not MIN_DATE_SPAN <= date_span_days <= MAX_DATE_SPAN:
            raise OutOfRangeError(f"date span {date_span_days} outside [{MIN_DATE_SPAN}, {MAX_DATE_SPAN}]")
        return self._set(date_span_days=date_span_days)

    def apply_wheel(self, delta_y: float, shift: bool = False) -> ZoomState:
        """Ctrl+wheel: time zoom; Ctrl+Shift+wheel: date span. Wheel up zooms in."""
        if delta_y == 0:
            return self.state
        zoom_in = delta_y < 0
        if shift:
            return self.zoom_date_in() if zoom_in else self.zoom_date_out()
        return self.zoom_time_in() if zoom_in else self.zoom_time_out()

    def navigate(self, direction: NavDirection) -> ZoomState:
        step = max(1, self.state.date_span_days // 2)
        if NavDirection(direction) == NavDirection.PREV:
            step = -step
        return self._set(anchor_date=self.state.anchor_date + timedelta(days=step))

    def go_to(self, anchor_date: date) -> ZoomState:
        return self._set(anchor_date=anchor_date)

    def build_grid(self, screen_width: Optional[int] = None) -> TimelineGrid:
        dates = build_date_window(self.state.anchor_date, self.state.date_span_days)
        return TimelineGrid(
            state=self.state,
            dates=dates,
            date_columns=build_date_columns(dates),
            time_columns=build_time_columns(self.state.granularity_minutes),
            settings=responsive_settings(self.state.granularity_minutes, self.state.date_span_days, screen_width),
        )
