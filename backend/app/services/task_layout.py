"""Task positioning for the timeline, month and day views.

Tasks are read through attributes (``id``, ``assignee``, ``start_date``,
``end_date``, ``start_time``, ``end_time``) so ORM rows and plain objects
both work. Nothing here mutates a task.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date
from typing import Any, List, Optional, Sequence, Tuple, Union
import logging

from ..errors import InvalidFormatError
from .time_math import DAY_MINUTES, DEFAULT_AXIS_LENGTH, minutes_to_position, time_to_minutes

logger = logging.getLogger(__name__)

DEFAULT_DURATION_MIN = 60
MIN_WIDTH_FRACTION = 0.04
STACK_ROW_HEIGHT = 50
STACK_TOP_PADDING = 8
MONTH_CELL_MAX_VISIBLE = 3
DAY_SLOT_MINUTES = 30
DAY_SLOT_HEIGHT = 60
DAY_MIN_HEIGHT = 30


@dataclass(frozen=True)
class TimeRange:
    start: int
    end: int

    @property
    def duration(self) -> int:
        return self.end - self.start


@dataclass(frozen=True)
class ResolvedTask:
    task: Any
    start_date: date
    end_date: date
    timing: Optional[TimeRange] = None
    warnings: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def id(self) -> str:
        return self.task.id

    @property
    def is_timed(self) -> bool:
        return self.timing is not None

    @property
    def is_multi_day(self) -> bool:
        return self.end_date > self.start_date

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date


@dataclass(frozen=True)
class SingleDayTask(ResolvedTask):
    pass


@dataclass(frozen=True)
class MultiDayTask(ResolvedTask):
    pass


@dataclass(frozen=True)
class LayoutRect:
    left: float = 0.0
    width: float = 0.0
    top: float = 0.0
    height: float = 0.0


@dataclass(frozen=True)
class SpanRect(LayoutRect):
    start_index: int = 0
    span_days: int = 1
    clipped_start: bool = False
    clipped_end: bool = False


@dataclass(frozen=True)
class DaySummary:
    task_count: int
    assignee_count: int
    scheduled_count: int


TaskLike = Union[ResolvedTask, Any]


def _parse_timing(task) -> Tuple[Optional[TimeRange], Tuple[str, ...]]:
    start_raw = getattr(task, "start_time", None)
    end_raw = getattr(task, "end_time", None)
    if not start_raw:
        return None, ()
    try:
        start = time_to_minutes(start_raw)
        end = time_to_minutes(end_raw) if end_raw else min(DAY_MINUTES, start + DEFAULT_DURATION_MIN)
    except InvalidFormatError as e:
        return None, (f"task {task.id}: {e.message}; rendered untimed",)
    return TimeRange(start, end), ()


def resolve_task(task: TaskLike) -> ResolvedTask:
    """Resolve a raw task record into its single/multi-day, timed/untimed shape."""
    if isinstance(task, ResolvedTask):
        return task
    start_date = task.start_date
    end_date = getattr(task, "end_date", None) or start_date
    warnings: Tuple[str, ...] = ()
    if end_date < start_date:
        warnings += (f"task {task.id}: end date before start date; treated as single-day",)
        end_date = start_date
    timing, timing_warnings = _parse_timing(task)
    warnings += timing_warnings
    for w in warnings:
        logger.warning(w)
    cls = MultiDayTask if end_date > start_date else SingleDayTask
    return cls(task=task, start_date=start_date, end_date=end_date, timing=timing, warnings=warnings)


def resolve_tasks(tasks: Sequence[TaskLike]) -> List[ResolvedTask]:
    return [resolve_task(t) for t in tasks]


def collect_warnings(resolved: Sequence[ResolvedTask]) -> List[str]:
    return [w for r in resolved for w in r.warnings]


def position_single_day_task(task: TaskLike, day_axis_length: float = DEFAULT_AXIS_LENGTH,
                             minimum_width: Optional[float] = None) -> Optional[LayoutRect]:
    """Horizontal block inside one date column; None for untimed tasks."""
    resolved = resolve_task(task)
    if resolved.timing is None:
        return None
    if minimum_width is None:
        minimum_width = day_axis_length * MIN_WIDTH_FRACTION
    left = minutes_to_position(resolved.timing.start, DAY_MINUTES, day_axis_length)
    width = minutes_to_position(resolved.timing.duration, DAY_MINUTES, day_axis_length)
    return LayoutRect(left=left, width=max(minimum_width, width))


def position_multi_day_task(task: TaskLike, date_window: Sequence[date],
                            axis_length: float = DEFAULT_AXIS_LENGTH) -> Optional[SpanRect]:
    """One continuous block across the date columns the task covers.

    Both edges are clipped to the window; a task that does not touch the
    window at all yields None.
    """
    if not date_window:
        return None
    resolved = resolve_task(task)
    first, last = date_window[0], date_window[-1]
    if resolved.end_date < first or resolved.start_date > last:
        return None
    clipped_start = resolved.start_date < first
    clipped_end = resolved.end_date > last
    start_index = 0 if clipped_start else list(date_window).index(resolved.start_date)
    end_index = len(date_window) - 1 if clipped_end else list(date_window).index(resolved.end_date)
    span_days = end_index - start_index + 1
    column = axis_length / len(date_window)
    return SpanRect(
        left=start_index * column,
        width=span_days * column,
        start_index=start_index,
        span_days=span_days,
        clipped_start=clipped_start,
        clipped_end=clipped_end,
    )


def position_day_view_task(task: TaskLike, slot_minutes: int = DAY_SLOT_MINUTES,
                           slot_height: float = DAY_SLOT_HEIGHT,
                           min_height: float = DAY_MIN_HEIGHT) -> Optional[LayoutRect]:
    """Vertical block in the single-day column."""
    resolved = resolve_task(task)
    if resolved.timing is None:
        return None
    per_minute = slot_height / slot_minutes
    top = resolved.timing.start * per_minute
    height = max(min_height, resolved.timing.duration * per_minute)
    return LayoutRect(top=top, height=height)


def _start_key(item: Tuple[int, ResolvedTask]):
    index, resolved = item
    if resolved.timing is None:
        return (1, 0, index)
    return (0, resolved.timing.start, index)


def sort_by_start(tasks: Sequence[TaskLike]) -> List[ResolvedTask]:
    """Timed tasks by start minute, untimed after them; ties keep input order."""
    resolved = resolve_tasks(tasks)
    return [r for _, r in sorted(enumerate(resolved), key=_start_key)]


def stack_overlapping(tasks_for_cell: Sequence[TaskLike], row_height: float = STACK_ROW_HEIGHT,
                      top_padding: float = STACK_TOP_PADDING) -> List[Tuple[ResolvedTask, float]]:
    """Stack a cell's tasks top-to-bottom.

    No column packing: concurrent tasks never share width, each just takes
    the next row.
    """
    return [(r, top_padding + i * row_height) for i, r in enumerate(sort_by_start(tasks_for_cell))]


def visible_and_overflow(tasks_for_cell: Sequence[TaskLike],
                         max_visible: int = MONTH_CELL_MAX_VISIBLE) -> Tuple[List[ResolvedTask], List[ResolvedTask]]:
    ordered = sort_by_start(tasks_for_cell)
    max_visible = max(0, max_visible)
    return ordered[:max_visible], ordered[max_visible:]


def tasks_for_date(tasks: Sequence[TaskLike], day: date) -> List[ResolvedTask]:
    return [r for r in resolve_tasks(tasks) if r.start_date == day]


def tasks_spanning_date(tasks: Sequence[TaskLike], day: date) -> List[ResolvedTask]:
    return [r for r in resolve_tasks(tasks) if r.covers(day)]


def tasks_for_cell(tasks: Sequence[TaskLike], assignee: str, day: date) -> List[ResolvedTask]:
    return sort_by_start([r for r in resolve_tasks(tasks) if r.task.assignee == assignee and r.start_date == day])


def tasks_for_time_slot(tasks: Sequence[TaskLike], start_minutes: int, end_minutes: int) -> List[ResolvedTask]:
    return [
        r for r in resolve_tasks(tasks)
        if r.timing is not None and r.timing.start < end_minutes and r.timing.end > start_minutes
    ]


def filter_by_member(tasks: Sequence[TaskLike], member_name: Optional[str]) -> List[TaskLike]:
    # matched by display name, two members sharing a name are indistinguishable
    if not member_name:
        return list(tasks)
    return [t for t in tasks if (t.task if isinstance(t, ResolvedTask) else t).assignee == member_name]


def summarize_day(tasks: Sequence[TaskLike], day: date) -> DaySummary:
    day_tasks = tasks_for_date(tasks, day)
    return DaySummary(
        task_count=len(day_tasks),
        assignee_count=len({r.task.assignee for r in day_tasks}),
        scheduled_count=sum(
            1 for r in day_tasks if getattr(r.task, "start_time", None) and getattr(r.task, "end_time", None)
        ),
    )
