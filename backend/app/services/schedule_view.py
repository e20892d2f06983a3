"""Assemble timeline / month / day payloads from the layout engine.

Pure functions over a task snapshot; the API layer loads tasks and the
roster, calls these, and returns the result as JSON.
"""
from __future__ import annotations
from datetime import date
from typing import Any, Dict, Optional, Sequence

from .calendar_grid import build_day_slots, build_month_grid, slot_display_time
from .resource_board import ResourceBoard
from .task_layout import (
    LayoutRect,
    ResolvedTask,
    collect_warnings,
    filter_by_member,
    position_day_view_task,
    position_multi_day_task,
    position_single_day_task,
    resolve_tasks,
    stack_overlapping,
    summarize_day,
    tasks_for_date,
    tasks_spanning_date,
    visible_and_overflow,
)
from .time_math import DEFAULT_AXIS_LENGTH, duration_label, format_clock_12h
from .zoom_controller import TimelineGrid


def serialize_task(task) -> Dict[str, Any]:
    end_date = task.end_date
    return {
        "id": task.id,
        "title": task.title,
        "description": getattr(task, "description", None),
        "assignee": task.assignee,
        "date": task.start_date.isoformat(),
        "endDate": end_date.isoformat() if end_date else None,
        "startTime": task.start_time,
        "endTime": task.end_time,
        "color": getattr(task, "color", None),
        "isMultiDay": bool(end_date and end_date > task.start_date),
        "createdAt": getattr(task, "created_at", None),
        "updatedAt": getattr(task, "updated_at", None),
    }


def _rect(rect: Optional[LayoutRect]) -> Optional[Dict[str, Any]]:
    if rect is None:
        return None
    out = {"left": rect.left, "width": rect.width, "top": rect.top, "height": rect.height}
    for extra in ("start_index", "span_days", "clipped_start", "clipped_end"):
        if hasattr(rect, extra):
            key = "".join(w.capitalize() if i else w for i, w in enumerate(extra.split("_")))
            out[key] = getattr(rect, extra)
    return out


def _time_labels(resolved: ResolvedTask) -> Dict[str, str]:
    if resolved.timing is None:
        return {"displayTime": "", "durationLabel": ""}
    raw = resolved.task
    return {
        "displayTime": format_clock_12h(raw.start_time),
        "durationLabel": duration_label(resolved.timing.start, resolved.timing.end) if raw.end_time else "",
    }


def build_timeline_view(grid: TimelineGrid, tasks: Sequence[Any], board: ResourceBoard,
                        axis_length: float = DEFAULT_AXIS_LENGTH,
                        member_name: Optional[str] = None) -> Dict[str, Any]:
    resolved = resolve_tasks(filter_by_member(tasks, member_name))
    row_names = [g.name for g in board.groups]
    # tasks whose assignee matches no roster entry still get a row
    for r in resolved:
        if r.task.assignee not in row_names:
            row_names.append(r.task.assignee)
    instance_counts = {view.group.name: len(view.instances) for view in board.grouped()}
    expanded = {g.name: g.is_expanded for g in board.groups}

    rows = []
    for name in row_names:
        mine = [r for r in resolved if r.task.assignee == name]
        cells = []
        for d in grid.dates:
            single = [r for r in tasks_for_date(mine, d) if not r.is_multi_day]
            cells.append({
                "date": d.isoformat(),
                "spanningCount": len(tasks_spanning_date(mine, d)),
                "tasks": [
                    {
                        "task": serialize_task(r.task),
                        "rect": _rect(position_single_day_task(r, axis_length)),
                        "top": offset,
                        "untimed": r.timing is None,
                        **_time_labels(r),
                    }
                    for r, offset in stack_overlapping(single)
                ],
            })
        multi = []
        for r in mine:
            if not r.is_multi_day:
                continue
            rect = position_multi_day_task(r, grid.dates, axis_length)
            if rect is not None:
                multi.append({"task": serialize_task(r.task), "rect": _rect(rect)})
        rows.append({
            "assignee": name,
            "instances": instance_counts.get(name, 1),
            "isExpanded": expanded.get(name, True),
            "cells": cells,
            "multiDay": multi,
        })

    settings = grid.settings
    return {
        "anchor": grid.state.anchor_date.isoformat(),
        "granularityMinutes": grid.state.granularity_minutes,
        "dateSpanDays": grid.state.date_span_days,
        "cellWidth": settings.base_width,
        "fontSize": settings.font_size,
        "showAllLabels": settings.show_all_labels,
        "headerHeight": settings.header_height,
        "dates": [
            {"date": c.day.isoformat(), "dayName": c.day_name, "dayMonth": c.day_month, "fullDate": c.full_date}
            for c in grid.date_columns
        ],
        "timeColumns": [
            {
                "minutes": s.start_minutes,
                "label": s.label,
                "shortLabel": s.short_label,
                "isHourMark": s.is_hour_mark,
                "isMajorMark": s.is_major_mark,
                "isNightTime": s.is_night_time,
            }
            for s in grid.time_columns
        ],
        "rows": rows,
        "warnings": collect_warnings(resolved),
    }


def build_month_view(anchor: date, tasks: Sequence[Any], max_visible: int = 3,
                     today: Optional[date] = None, member_name: Optional[str] = None) -> Dict[str, Any]:
    resolved = resolve_tasks(filter_by_member(tasks, member_name))
    days = []
    for cd in build_month_grid(anchor, today=today):
        visible, overflow = visible_and_overflow(tasks_for_date(resolved, cd.day), max_visible)
        days.append({
            "date": cd.day.isoformat(),
            "dayNumber": cd.day_number,
            "isCurrentMonth": cd.is_current_month,
            "isToday": cd.is_today,
            "tasks": [{"task": serialize_task(r.task), **_time_labels(r)} for r in visible],
            "overflow": [{"task": serialize_task(r.task), **_time_labels(r)} for r in overflow],
            "overflowCount": len(overflow),
        })
    return {
        "month": anchor.strftime("%B %Y"),
        "days": days,
        "warnings": collect_warnings(resolved),
    }


def build_day_view(day: date, tasks: Sequence[Any], member_name: Optional[str] = None) -> Dict[str, Any]:
    resolved = resolve_tasks(filter_by_member(tasks, member_name))
    day_tasks = tasks_for_date(resolved, day)
    summary = summarize_day(day_tasks, day)
    positioned, untimed = [], []
    for r in day_tasks:
        rect = position_day_view_task(r)
        entry = {"task": serialize_task(r.task), "rect": _rect(rect), **_time_labels(r)}
        (positioned if rect is not None else untimed).append(entry)
    positioned.sort(key=lambda e: e["rect"]["top"])
    return {
        "date": day.isoformat(),
        "slots": [
            {
                "time": s.label,
                "displayTime": slot_display_time(s),
                "isHourMark": s.is_hour_mark,
                "isBusinessHour": s.is_business_hour,
            }
            for s in build_day_slots()
        ],
        "tasks": positioned,
        "untimed": untimed,
        "summary": {
            "tasks": summary.task_count,
            "assignees": summary.assignee_count,
            "scheduled": summary.scheduled_count,
        },
        "warnings": collect_warnings(day_tasks),
    }
