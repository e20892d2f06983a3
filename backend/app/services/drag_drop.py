"""Pointer gesture resolution (move / resize) into proposed task updates.

Gesture lifecycle: Idle -> Dragging -> {Dropped, Cancelled}. The resolver
never touches the task store; ``complete_drag`` returns a ``TaskUpdate`` that
the caller applies.
"""
from __future__ import annotations
from dataclasses import dataclass, replace
from datetime import date
from typing import Any, Optional
import logging

from ..domain.enums import DragPhase, DropView, GestureKind, Orientation
from ..errors import InvalidFormatError, InvalidGestureError
from .task_layout import ResolvedTask, TimeRange, resolve_task
from .time_math import (
    DAY_MINUTES,
    DEFAULT_AXIS_LENGTH,
    MAX_MINUTE,
    clamp_minutes,
    minutes_to_time,
    position_to_minutes,
    snap_minutes,
    time_to_minutes,
)

logger = logging.getLogger(__name__)

MOVE_SNAP_MIN = 15
RESIZE_SNAP_MIN = 5
MIN_SEGMENT_MIN = 5


def _canonical_time(value: Optional[str]) -> Optional[str]:
    if not value:
        return value
    try:
        return minutes_to_time(time_to_minutes(value))
    except InvalidFormatError:
        return value


@dataclass(frozen=True)
class PointerPosition:
    x: float
    y: float = 0.0

    def along(self, orientation: Orientation) -> float:
        return self.x if orientation == Orientation.HORIZONTAL else self.y


@dataclass(frozen=True)
class DropTarget:
    view: DropView
    day: Optional[date] = None
    assignee: Optional[str] = None


@dataclass(frozen=True)
class DragState:
    task: ResolvedTask
    kind: GestureKind
    origin: PointerPosition
    origin_range: Optional[TimeRange]
    axis_length: float = DEFAULT_AXIS_LENGTH
    orientation: Orientation = Orientation.HORIZONTAL
    phase: DragPhase = DragPhase.DRAGGING


@dataclass(frozen=True)
class ProposedRange:
    start: Optional[int]
    end: Optional[int]

    @property
    def start_time(self) -> Optional[str]:
        return None if self.start is None else minutes_to_time(self.start)

    @property
    def end_time(self) -> Optional[str]:
        return None if self.end is None else minutes_to_time(self.end)


@dataclass(frozen=True)
class TaskUpdate:
    task_id: str
    assignee: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    changed: bool = True

    def as_fields(self) -> dict:
        """Only the populated fields, keyed by task attribute name."""
        fields = {
            "assignee": self.assignee,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "start_time": self.start_time,
            "end_time": self.end_time,
        }
        return {k: v for k, v in fields.items() if v is not None}


class DragDropResolver:
    """Stateless resolver; gesture state lives in the ``DragState`` it hands out."""

    def __init__(self, move_snap: int = MOVE_SNAP_MIN, resize_snap: int = RESIZE_SNAP_MIN,
                 min_segment: int = MIN_SEGMENT_MIN):
        self.move_snap = move_snap
        self.resize_snap = resize_snap
        self.min_segment = min_segment

    def begin_drag(self, task: Any, kind: GestureKind, pointer_origin: PointerPosition,
                   axis_length: float = DEFAULT_AXIS_LENGTH,
                   orientation: Orientation = Orientation.HORIZONTAL) -> DragState:
        resolved = resolve_task(task)
        kind = GestureKind(kind)
        if kind != GestureKind.MOVE:
            if resolved.is_multi_day:
                raise InvalidGestureError("multi-day tasks can only be moved, not resized")
            if resolved.timing is None:
                raise InvalidGestureError("untimed tasks cannot be resized")
        if axis_length <= 0:
            raise InvalidGestureError("axis length must be positive")
        return DragState(
            task=resolved,
            kind=kind,
            origin=pointer_origin,
            origin_range=resolved.timing,
            axis_length=axis_length,
            orientation=orientation,
        )

    def update_drag(self, state: DragState, pointer_current: PointerPosition) -> ProposedRange:
        self._require_active(state)
        if state.kind == GestureKind.MOVE:
            return self._propose_move(state, pointer_current)
        return self._propose_resize(state, pointer_current)

    def complete_drag(self, state: DragState, pointer_final: PointerPosition,
                      target: Optional[DropTarget] = None) -> TaskUpdate:
        self._require_active(state)
        task = state.task
        if state.kind != GestureKind.MOVE:
            proposed = self._propose_resize(state, pointer_final)
            update = TaskUpdate(task_id=task.id, start_time=proposed.start_time, end_time=proposed.end_time)
            return self._finish(state, update)

        target = target or DropTarget(view=DropView.DAY)
        update = TaskUpdate(task_id=task.id)
        if target.view in (DropView.GRID, DropView.MONTH) and target.day is not None:
            update = replace(update, start_date=target.day)
            # a stored end date moves with the start
            if getattr(task.task, "end_date", None) is not None:
                update = replace(update, end_date=target.day + (task.end_date - task.start_date))
        if target.view == DropView.GRID and target.assignee:
            update = replace(update, assignee=target.assignee)
        # multi-day blocks move as a whole, time-of-day stays
        if target.view in (DropView.GRID, DropView.DAY) and not task.is_multi_day:
            proposed = self._propose_move(state, pointer_final)
            update = replace(update, start_time=proposed.start_time, end_time=proposed.end_time)
        return self._finish(state, update)

    def cancel_drag(self, state: DragState) -> DragState:
        logger.debug("drag cancelled for task %s", state.task.id)
        return replace(state, phase=DragPhase.CANCELLED)

    # --- internals ---

    def _require_active(self, state: DragState):
        if state.phase != DragPhase.DRAGGING:
            raise InvalidGestureError(f"gesture already {state.phase.value.lower()}")

    def _propose_move(self, state: DragState, pointer: PointerPosition) -> ProposedRange:
        raw = position_to_minutes(pointer.along(state.orientation), state.axis_length, DAY_MINUTES)
        start = clamp_minutes(snap_minutes(raw, self.move_snap), 0, DAY_MINUTES - self.move_snap)
        original = state.origin_range
        if original is None or getattr(state.task.task, "end_time", None) is None:
            return ProposedRange(start=start, end=None)
        end = min(MAX_MINUTE, start + max(0, original.duration))
        return ProposedRange(start=start, end=end)

    def _propose_resize(self, state: DragState, pointer: PointerPosition) -> ProposedRange:
        original = state.origin_range
        delta_px = pointer.along(state.orientation) - state.origin.along(state.orientation)
        delta = snap_minutes(position_to_minutes(delta_px, state.axis_length, DAY_MINUTES), self.resize_snap)
        start, end = original.start, original.end
        if state.kind == GestureKind.RESIZE_START:
            start = max(0, min(original.end - self.min_segment, original.start + delta))
        else:
            end = max(original.start + self.min_segment, min(MAX_MINUTE, original.end + delta))
        return ProposedRange(start=clamp_minutes(start), end=clamp_minutes(end))

    def _finish(self, state: DragState, update: TaskUpdate) -> TaskUpdate:
        raw = state.task.task
        current = {
            "assignee": raw.assignee,
            "start_date": state.task.start_date,
            "end_date": getattr(raw, "end_date", None),
            "start_time": _canonical_time(getattr(raw, "start_time", None)),
            "end_time": _canonical_time(getattr(raw, "end_time", None)),
        }
        changed = any(current.get(k) != v for k, v in update.as_fields().items())
        logger.info("drop resolved for task %s (changed=%s)", update.task_id, changed)
        return replace(update, changed=changed)
