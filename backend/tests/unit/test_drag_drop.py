import pytest
from types import SimpleNamespace
from datetime import date
from app.domain.enums import DragPhase, DropView, GestureKind, Orientation
from app.errors import InvalidGestureError
from app.services.drag_drop import DragDropResolver, DropTarget, PointerPosition, TaskUpdate

MON = date(2024, 3, 4)


def make_task(task_id="t1", assignee="Jeremie", start_date=MON, end_date=None,
              start_time="09:00", end_time="10:00"):
    return SimpleNamespace(
        id=task_id, assignee=assignee, start_date=start_date, end_date=end_date,
        start_time=start_time, end_time=end_time,
    )


def pct(minutes):
    """Pointer offset on a 100-unit axis for a minute of the day."""
    return minutes / 1440 * 100


@pytest.fixture
def resolver():
    return DragDropResolver()


def test_move_snaps_to_quarter_hour_and_keeps_duration(resolver):
    state = resolver.begin_drag(make_task(), GestureKind.MOVE, PointerPosition(pct(540)))
    proposed = resolver.update_drag(state, PointerPosition(pct(587)))
    assert (proposed.start_time, proposed.end_time) == ("09:45", "10:45")
    proposed = resolver.update_drag(state, PointerPosition(pct(547)))
    assert proposed.start_time == "09:00"


def test_move_near_midnight_caps_end(resolver):
    state = resolver.begin_drag(make_task(start_time="20:00", end_time="23:00"), "move", PointerPosition(0))
    proposed = resolver.update_drag(state, PointerPosition(99.9))
    assert proposed.start == 1425
    assert proposed.end == 1439


def test_move_before_midnight_clamps_to_zero(resolver):
    state = resolver.begin_drag(make_task(), GestureKind.MOVE, PointerPosition(0))
    assert resolver.update_drag(state, PointerPosition(-20)).start == 0


def test_move_without_end_time_keeps_end_empty(resolver):
    state = resolver.begin_drag(make_task(end_time=None), GestureKind.MOVE, PointerPosition(0))
    proposed = resolver.update_drag(state, PointerPosition(pct(600)))
    assert proposed.start_time == "10:00"
    assert proposed.end_time is None


def test_vertical_axis_reads_pointer_y(resolver):
    state = resolver.begin_drag(
        make_task(), GestureKind.MOVE, PointerPosition(0, 0), axis_length=2880, orientation=Orientation.VERTICAL
    )
    proposed = resolver.update_drag(state, PointerPosition(500, 1260))
    assert (proposed.start_time, proposed.end_time) == ("10:30", "11:30")


def test_resize_end_snaps_to_five_minutes(resolver):
    state = resolver.begin_drag(make_task(), GestureKind.RESIZE_END, PointerPosition(pct(600)))
    proposed = resolver.update_drag(state, PointerPosition(pct(600 + 32)))
    assert (proposed.start_time, proposed.end_time) == ("09:00", "10:30")


def test_resize_end_keeps_minimum_segment(resolver):
    state = resolver.begin_drag(make_task(), GestureKind.RESIZE_END, PointerPosition(pct(600)))
    proposed = resolver.update_drag(state, PointerPosition(pct(100)))
    assert (proposed.start, proposed.end) == (540, 545)


def test_resize_end_clamps_to_last_minute(resolver):
    state = resolver.begin_drag(make_task(), GestureKind.RESIZE_END, PointerPosition(pct(600)))
    assert resolver.update_drag(state, PointerPosition(200)).end == 1439


def test_resize_start_cannot_pass_end(resolver):
    state = resolver.begin_drag(make_task(), GestureKind.RESIZE_START, PointerPosition(pct(540)))
    proposed = resolver.update_drag(state, PointerPosition(pct(700)))
    assert (proposed.start, proposed.end) == (595, 600)
    proposed = resolver.update_drag(state, PointerPosition(-50))
    assert proposed.start == 0


def test_resize_rejected_for_multi_day_and_untimed(resolver):
    with pytest.raises(InvalidGestureError):
        resolver.begin_drag(make_task(end_date=date(2024, 3, 6)), GestureKind.RESIZE_END, PointerPosition(0))
    with pytest.raises(InvalidGestureError):
        resolver.begin_drag(make_task(start_time=None, end_time=None), GestureKind.RESIZE_START, PointerPosition(0))


def test_non_positive_axis_rejected(resolver):
    with pytest.raises(InvalidGestureError):
        resolver.begin_drag(make_task(), GestureKind.MOVE, PointerPosition(0), axis_length=0)


def test_complete_resize_update(resolver):
    state = resolver.begin_drag(make_task(), GestureKind.RESIZE_END, PointerPosition(pct(600)))
    update = resolver.complete_drag(state, PointerPosition(pct(660)))
    assert update == TaskUpdate(task_id="t1", start_time="09:00", end_time="11:00", changed=True)


def test_grid_drop_changes_assignee_date_and_time(resolver):
    state = resolver.begin_drag(make_task(), GestureKind.MOVE, PointerPosition(0))
    target = DropTarget(view=DropView.GRID, day=date(2024, 3, 6), assignee="Lizzie")
    update = resolver.complete_drag(state, PointerPosition(pct(780)), target)
    assert update.assignee == "Lizzie"
    assert update.start_date == date(2024, 3, 6)
    assert update.end_date is None
    assert (update.start_time, update.end_time) == ("13:00", "14:00")
    assert update.changed is True


def test_month_drop_changes_date_only(resolver):
    state = resolver.begin_drag(make_task(), GestureKind.MOVE, PointerPosition(0))
    update = resolver.complete_drag(state, PointerPosition(pct(780)), DropTarget(view=DropView.MONTH, day=date(2024, 3, 9)))
    assert update.as_fields() == {"start_date": date(2024, 3, 9)}


def test_day_drop_changes_time_only(resolver):
    state = resolver.begin_drag(make_task(), GestureKind.MOVE, PointerPosition(0))
    update = resolver.complete_drag(state, PointerPosition(pct(900)))
    assert update.as_fields() == {"start_time": "15:00", "end_time": "16:00"}


def test_multi_day_move_shifts_whole_span(resolver):
    task = make_task(start_date=date(2024, 3, 4), end_date=date(2024, 3, 6), start_time=None, end_time=None)
    state = resolver.begin_drag(task, GestureKind.MOVE, PointerPosition(0))
    update = resolver.complete_drag(state, PointerPosition(50), DropTarget(view=DropView.GRID, day=date(2024, 3, 10)))
    assert update.start_date == date(2024, 3, 10)
    assert update.end_date == date(2024, 3, 12)
    assert update.start_time is None


def test_same_day_end_date_moves_with_start(resolver):
    state = resolver.begin_drag(make_task(end_date=MON), GestureKind.MOVE, PointerPosition(0))
    update = resolver.complete_drag(state, PointerPosition(pct(540)), DropTarget(view=DropView.MONTH, day=date(2024, 3, 8)))
    assert update.start_date == update.end_date == date(2024, 3, 8)


def test_drop_in_place_is_unchanged(resolver):
    state = resolver.begin_drag(make_task(), GestureKind.MOVE, PointerPosition(pct(540)))
    target = DropTarget(view=DropView.GRID, day=MON, assignee="Jeremie")
    update = resolver.complete_drag(state, PointerPosition(pct(545)), target)
    assert update.changed is False


def test_cancel_ends_gesture(resolver):
    task = make_task()
    state = resolver.cancel_drag(resolver.begin_drag(task, GestureKind.MOVE, PointerPosition(0)))
    assert state.phase == DragPhase.CANCELLED
    with pytest.raises(InvalidGestureError):
        resolver.complete_drag(state, PointerPosition(10))
    with pytest.raises(InvalidGestureError):
        resolver.update_drag(state, PointerPosition(10))
    assert (task.start_time, task.end_time) == ("09:00", "10:00")


def test_drop_in_place_with_short_hour_is_unchanged(resolver):
    state = resolver.begin_drag(make_task(start_time="9:00", end_time="10:00"), GestureKind.MOVE, PointerPosition(0))
    update = resolver.complete_drag(state, PointerPosition(pct(540)))
    assert update.changed is False
