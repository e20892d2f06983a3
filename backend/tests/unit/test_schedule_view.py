import pytest
from types import SimpleNamespace
from datetime import date
from app.services.resource_board import ResourceBoard
from app.services.schedule_view import build_day_view, build_month_view, build_timeline_view, serialize_task
from app.services.zoom_controller import ZoomController, ZoomState

MON = date(2024, 3, 4)


def make_task(task_id, assignee="Jeremie", start_date=MON, end_date=None, start_time=None, end_time=None):
    return SimpleNamespace(
        id=task_id, title=f"Task {task_id}", description=None, assignee=assignee,
        start_date=start_date, end_date=end_date, start_time=start_time, end_time=end_time,
        color="bg-blue-500",
    )


def roster():
    return ResourceBoard.from_team_members(
        [SimpleNamespace(id="1", name="Jeremie"), SimpleNamespace(id="2", name="Lizzie")]
    )


def grid(span=3, granularity=60):
    return ZoomController(ZoomState(granularity, span, MON)).build_grid(screen_width=1450)


def test_serialize_task():
    out = serialize_task(make_task("a", end_date=date(2024, 3, 5), start_time="09:00"))
    assert out["date"] == "2024-03-04"
    assert out["endDate"] == "2024-03-05"
    assert out["isMultiDay"] is True
    assert out["startTime"] == "09:00"


def test_timeline_rows_cells_and_multi_day():
    tasks = [
        make_task("a", start_time="09:00", end_time="10:30"),
        make_task("b", start_time="08:00", end_time="08:30"),
        make_task("c", assignee="Lizzie", start_date=date(2024, 3, 3), end_date=date(2024, 3, 5)),
        make_task("d", assignee="Guest"),
    ]
    view = build_timeline_view(grid(), tasks, roster())
    assert [r["assignee"] for r in view["rows"]] == ["Jeremie", "Lizzie", "Guest"]
    assert [d["date"] for d in view["dates"]] == ["2024-03-04", "2024-03-05", "2024-03-06"]
    assert len(view["timeColumns"]) == 24

    jeremie = view["rows"][0]
    monday = jeremie["cells"][0]["tasks"]
    assert [t["task"]["id"] for t in monday] == ["b", "a"]
    assert [t["top"] for t in monday] == [8, 58]
    assert monday[1]["rect"]["left"] == pytest.approx(37.5)
    assert monday[1]["displayTime"] == "9:00 AM"
    assert monday[1]["durationLabel"] == "1h 30m"

    lizzie = view["rows"][1]
    assert lizzie["cells"][0]["tasks"] == []
    assert [c["spanningCount"] for c in lizzie["cells"]] == [1, 1, 0]
    span = lizzie["multiDay"][0]["rect"]
    assert (span["startIndex"], span["spanDays"], span["clippedStart"], span["clippedEnd"]) == (0, 2, True, False)

    guest = view["rows"][2]
    assert guest["instances"] == 1
    assert guest["cells"][0]["tasks"][0]["untimed"] is True
    assert guest["cells"][0]["tasks"][0]["rect"] is None


def test_timeline_member_filter_and_warnings():
    tasks = [make_task("a", start_time="9:75"), make_task("b", assignee="Lizzie")]
    view = build_timeline_view(grid(), tasks, roster(), member_name="Jeremie")
    assert len(view["warnings"]) == 1
    lizzie = [r for r in view["rows"] if r["assignee"] == "Lizzie"][0]
    assert all(c["tasks"] == [] for c in lizzie["cells"])


def test_timeline_reports_instances_and_collapse():
    board = roster()
    board.add_instance("1")
    board.toggle_group("2")
    view = build_timeline_view(grid(), [], board)
    assert view["rows"][0]["instances"] == 2
    assert view["rows"][1]["isExpanded"] is False


def test_month_view_overflow():
    tasks = [make_task(str(i), start_time=f"{9 + i:02d}:00") for i in range(5)]
    view = build_month_view(date(2024, 3, 15), tasks, today=MON)
    assert view["month"] == "March 2024"
    assert len(view["days"]) == 42
    cell = [d for d in view["days"] if d["date"] == "2024-03-04"][0]
    assert cell["isToday"] is True
    assert [t["task"]["id"] for t in cell["tasks"]] == ["0", "1", "2"]
    assert cell["overflowCount"] == 2


def test_day_view_positions_and_summary():
    tasks = [
        make_task("late", start_time="14:00", end_time="15:00"),
        make_task("early", assignee="Lizzie", start_time="08:00", end_time="08:10"),
        make_task("todo"),
        make_task("other-day", start_date=date(2024, 3, 5), start_time="09:00"),
    ]
    view = build_day_view(MON, tasks)
    assert len(view["slots"]) == 48
    assert view["slots"][16]["displayTime"] == "8:00 AM"
    assert [t["task"]["id"] for t in view["tasks"]] == ["early", "late"]
    assert view["tasks"][0]["rect"]["top"] == pytest.approx(960.0)
    assert view["tasks"][0]["rect"]["height"] == pytest.approx(30.0)
    assert [t["task"]["id"] for t in view["untimed"]] == ["todo"]
    assert view["summary"] == {"tasks": 3, "assignees": 2, "scheduled": 2}
