from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session
from datetime import date
from typing import List, Literal, Optional
from ..db.session import get_db
from ..domain.enums import DropView, GestureKind, NavDirection, Orientation
from ..errors import NotFoundError, OutOfRangeError, ValidationAppError
from ..metrics import DROP_COUNT, LAYOUT_DURATION, LAYOUT_WARNINGS
from ..services import task_service, team_service
from ..services.calendar_grid import MAX_DATE_SPAN, MIN_DATE_SPAN, build_month_grid, validate_granularity
from ..services.drag_drop import DragDropResolver, DropTarget, PointerPosition
from ..services.resource_board import ResourceBoard, ResourceGroup, ResourceInstance
from ..services.schedule_view import build_day_view, build_month_view, build_timeline_view, serialize_task
from ..services.zoom_controller import ZoomController, ZoomState

router = APIRouter(prefix="/schedule", tags=["schedule"])

class Pointer(BaseModel):
    x: float
    y: float = 0.0

class DropTargetIn(BaseModel):
    view: DropView
    day: Optional[date] = Field(default=None, alias="date")
    assignee: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)

class DropRequest(BaseModel):
    taskId: str
    gesture: GestureKind = GestureKind.MOVE
    origin: Pointer = Field(default_factory=lambda: Pointer(x=0.0))
    pointer: Pointer
    axisLength: float = Field(default=100.0, gt=0)
    orientation: Orientation = Orientation.HORIZONTAL
    target: Optional[DropTargetIn] = None

class ResourceGroupIn(BaseModel):
    id: str
    name: str
    isExpanded: bool = True
    instances: List[str] = Field(default_factory=lambda: ["1"])

class ResourceRequest(BaseModel):
    groups: Optional[List[ResourceGroupIn]] = None
    action: Literal["add", "remove", "toggle", "reorder", "none"] = "none"
    groupId: Optional[str] = None
    instanceId: Optional[str] = None
    fromIndex: int = 0
    toIndex: int = 0

class ZoomRequest(BaseModel):
    granularityMinutes: int = 60
    dateSpanDays: int = 6
    anchor: Optional[date] = None
    action: Literal["timeIn", "timeOut", "dateIn", "dateOut", "reset", "prev", "next", "wheel", "none"] = "none"
    deltaY: float = 0.0
    shift: bool = False

def _controller(granularity: int, span: int, anchor: Optional[date]) -> ZoomController:
    validate_granularity(granularity)
    if not MIN_DATE_SPAN <= span <= MAX_DATE_SPAN:
        raise OutOfRangeError(f"date span {span} outside [{MIN_DATE_SPAN}, {MAX_DATE_SPAN}]")
    return ZoomController(ZoomState(granularity, span, anchor or date.today()))

def _member_name(db: Session, member_id: Optional[str]) -> Optional[str]:
    if not member_id:
        return None
    member = team_service.find_member(db, member_id)
    if not member:
        raise NotFoundError("MEMBER_NOT_FOUND", "Team member not found")
    return member.name

MAX_INSTANCES = 20

def _roster_board(db: Session, collapsed: List[str], instances: List[str]) -> ResourceBoard:
    board = ResourceBoard.from_team_members(team_service.list_team_members(db))
    try:
        for entry in instances:
            group_id, _, count = entry.partition(":")
            n = int(count)
            if not 1 <= n <= MAX_INSTANCES:
                raise ValueError(entry)
            for _ in range(n - 1):
                board.add_instance(group_id)
        for group_id in collapsed:
            board.toggle_group(group_id)
    except KeyError as e:
        raise NotFoundError("MEMBER_NOT_FOUND", f"Team member {e.args[0]} not found")
    except ValueError:
        raise ValidationAppError("INVALID_INSTANCES", f"instances must look like memberId:count, count in [1, {MAX_INSTANCES}]")
    return board

def _board_from(db: Session, groups: Optional[List[ResourceGroupIn]]) -> ResourceBoard:
    if groups is None:
        return ResourceBoard.from_team_members(team_service.list_team_members(db))
    return ResourceBoard(
        [ResourceGroup(id=g.id, name=g.name, is_expanded=g.isExpanded) for g in groups],
        [ResourceInstance(group_id=g.id, name=g.name, instance_id=i) for g in groups for i in g.instances],
    )

def _board_out(board: ResourceBoard):
    return {
        "groups": [
            {
                "id": view.group.id,
                "name": view.group.name,
                "isExpanded": view.group.is_expanded,
                "instances": [
                    {"id": i.id, "instanceId": i.instance_id, "name": i.instance_name} for i in view.instances
                ],
            }
            for view in board.grouped()
        ],
        "visibleRows": [{"id": i.id, "groupId": i.group_id, "name": i.instance_name} for i in board.visible_rows()],
    }

def _zoom_out(controller: ZoomController):
    s = controller.state
    return {
        "granularityMinutes": s.granularity_minutes,
        "dateSpanDays": s.date_span_days,
        "anchor": s.anchor_date.isoformat(),
        "revision": controller.revision,
    }

@router.get("/timeline")
def timeline(
    anchor: Optional[date] = Query(None),
    granularity: int = Query(60),
    span: int = Query(6),
    axisLength: float = Query(100.0, gt=0),
    screenWidth: Optional[int] = Query(None, ge=320),
    member: Optional[str] = Query(None),
    collapsed: List[str] = Query([], description="member ids whose rows are collapsed"),
    instances: List[str] = Query([], description="memberId:count rows per member"),
    db: Session = Depends(get_db),
):
    controller = _controller(granularity, span, anchor)
    member_name = _member_name(db, member)
    with LAYOUT_DURATION.labels(view="timeline").time():
        grid = controller.build_grid(screenWidth)
        tasks = task_service.list_tasks_in_range(db, grid.dates[0], grid.dates[-1])
        board = _roster_board(db, collapsed, instances)
        view = build_timeline_view(grid, tasks, board, axis_length=axisLength, member_name=member_name)
    LAYOUT_WARNINGS.labels(view="timeline").inc(len(view["warnings"]))
    return view

@router.get("/month")
def month(
    anchor: Optional[date] = Query(None),
    maxVisible: int = Query(3, ge=0, le=20),
    member: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    anchor = anchor or date.today()
    member_name = _member_name(db, member)
    with LAYOUT_DURATION.labels(view="month").time():
        days = build_month_grid(anchor)
        tasks = task_service.list_tasks_in_range(db, days[0].day, days[-1].day)
        view = build_month_view(anchor, tasks, max_visible=maxVisible, member_name=member_name)
    LAYOUT_WARNINGS.labels(view="month").inc(len(view["warnings"]))
    return view

@router.get("/day")
def day(
    date_: Optional[date] = Query(None, alias="date"),
    member: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    target = date_ or date.today()
    member_name = _member_name(db, member)
    with LAYOUT_DURATION.labels(view="day").time():
        tasks = task_service.list_tasks_in_range(db, target, target)
        view = build_day_view(target, tasks, member_name=member_name)
    LAYOUT_WARNINGS.labels(view="day").inc(len(view["warnings"]))
    return view

@router.post("/zoom")
def zoom(body: ZoomRequest):
    """Apply one zoom/navigation command to a client-held zoom state."""
    controller = _controller(body.granularityMinutes, body.dateSpanDays, body.anchor)
    actions = {
        "timeIn": controller.zoom_time_in,
        "timeOut": controller.zoom_time_out,
        "dateIn": controller.zoom_date_in,
        "dateOut": controller.zoom_date_out,
        "reset": controller.reset,
        "prev": lambda: controller.navigate(NavDirection.PREV),
        "next": lambda: controller.navigate(NavDirection.NEXT),
        "wheel": lambda: controller.apply_wheel(body.deltaY, body.shift),
        "none": lambda: controller.state,
    }
    actions[body.action]()
    return _zoom_out(controller)

@router.post("/drop")
def drop(body: DropRequest, db: Session = Depends(get_db)):
    try:
        task = task_service.get_task(db, body.taskId)
    except task_service.TaskNotFound:
        raise NotFoundError("TASK_NOT_FOUND", "Task not found")
    resolver = DragDropResolver()
    state = resolver.begin_drag(
        task,
        body.gesture,
        PointerPosition(body.origin.x, body.origin.y),
        axis_length=body.axisLength,
        orientation=body.orientation,
    )
    target = None
    if body.target is not None:
        target = DropTarget(view=body.target.view, day=body.target.day, assignee=body.target.assignee)
    update = resolver.complete_drag(state, PointerPosition(body.pointer.x, body.pointer.y), target)
    task = task_service.apply_task_update(db, update)
    DROP_COUNT.labels(
        gesture=body.gesture.value,
        view=target.view.value if target else DropView.DAY.value,
        changed=str(update.changed).lower(),
    ).inc()
    return {
        "update": {
            "taskId": update.task_id,
            "assignee": update.assignee,
            "date": update.start_date.isoformat() if update.start_date else None,
            "endDate": update.end_date.isoformat() if update.end_date else None,
            "startTime": update.start_time,
            "endTime": update.end_time,
            "changed": update.changed,
        },
        "task": serialize_task(task),
    }

@router.post("/resources")
def resources(body: ResourceRequest, db: Session = Depends(get_db)):
    """Apply one row-management command to a client-held resource board."""
    board = _board_from(db, body.groups)
    changed = True
    try:
        if body.action == "add":
            board.add_instance(body.groupId)
        elif body.action == "remove":
            changed = board.remove_instance(body.groupId, body.instanceId)
        elif body.action == "toggle":
            board.toggle_group(body.groupId)
        elif body.action == "reorder":
            board.reorder_groups(body.fromIndex, body.toIndex)
        else:
            changed = False
    except KeyError:
        raise NotFoundError("GROUP_NOT_FOUND", "Resource group not found")
    except IndexError:
        raise ValidationAppError("INVALID_GROUP_INDEX", "group index out of range")
    return {**_board_out(board), "changed": changed}
