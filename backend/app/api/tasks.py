from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
import datetime as dt
from sqlalchemy.orm import Session
from ..db.session import get_db
from ..errors import NotFoundError
from ..services import task_service
from ..services.schedule_view import serialize_task
from ..domain.enums import TaskColor

router = APIRouter(prefix="/tasks", tags=["tasks"])

# request field -> task attribute
_FIELD_MAP = {
    "title": "title",
    "description": "description",
    "assignee": "assignee",
    "date": "start_date",
    "endDate": "end_date",
    "startTime": "start_time",
    "endTime": "end_time",
    "color": "color",
}

class TaskCreate(BaseModel):
    title: str
    description: str | None = None
    assignee: str
    date: dt.date
    endDate: dt.date | None = None
    startTime: str | None = Field(default=None, description="HH:MM, 24h")
    endTime: str | None = Field(default=None, description="HH:MM, 24h")
    color: str = Field(default=TaskColor.BLUE.value, description="Opaque color tag")

class TaskUpdateBody(BaseModel):
    title: str | None = None
    description: str | None = None
    assignee: str | None = None
    date: dt.date | None = None
    endDate: dt.date | None = None
    startTime: str | None = None
    endTime: str | None = None
    color: str | None = None

def _not_found():
    return NotFoundError("TASK_NOT_FOUND", "Task not found")

@router.get("")
def list_tasks(db: Session = Depends(get_db)):
    return {"tasks": [serialize_task(t) for t in task_service.list_tasks(db)]}

@router.post("", status_code=201)
def create_task(body: TaskCreate, db: Session = Depends(get_db)):
    task = task_service.create_task(
        db,
        title=body.title,
        assignee=body.assignee,
        start_date=body.date,
        end_date=body.endDate,
        start_time=body.startTime,
        end_time=body.endTime,
        description=body.description,
        color=body.color,
    )
    return {"task": serialize_task(task)}

@router.put("/{task_id}")
def update_task(task_id: str, body: TaskUpdateBody, db: Session = Depends(get_db)):
    # only fields present in the request are touched; explicit nulls clear them
    changes = {_FIELD_MAP[k]: v for k, v in body.model_dump(exclude_unset=True).items()}
    try:
        task = task_service.update_task(db, task_id, changes)
    except task_service.TaskNotFound:
        raise _not_found()
    return {"task": serialize_task(task)}

@router.delete("/{task_id}")
def delete_task(task_id: str, db: Session = Depends(get_db)):
    try:
        task = task_service.delete_task(db, task_id)
    except task_service.TaskNotFound:
        raise _not_found()
    return {"task": serialize_task(task)}
