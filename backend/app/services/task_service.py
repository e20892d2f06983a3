from sqlalchemy.orm import Session
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional
import logging

from ..db import models
from ..errors import InvalidFormatError, ValidationAppError
from ..repositories.task_repository import TaskRepository, SqlAlchemyTaskRepository
from .drag_drop import TaskUpdate
from .time_math import minutes_to_time, time_to_minutes

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("title", "description", "assignee", "start_date", "end_date", "start_time", "end_time", "color")

class TaskNotFound(Exception):
    pass

def _repo(repo: Optional[TaskRepository]) -> TaskRepository:
    return repo or SqlAlchemyTaskRepository()

def validate_task_fields(fields: Dict[str, Any]) -> None:
    """Create/update validation, same rules as the task editor dialog.

    Present times are rewritten in place to canonical ``HH:MM``.
    """
    if not (fields.get("title") or "").strip():
        raise ValidationAppError("TASK_TITLE_REQUIRED", "Task title is required")
    if not fields.get("assignee"):
        raise ValidationAppError("TASK_ASSIGNEE_REQUIRED", "Please select an assignee")
    start_date: Optional[date] = fields.get("start_date")
    if not start_date:
        raise ValidationAppError("TASK_DATE_REQUIRED", "Please select a start date")
    end_date: Optional[date] = fields.get("end_date")
    if end_date and end_date < start_date:
        raise ValidationAppError("TASK_INVALID_DATE_RANGE", "End date must be after start date")
    start_time, end_time = fields.get("start_time"), fields.get("end_time")
    try:
        start_min = time_to_minutes(start_time) if start_time else None
        end_min = time_to_minutes(end_time) if end_time else None
    except InvalidFormatError as e:
        raise ValidationAppError("TASK_INVALID_TIME", e.message)
    if start_min is not None:
        fields["start_time"] = minutes_to_time(start_min)
    if end_min is not None:
        fields["end_time"] = minutes_to_time(end_min)
    if end_min is not None and start_min is None:
        raise ValidationAppError("TASK_INVALID_TIME", "End time requires a start time")
    # multi-day tasks reuse time-of-day on every day, so ordering only binds single-day tasks
    single_day = not end_date or end_date == start_date
    if single_day and start_min is not None and end_min is not None and start_min >= end_min:
        raise ValidationAppError("TASK_INVALID_TIME", "End time must be after start time")

def list_tasks(db: Session, repo: Optional[TaskRepository] = None) -> List[models.Task]:
    return _repo(repo).list(db)

def list_tasks_in_range(db: Session, start: date, end: date, repo: Optional[TaskRepository] = None) -> List[models.Task]:
    return _repo(repo).find_in_range(db, start, end)

def get_task(db: Session, task_id: str, repo: Optional[TaskRepository] = None) -> models.Task:
    task = _repo(repo).get(db, task_id)
    if not task:
        raise TaskNotFound()
    return task

def create_task(db: Session, title: str, assignee: str, start_date: date, end_date=None,
                start_time=None, end_time=None, description=None, color=None,
                repo: Optional[TaskRepository] = None) -> models.Task:
    fields = dict(title=title, assignee=assignee, start_date=start_date, end_date=end_date,
                  start_time=start_time, end_time=end_time, description=description)
    validate_task_fields(fields)
    task = models.Task(**fields)
    if color:
        task.color = color
    task = _repo(repo).add(db, task)
    logger.info("task %s created for %s on %s", task.id, task.assignee, task.start_date)
    return task

def update_task(db: Session, task_id: str, changes: Dict[str, Any],
                repo: Optional[TaskRepository] = None) -> models.Task:
    """Merge ``changes`` into the task; keys absent from ``changes`` stay as they are."""
    repo = _repo(repo)
    task = get_task(db, task_id, repo)
    merged = {f: getattr(task, f) for f in EDITABLE_FIELDS}
    merged.update({k: v for k, v in changes.items() if k in EDITABLE_FIELDS})
    if not merged.get("color"):
        merged["color"] = task.color
    validate_task_fields(merged)
    for k, v in merged.items():
        setattr(task, k, v)
    task.updated_at = datetime.now(timezone.utc)
    return repo.save(db, task)

def apply_task_update(db: Session, update: TaskUpdate, repo: Optional[TaskRepository] = None) -> models.Task:
    """Apply a drag/drop result; a no-op update returns the task untouched."""
    if not update.changed:
        return get_task(db, update.task_id, repo)
    return update_task(db, update.task_id, update.as_fields(), repo)

def delete_task(db: Session, task_id: str, repo: Optional[TaskRepository] = None) -> models.Task:
    repo = _repo(repo)
    task = get_task(db, task_id, repo)
    repo.delete(db, task)
    logger.info("task %s deleted", task_id)
    return task
