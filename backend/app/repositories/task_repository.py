from __future__ import annotations
from typing import Protocol, List, Optional
from datetime import date
from sqlalchemy.orm import Session

from ..db import models


class TaskRepository(Protocol):
    def list(self, db: Session) -> List[models.Task]: ...
    def get(self, db: Session, task_id: str) -> Optional[models.Task]: ...
    def add(self, db: Session, task: models.Task) -> models.Task: ...
    def save(self, db: Session, task: models.Task) -> models.Task: ...
    def delete(self, db: Session, task: models.Task) -> None: ...
    def find_in_range(self, db: Session, start: date, end: date) -> List[models.Task]: ...


class SqlAlchemyTaskRepository:
    """SQLAlchemy-backed task store; rows come back in insertion order."""

    def list(self, db: Session) -> List[models.Task]:
        return db.query(models.Task).order_by(models.Task.created_at, models.Task.id).all()

    def get(self, db: Session, task_id: str) -> Optional[models.Task]:
        return db.query(models.Task).filter(models.Task.id == task_id).first()

    def add(self, db: Session, task: models.Task) -> models.Task:
        db.add(task)
        db.commit()
        db.refresh(task)
        return task

    def save(self, db: Session, task: models.Task) -> models.Task:
        db.commit()
        db.refresh(task)
        return task

    def delete(self, db: Session, task: models.Task) -> None:
        db.delete(task)
        db.commit()

    def find_in_range(self, db: Session, start: date, end: date) -> List[models.Task]:
        """Tasks whose [start_date, end_date] touches [start, end]."""
        q = db.query(models.Task)
        q = q.filter(models.Task.start_date <= end)
        q = q.filter(
            ((models.Task.end_date.is_(None)) & (models.Task.start_date >= start))
            | (models.Task.end_date >= start)
        )
        return q.order_by(models.Task.created_at, models.Task.id).all()
