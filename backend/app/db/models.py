from sqlalchemy import Column, String, DateTime, Date
from datetime import datetime, timezone
from .session import Base
from ..domain.enums import TaskColor
import uuid


def gen_uuid():
    return str(uuid.uuid4())

class Task(Base):
    __tablename__ = "tasks"
    id = Column(String, primary_key=True, default=gen_uuid)
    title = Column(String, nullable=False)
    description = Column(String, nullable=True)
    # display name, not a team_members FK
    assignee = Column(String, nullable=False, index=True)
    start_date = Column(Date, nullable=False, index=True)
    end_date = Column(Date, nullable=True)
    start_time = Column(String, nullable=True)  # "HH:MM"
    end_time = Column(String, nullable=True)
    color = Column(String, nullable=False, default=TaskColor.BLUE.value)
    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))

class TeamMember(Base):
    __tablename__ = "team_members"
    id = Column(String, primary_key=True, default=gen_uuid)
    name = Column(String, nullable=False, index=True)
    email = Column(String, nullable=True)
    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))
