"""Team roster, seeded with the default members on first read.

The roster is filled lazily (get-or-create) so a freshly created schema
never serves an empty team.
"""
from typing import List, Optional
from sqlalchemy.orm import Session

from ..db import models
from ..errors import ValidationAppError

DEFAULT_ROSTER = (
    ("1", "Jeremie", "jeremie@example.com"),
    ("2", "Lizzie", "lizzie@example.com"),
    ("3", "Lamar", "lamar@example.com"),
    ("4", "Jeff", "jeff@example.com"),
)


def ensure_default_roster(db: Session) -> None:
    if db.query(models.TeamMember).first():
        return
    for member_id, name, email in DEFAULT_ROSTER:
        db.add(models.TeamMember(id=member_id, name=name, email=email))
    db.commit()


def list_team_members(db: Session) -> List[models.TeamMember]:
    ensure_default_roster(db)
    return db.query(models.TeamMember).order_by(models.TeamMember.created_at, models.TeamMember.id).all()


def find_member(db: Session, member_id: str) -> Optional[models.TeamMember]:
    ensure_default_roster(db)
    return db.query(models.TeamMember).filter(models.TeamMember.id == member_id).first()


def create_team_member(db: Session, name: str, email: Optional[str] = None) -> models.TeamMember:
    if not (name or "").strip():
        raise ValidationAppError("MEMBER_NAME_REQUIRED", "name is required")
    ensure_default_roster(db)
    member = models.TeamMember(name=name.strip(), email=email)
    db.add(member)
    db.commit()
    db.refresh(member)
    return member
