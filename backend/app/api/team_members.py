from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session
from ..db.session import get_db
from ..services import team_service

router = APIRouter(prefix="/team-members", tags=["team-members"])

class TeamMemberCreate(BaseModel):
    name: str = Field(..., min_length=1)
    email: str | None = None

def _member_out(member):
    return {"id": member.id, "name": member.name, "email": member.email, "createdAt": member.created_at}

@router.get("")
def list_team_members(db: Session = Depends(get_db)):
    return {"teamMembers": [_member_out(m) for m in team_service.list_team_members(db)]}

@router.post("", status_code=201)
def create_team_member(body: TeamMemberCreate, db: Session = Depends(get_db)):
    member = team_service.create_team_member(db, name=body.name, email=body.email)
    return {"teamMember": _member_out(member)}
