import uuid

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from app.core.deps import get_listing_request
from app.db.session import get_db
from app.models.team import Team
from app.resources.teams import TEAM_FIELDS
from app.schemas.listing import ListQuery
from app.schemas.team import TeamCreate, TeamUpdate
from app.services.listing import ListingRequest, list_resource

router = APIRouter()

_NOT_NULL_FIELDS = ("name", "status", "members_count")


def serialize_team(t: Team) -> dict:
    return {
        "id": str(t.id),
        "name": t.name,
        "description": t.description,
        "status": t.status,
        "members_count": t.members_count,
        "created_at": t.created_at.isoformat() if t.created_at else None,
        "updated_at": t.updated_at.isoformat() if t.updated_at else None,
    }


def _get_or_404(db: Session, id: str) -> Team:
    try:
        pk = uuid.UUID(str(id))
    except ValueError:
        raise HTTPException(status_code=404, detail="Team not found")
    t = db.get(Team, pk)
    if not t:
        raise HTTPException(status_code=404, detail="Team not found")
    return t


@router.get("")
def list_teams(listing: ListingRequest = Depends(get_listing_request), db: Session = Depends(get_db)):
    return list_resource(db, Team, TEAM_FIELDS, listing).to_envelope(serialize_team)


@router.post("/query")
def query_teams(body: ListQuery, db: Session = Depends(get_db)):
    return list_resource(db, Team, TEAM_FIELDS, body.to_listing()).to_envelope(serialize_team)


@router.post("", status_code=201)
def create_team(payload: TeamCreate, db: Session = Depends(get_db)):
    t = Team(**payload.model_dump())
    db.add(t); db.commit(); db.refresh(t)
    return serialize_team(t)


@router.get("/{id}")
def get_team(id: str, db: Session = Depends(get_db)):
    return serialize_team(_get_or_404(db, id))


@router.patch("/{id}")
def update_team(id: str, payload: TeamUpdate, db: Session = Depends(get_db)):
    t = _get_or_404(db, id)
    changes = payload.model_dump(exclude_unset=True)
    for k in _NOT_NULL_FIELDS:
        if k in changes and changes[k] is None:
            raise HTTPException(status_code=400, detail=f'Field "{k}" cannot be null')
    for k, v in changes.items():
        setattr(t, k, v)
    db.add(t); db.commit(); db.refresh(t)
    return serialize_team(t)


@router.delete("/{id}", status_code=204)
def delete_team(id: str, db: Session = Depends(get_db)):
    t = _get_or_404(db, id)
    db.delete(t); db.commit()
    return Response(status_code=204)
