import uuid

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from app.core.deps import get_listing_request
from app.db.session import get_db
from app.models.project import Project
from app.resources.projects import PROJECT_FIELDS
from app.schemas.listing import ListQuery
from app.schemas.project import ProjectCreate, ProjectUpdate
from app.services.listing import ListingRequest, list_resource

router = APIRouter()

_NOT_NULL_FIELDS = ("name", "owner_id", "status")


def serialize_project(p: Project) -> dict:
    return {
        "id": str(p.id),
        "name": p.name,
        "description": p.description,
        "owner_id": p.owner_id,
        "status": p.status,
        "created_at": p.created_at.isoformat() if p.created_at else None,
        "updated_at": p.updated_at.isoformat() if p.updated_at else None,
    }


def _get_or_404(db: Session, id: str) -> Project:
    try:
        pk = uuid.UUID(str(id))
    except ValueError:
        raise HTTPException(status_code=404, detail="Project not found")
    p = db.get(Project, pk)
    if not p:
        raise HTTPException(status_code=404, detail="Project not found")
    return p


@router.get("")
def list_projects(listing: ListingRequest = Depends(get_listing_request), db: Session = Depends(get_db)):
    return list_resource(db, Project, PROJECT_FIELDS, listing).to_envelope(serialize_project)


@router.post("/query")
def query_projects(body: ListQuery, db: Session = Depends(get_db)):
    return list_resource(db, Project, PROJECT_FIELDS, body.to_listing()).to_envelope(serialize_project)


@router.post("", status_code=201)
def create_project(payload: ProjectCreate, db: Session = Depends(get_db)):
    p = Project(**payload.model_dump())
    db.add(p); db.commit(); db.refresh(p)
    return serialize_project(p)


@router.get("/{id}")
def get_project(id: str, db: Session = Depends(get_db)):
    return serialize_project(_get_or_404(db, id))


@router.patch("/{id}")
def update_project(id: str, payload: ProjectUpdate, db: Session = Depends(get_db)):
    p = _get_or_404(db, id)
    changes = payload.model_dump(exclude_unset=True)
    for k in _NOT_NULL_FIELDS:
        if k in changes and changes[k] is None:
            raise HTTPException(status_code=400, detail=f'Field "{k}" cannot be null')
    for k, v in changes.items():
        setattr(p, k, v)
    db.add(p); db.commit(); db.refresh(p)
    return serialize_project(p)


@router.delete("/{id}", status_code=204)
def delete_project(id: str, db: Session = Depends(get_db)):
    p = _get_or_404(db, id)
    db.delete(p); db.commit()
    return Response(status_code=204)
