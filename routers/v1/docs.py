# routers/v1/docs.py
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from database import get_db
from deps.authz import require_admin
from errors import DuplicateKey
from models import Docs
from schemas import DocsIn, DocsOut, MessageOut
from services import registry

router = APIRouter(
    prefix="/admin/docs",
    tags=["admin"],
    dependencies=[Depends(require_admin)],
)


def _check_unique(db: Session, data: dict, exclude_id: Optional[int] = None) -> None:
    q = db.query(Docs).filter(
        Docs.is_active.is_(True),
        or_(Docs.job_no == data["job_no"], Docs.mpi_no == data["mpi_no"]),
    )
    if exclude_id is not None:
        q = q.filter(Docs.id != exclude_id)
    if q.first():
        raise DuplicateKey("Docs entry with this Job No or MPI No already exists")


@router.get("", response_model=List[DocsOut])
def list_docs(db: Session = Depends(get_db)):
    return (
        db.query(Docs)
          .filter(Docs.is_active.is_(True))
          .order_by(Docs.created_at.desc(), Docs.id.desc())
          .all()
    )


@router.get("/{docs_id}", response_model=DocsOut)
def get_docs(docs_id: int, db: Session = Depends(get_db)):
    return registry.get_or_404(db, Docs, docs_id, "Docs entry")


@router.post("", response_model=DocsOut, status_code=status.HTTP_201_CREATED)
def create_docs(payload: DocsIn, db: Session = Depends(get_db)):
    data = payload.model_dump()
    _check_unique(db, data)
    d = Docs(**data, is_active=True)
    db.add(d)
    db.commit()
    db.refresh(d)
    return d


@router.put("/{docs_id}", response_model=DocsOut)
def update_docs(docs_id: int, payload: DocsIn, db: Session = Depends(get_db)):
    d = registry.get_or_404(db, Docs, docs_id, "Docs entry")
    data = payload.model_dump()
    _check_unique(db, data, exclude_id=d.id)
    for k, v in data.items():
        setattr(d, k, v)
    db.commit()
    db.refresh(d)
    return d


@router.delete("/{docs_id}", response_model=MessageOut)
def delete_docs(docs_id: int, db: Session = Depends(get_db)):
    d = registry.get_or_404(db, Docs, docs_id, "Docs entry")
    registry.soft_delete(db, d)
    return {"message": "Docs entry deleted successfully"}
