# routers/v1/engineers.py
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from database import get_db
from deps.auth import find_principal, get_password_hash
from deps.authz import require_admin
from errors import DuplicateKey, HasDependents
from models import MPI, Customer, Engineer
from routers.v1.auth import register
from schemas import EngineerCreate, EngineerUpdate, MessageOut, PrincipalOut
from services import registry

router = APIRouter(
    prefix="/admin/engineers",
    tags=["admin"],
    dependencies=[Depends(require_admin)],
)


@router.get("", response_model=List[PrincipalOut])
def list_engineers(db: Session = Depends(get_db)):
    return db.query(Engineer).order_by(Engineer.full_name.asc(), Engineer.id.asc()).all()


@router.get("/{engineer_id}", response_model=PrincipalOut)
def get_engineer(engineer_id: int, db: Session = Depends(get_db)):
    return registry.get_or_404(db, Engineer, engineer_id, "Engineer")


@router.post("", response_model=PrincipalOut, status_code=status.HTTP_201_CREATED)
def create_engineer(payload: EngineerCreate, db: Session = Depends(get_db)):
    return register(
        db,
        "engineer",
        {"full_name": payload.full_name, "email": payload.email, "title": payload.title},
        payload.password,
    )


@router.put("/{engineer_id}", response_model=PrincipalOut)
def update_engineer(engineer_id: int, payload: EngineerUpdate, db: Session = Depends(get_db)):
    e = registry.get_or_404(db, Engineer, engineer_id, "Engineer")
    data = payload.model_dump(exclude_unset=True)
    password = data.pop("password", None)
    registry.reject_null_required(Engineer, data)

    if data.get("email") and data["email"] != e.email:
        other = find_principal(db, "engineer", data["email"])
        if other and other.id != e.id:
            raise DuplicateKey("Engineer with this email already exists")

    for k, v in data.items():
        setattr(e, k, v)
    if password:
        e.password_hash = get_password_hash(password)
    registry.commit_or_conflict(db, "Engineer with this email already exists")
    db.refresh(e)
    return e


@router.delete("/{engineer_id}", response_model=MessageOut)
def delete_engineer(engineer_id: int, db: Session = Depends(get_db)):
    e = registry.get_or_404(db, Engineer, engineer_id, "Engineer")
    if db.query(MPI.id).filter(MPI.engineer_id == e.id).first():
        raise HasDependents("Engineer still owns MPIs; deactivate instead")
    # assembly records without an MPI go with their engineer
    db.query(Customer).filter(Customer.engineer_id == e.id).delete(synchronize_session=False)
    registry.hard_delete(db, e)
    return {"message": "Engineer deleted successfully"}
