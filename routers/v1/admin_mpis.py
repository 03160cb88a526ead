# routers/v1/admin_mpis.py
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_db
from deps.authz import require_admin
from schemas import MPIOut, MPIStatusIn, MPIUpdate
from services import mpi_service

router = APIRouter(prefix="/admin/mpis", tags=["admin"])


@router.get("", response_model=List[MPIOut], dependencies=[Depends(require_admin)])
def list_all_mpis(db: Session = Depends(get_db)):
    return mpi_service.list_mpis(db)


@router.put("", response_model=MPIOut, dependencies=[Depends(require_admin)])
def set_mpi_status(payload: MPIStatusIn, db: Session = Depends(get_db)):
    """Admins may move an MPI to any status, whatever its current one."""
    return mpi_service.set_status(db, mpi_id=payload.mpi_id, status=payload.status)


@router.get("/{mpi_id}", response_model=MPIOut, dependencies=[Depends(require_admin)])
def get_any_mpi(mpi_id: int, db: Session = Depends(get_db)):
    return mpi_service.get_mpi(db, mpi_id=mpi_id)


@router.put("/{mpi_id}", response_model=MPIOut)
def update_any_mpi(
    mpi_id: int,
    payload: MPIUpdate,
    claims: dict = Depends(require_admin),
    db: Session = Depends(get_db),
):
    mpi = mpi_service.get_mpi(db, mpi_id=mpi_id)
    return mpi_service.update_mpi(
        db,
        mpi=mpi,
        data=payload.model_dump(exclude_unset=True),
        editor_name=claims.get("fullName") or "Admin",
    )
