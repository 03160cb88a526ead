# routers/v1/mpis.py
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from database import get_db
from deps.auth import get_current_principal
from deps.authz import caller_id, require_engineer, require_user
from models import Engineer
from schemas import (
    JobNumberListOut,
    JobNumberOut,
    MessageOut,
    MPICreate,
    MPINumberOut,
    MPIOut,
    MPIUpdate,
)
from services import mpi_service
from utils.code_generator import next_job_number, next_mpi_number

router = APIRouter(prefix="/mpi", tags=["mpi"])


# ---------- number allocation (must stay above /{mpi_id}) ----------
@router.get("/job-numbers", response_model=JobNumberListOut)
def my_job_numbers(claims: dict = Depends(require_engineer), db: Session = Depends(get_db)):
    return mpi_service.list_job_numbers(db, engineer_id=caller_id(claims))


@router.post("/job-numbers", response_model=JobNumberOut, dependencies=[Depends(require_user)])
def new_job_number(db: Session = Depends(get_db)):
    return {"job_number": next_job_number(db)}


@router.post("/mpi-numbers", response_model=MPINumberOut, dependencies=[Depends(require_user)])
def new_mpi_number(db: Session = Depends(get_db)):
    return {"mpi_number": next_mpi_number(db)}


# ---------- CRUD on the caller's MPIs ----------
@router.get("", response_model=List[MPIOut])
def list_my_mpis(claims: dict = Depends(require_engineer), db: Session = Depends(get_db)):
    return mpi_service.list_mpis(db, engineer_id=caller_id(claims))


@router.post("", response_model=MPIOut, status_code=status.HTTP_201_CREATED)
def create_mpi(
    payload: MPICreate,
    claims: dict = Depends(require_engineer),
    engineer: Engineer = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    return mpi_service.create_mpi(db, engineer=engineer, data=payload.model_dump())


@router.get("/{mpi_id}", response_model=MPIOut)
def get_my_mpi(mpi_id: int, claims: dict = Depends(require_engineer), db: Session = Depends(get_db)):
    return mpi_service.get_mpi(db, mpi_id=mpi_id, engineer_id=caller_id(claims))


@router.put("/{mpi_id}", response_model=MPIOut)
def update_my_mpi(
    mpi_id: int,
    payload: MPIUpdate,
    claims: dict = Depends(require_engineer),
    engineer: Engineer = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    mpi = mpi_service.get_mpi(db, mpi_id=mpi_id, engineer_id=engineer.id)
    return mpi_service.update_mpi(
        db, mpi=mpi, data=payload.model_dump(exclude_unset=True), editor_name=engineer.full_name
    )


@router.delete("/{mpi_id}", response_model=MessageOut)
def delete_my_mpi(mpi_id: int, claims: dict = Depends(require_engineer), db: Session = Depends(get_db)):
    mpi = mpi_service.get_mpi(db, mpi_id=mpi_id, engineer_id=caller_id(claims))
    mpi_service.delete_mpi(db, mpi=mpi)
    return {"message": "MPI deleted successfully"}
