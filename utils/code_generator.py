# utils/code_generator.py
import logging

from sqlalchemy.orm import Session

from models import MPI

logger = logging.getLogger(__name__)

AUTO = "AUTO"
JOB_PREFIX = "U"
MPI_PREFIX = "MPI-"
WIDTH = 6


def next_free_code(db: Session, model, field: str, prefix: str, width: int) -> str:
    """
    Probe PREFIX000001, PREFIX000002, ... and return the first one not stored,
    e.g. U000001, MPI-000001. Nothing is reserved: two calls with no insert
    in between return the same code.
    """
    col = getattr(model, field)
    taken = {
        code for (code,) in db.query(col).filter(col.like(f"{prefix}%")).all()
    }
    n = 1
    while f"{prefix}{str(n).zfill(width)}" in taken:
        n += 1
    return f"{prefix}{str(n).zfill(width)}"


def next_job_number(db: Session) -> str:
    code = next_free_code(db, MPI, "job_number", prefix=JOB_PREFIX, width=WIDTH)
    logger.info("allocated job number %s", code)
    return code


def next_mpi_number(db: Session) -> str:
    code = next_free_code(db, MPI, "mpi_number", prefix=MPI_PREFIX, width=WIDTH)
    logger.info("allocated MPI number %s", code)
    return code


def is_auto(value) -> bool:
    return (value or "").strip().upper() == AUTO
