# services/mpi_service.py
"""
MPI aggregate: the MPI row, its sections and version history, plus the
derived Docs and Customer tracking records.

Every write here ends in exactly one commit, so the MPI and its derived
records are stored or rolled back together.
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from errors import AppError, DuplicateKey, NotFound, ValidationFailed
from models import (
    MPI,
    MPI_STATUSES,
    Customer,
    CustomerCompany,
    Docs,
    Engineer,
    Form,
    MPISection,
    MPIVersion,
)
from services.registry import commit_or_conflict, reject_null_required
from utils.code_generator import is_auto, next_job_number, next_mpi_number

logger = logging.getLogger(__name__)

MAX_ALLOCATION_ATTEMPTS = 3
DEFAULT_VERSION = "Rev A"

DEFAULT_SECTIONS = [
    ("applicable-docs", "Applicable Documents"),
    ("general-instructions", "General Instructions"),
    ("misc", "Misc"),
    ("kitting", "Kitting"),
    ("kit-release", "Kit Release"),
    ("smt-prep", "SMT Preparation and Planning"),
    ("smt-paste", "SMT Paste Print"),
    ("smt-special", "SMT Special Instructions"),
    ("smt-reflow", "SMT Reflow"),
    ("smt-first-article", "SMT First Article Approval"),
    ("smt-production", "SMT Production Quantity Approval"),
    ("smt-additional", "SMT Additional Instructions"),
    ("wash-1", "Wash"),
    ("second-operations", "2nd Operations"),
    ("wash-2", "Wash"),
    ("test-section", "Test Section"),
    ("aoi", "AOI"),
    ("final-qc", "Final QC, Ship and Delivery"),
    ("packaging", "Packaging"),
    ("improvement", "Improvement Section"),
]


def default_sections() -> List[MPISection]:
    return [
        MPISection(section_key=key, title=title, content="", order=i, is_collapsed=False, images=[])
        for i, (key, title) in enumerate(DEFAULT_SECTIONS)
    ]


def _now():
    return datetime.now(timezone.utc)


# ---------- lookups ----------
def list_mpis(db: Session, *, engineer_id: Optional[int] = None) -> List[MPI]:
    q = db.query(MPI).filter(MPI.is_active.is_(True))
    if engineer_id is not None:
        q = q.filter(MPI.engineer_id == engineer_id)
    return q.order_by(MPI.created_at.desc(), MPI.id.desc()).all()


def get_mpi(db: Session, *, mpi_id: int, engineer_id: Optional[int] = None) -> MPI:
    """Active MPI by id; with engineer_id, someone else's MPI is reported as missing."""
    q = db.query(MPI).filter(MPI.id == mpi_id, MPI.is_active.is_(True))
    if engineer_id is not None:
        q = q.filter(MPI.engineer_id == engineer_id)
    mpi = q.first()
    if not mpi:
        raise NotFound("MPI not found")
    return mpi


def list_job_numbers(db: Session, *, engineer_id: int) -> dict:
    rows = (
        db.query(MPI.job_number, MPI.old_job_number)
          .filter(MPI.engineer_id == engineer_id, MPI.is_active.is_(True))
          .order_by(MPI.created_at.desc(), MPI.id.desc())
          .all()
    )
    old = []
    for _, o in rows:
        if o and o not in old:
            old.append(o)
    return {"job_numbers": [j for j, _ in rows if j], "old_job_numbers": old}


def _company_or_404(db: Session, company_id: int) -> CustomerCompany:
    company = db.get(CustomerCompany, company_id)
    if not company:
        raise NotFound("Customer company not found")
    return company


def _form_or_404(db: Session, form_id: Optional[int]) -> Optional[Form]:
    if form_id is None:
        return None
    form = db.get(Form, form_id)
    if not form:
        raise NotFound("Form not found")
    return form


def _taken(db: Session, column, value: str, exclude_id: Optional[int] = None) -> bool:
    q = db.query(MPI.id).filter(column == value)
    if exclude_id is not None:
        q = q.filter(MPI.id != exclude_id)
    return q.first() is not None


# ---------- derived records ----------
def _customer_comment(mpi: MPI) -> str:
    return f"MPI: {mpi.mpi_number} - Job: {mpi.job_number}"


def sync_derived(db: Session, mpi: MPI) -> None:
    """Copy the MPI's current values onto its linked Docs and Customer rows."""
    form = _form_or_404(db, mpi.form_id)
    if mpi.docs is not None:
        d = mpi.docs
        d.job_no = mpi.job_number
        d.old_job_no = mpi.old_job_number
        d.mpi_no = mpi.mpi_number
        d.mpi_rev = mpi.mpi_version
        d.form_id = form.form_id if form else None
        d.form_rev = mpi.form_rev or (form.form_rev if form else None)

    if mpi.customer is not None:
        c = mpi.customer
        company = _company_or_404(db, mpi.customer_company_id)
        c.customer_company_id = company.id
        c.customer_name = company.company_name
        c.assembly_name = mpi.customer_assembly_name
        c.assembly_rev = mpi.assembly_rev
        c.drawing_name = mpi.drawing_name
        c.drawing_rev = mpi.drawing_rev
        c.assembly_quantity = mpi.assembly_quantity
        c.kit_received_date = mpi.kit_received_date
        c.comments = _customer_comment(mpi)


# ---------- create ----------
def _build_mpi(
    db: Session,
    *,
    engineer: Engineer,
    company: CustomerCompany,
    form: Optional[Form],
    data: dict,
    job_number: str,
    mpi_number: str,
) -> MPI:
    mpi = MPI(
        job_number=job_number,
        old_job_number=data.get("old_job_number"),
        mpi_number=mpi_number,
        mpi_version=data.get("mpi_version"),
        engineer_id=engineer.id,
        customer_company_id=company.id,
        form_id=form.id if form else None,
        form_rev=data.get("form_rev") or (form.form_rev if form else None),
        customer_assembly_name=data["customer_assembly_name"],
        assembly_rev=data["assembly_rev"],
        drawing_name=data["drawing_name"],
        drawing_rev=data["drawing_rev"],
        assembly_quantity=data["assembly_quantity"],
        kit_received_date=data["kit_received_date"],
        date_released=data.get("date_released"),
        pages=data.get("pages"),
        status="draft",
        is_active=True,
    )
    mpi.sections = default_sections()
    mpi.version_history = [
        MPIVersion(
            version=mpi.mpi_version or DEFAULT_VERSION,
            date=_now(),
            description="Initial creation",
            engineer_name=engineer.full_name,
        )
    ]
    mpi.docs = Docs(
        job_no=mpi.job_number,
        old_job_no=mpi.old_job_number,
        mpi_no=mpi.mpi_number,
        mpi_rev=mpi.mpi_version,
        form_id=form.form_id if form else None,
        form_rev=mpi.form_rev,
        is_active=True,
    )

    # each MPI owns its Customer row
    mpi.customer = Customer(
        customer_company_id=company.id,
        customer_name=company.company_name,
        assembly_name=mpi.customer_assembly_name,
        assembly_rev=mpi.assembly_rev,
        drawing_name=mpi.drawing_name,
        drawing_rev=mpi.drawing_rev,
        assembly_quantity=mpi.assembly_quantity,
        kit_received_date=mpi.kit_received_date,
        comments=_customer_comment(mpi),
        engineer_id=engineer.id,
        is_active=True,
    )
    return mpi


def create_mpi(db: Session, *, engineer: Engineer, data: dict) -> MPI:
    """
    Store a new MPI with the default sections, one version entry and its
    derived Docs / Customer records.

    "AUTO" for job_number or mpi_number allocates the next free number;
    a lost race on an allocated number is retried, an explicit number that
    collides is a DuplicateKey.
    """
    for f in ("customer_company_id", "job_number", "mpi_number"):
        if data.get(f) in (None, ""):
            raise ValidationFailed(f"{f} is required")

    company = _company_or_404(db, data["customer_company_id"])
    form = _form_or_404(db, data.get("form_id"))

    auto_job = is_auto(data["job_number"])
    auto_mpi = is_auto(data["mpi_number"])
    if not auto_job and _taken(db, MPI.job_number, data["job_number"]):
        raise DuplicateKey("Job number already exists")
    if not auto_mpi and _taken(db, MPI.mpi_number, data["mpi_number"]):
        raise DuplicateKey("MPI number already exists")

    for attempt in range(MAX_ALLOCATION_ATTEMPTS):
        job_number = next_job_number(db) if auto_job else data["job_number"]
        mpi_number = next_mpi_number(db) if auto_mpi else data["mpi_number"]
        mpi = _build_mpi(
            db,
            engineer=engineer,
            company=company,
            form=form,
            data=data,
            job_number=job_number,
            mpi_number=mpi_number,
        )
        db.add(mpi)
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            logger.warning("MPI insert conflict (attempt %d): %s", attempt + 1, e.orig)
            if not (auto_job or auto_mpi):
                raise DuplicateKey("Job number or MPI number already exists")
            continue
        db.refresh(mpi)
        logger.info(
            "MPI %s created (job %s) by engineer %s", mpi.mpi_number, mpi.job_number, engineer.id
        )
        return mpi

    raise AppError("Failed to generate a unique job / MPI number")


# ---------- update ----------
def _replace_sections(mpi: MPI, sections: List[dict]) -> None:
    mpi.sections = [
        MPISection(
            section_key=s["id"],
            title=s["title"],
            content=s.get("content") or "",
            order=s["order"],
            is_collapsed=bool(s.get("is_collapsed")),
            images=list(s.get("images") or []),
            document_id=s.get("document_id"),
        )
        for s in sections
    ]


def update_mpi(db: Session, *, mpi: MPI, data: dict, editor_name: str) -> MPI:
    """Partial update: only keys present in data change; sections are replaced whole."""
    sections = data.pop("sections", None)
    reject_null_required(MPI, data)

    if "customer_company_id" in data:
        _company_or_404(db, data["customer_company_id"])
    if "form_id" in data and data["form_id"] != mpi.form_id and "form_rev" not in data:
        # a new form without an explicit formRev brings its own revision
        form = _form_or_404(db, data["form_id"])
        data["form_rev"] = form.form_rev if form else None
    elif data.get("form_id") is not None:
        _form_or_404(db, data["form_id"])

    if "job_number" in data:
        if is_auto(data["job_number"]):
            data["job_number"] = next_job_number(db)
        elif data["job_number"] != mpi.job_number and _taken(db, MPI.job_number, data["job_number"], mpi.id):
            raise DuplicateKey("Job number already exists")
    if "mpi_number" in data:
        if is_auto(data["mpi_number"]):
            data["mpi_number"] = next_mpi_number(db)
        elif data["mpi_number"] != mpi.mpi_number and _taken(db, MPI.mpi_number, data["mpi_number"], mpi.id):
            raise DuplicateKey("MPI number already exists")

    old_version = mpi.mpi_version
    for k, v in data.items():
        setattr(mpi, k, v)
    if sections is not None:
        _replace_sections(mpi, sections)
    if "mpi_version" in data and data["mpi_version"] != old_version:
        mpi.version_history.append(MPIVersion(
            version=mpi.mpi_version or DEFAULT_VERSION,
            date=_now(),
            description="Revision updated",
            engineer_name=editor_name,
        ))

    sync_derived(db, mpi)
    commit_or_conflict(db, "Job number or MPI number already exists")
    db.refresh(mpi)
    logger.info("MPI %s updated by %s", mpi.mpi_number, editor_name)
    return mpi


def set_status(db: Session, *, mpi_id: int, status: str) -> MPI:
    if status not in MPI_STATUSES:
        raise ValidationFailed("Invalid status. Must be one of: " + ", ".join(MPI_STATUSES))
    mpi = get_mpi(db, mpi_id=mpi_id)
    mpi.status = status
    db.commit()
    db.refresh(mpi)
    logger.info("MPI %s status set to %s", mpi.mpi_number, status)
    return mpi


# ---------- delete ----------
def delete_mpi(db: Session, *, mpi: MPI) -> None:
    """Hard-delete the MPI together with its Docs and Customer rows."""
    docs = mpi.docs
    customer = mpi.customer
    number = mpi.mpi_number

    db.delete(mpi)
    if docs is not None:
        db.delete(docs)
    if customer is not None:
        db.delete(customer)
    db.commit()
    logger.info("MPI %s deleted", number)
