# services/registry.py
"""
Shared persistence rules for the reference-data registries
(customer companies, forms, document ids, categories, tasks).

Natural keys compare case-insensitively and only active rows compete.
The partial unique indexes in models.py are the real guard; the lookup
here only exists to give a readable 409 before the flush.
"""
import logging
from typing import Iterable, Optional, Sequence

from sqlalchemy import String, func, inspect
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from errors import DuplicateKey, NotFound, ValidationFailed

logger = logging.getLogger(__name__)


def find_duplicate(
    db: Session,
    Model,
    key_fields: Sequence[str],
    values: dict,
    *,
    exclude_id: Optional[int] = None,
):
    q = db.query(Model).filter(Model.is_active.is_(True))
    for f in key_fields:
        v = values.get(f)
        if v is None:
            return None
        col = getattr(Model, f)
        if isinstance(col.type, String):
            q = q.filter(func.lower(col) == str(v).strip().lower())
        else:
            q = q.filter(col == v)
    if exclude_id is not None:
        q = q.filter(Model.id != exclude_id)
    return q.first()


def byte_order(column, dialect_name: str):
    """Case-sensitive ascending sort on a text column, whatever the database locale."""
    # PostgreSQL sorts by its locale; SQLite already compares bytes
    if dialect_name == "postgresql":
        return column.collate("C").asc()
    return column.asc()


def list_rows(db: Session, Model, order_by: Iterable, *, include_inactive: bool = False):
    """Rows sorted by the given text columns, case-sensitive ascending."""
    q = db.query(Model)
    if not include_inactive:
        q = q.filter(Model.is_active.is_(True))
    dialect = db.get_bind().dialect.name
    return q.order_by(*(byte_order(c, dialect) for c in order_by), Model.id.asc()).all()


def get_or_404(db: Session, Model, item_id: int, label: str):
    obj = db.get(Model, item_id)
    if not obj:
        raise NotFound(f"{label} not found")
    return obj


def commit_or_conflict(db: Session, message: str) -> None:
    """Commit; a unique-index violation becomes DuplicateKey after rollback."""
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning("integrity error translated to 409: %s", e.orig)
        raise DuplicateKey(message)


def create_row(
    db: Session,
    Model,
    data: dict,
    *,
    key_fields: Sequence[str],
    label: str,
    extra: Optional[dict] = None,
):
    if find_duplicate(db, Model, key_fields, data):
        raise DuplicateKey(f"{label} already exists")
    obj = Model(**data, **(extra or {}))
    db.add(obj)
    commit_or_conflict(db, f"{label} already exists")
    db.refresh(obj)
    return obj


def reject_null_required(Model, data: dict) -> None:
    """Explicit nulls on NOT NULL columns are a 400, not a database error."""
    cols = inspect(Model).columns
    for k, v in data.items():
        if v is None and k in cols and not cols[k].nullable:
            raise ValidationFailed(f"{k} cannot be empty")


def update_row(db: Session, obj, data: dict, *, key_fields: Sequence[str], label: str):
    Model = type(obj)
    reject_null_required(Model, data)
    # a row being re-activated competes like a new one
    reactivating = data.get("is_active") is True and not obj.is_active
    if reactivating or any(f in data for f in key_fields):
        merged = {f: data.get(f, getattr(obj, f)) for f in key_fields}
        if data.get("is_active", obj.is_active) and find_duplicate(
            db, Model, key_fields, merged, exclude_id=obj.id
        ):
            raise DuplicateKey(f"{label} already exists")

    for k, v in data.items():
        setattr(obj, k, v)
    commit_or_conflict(db, f"{label} already exists")
    db.refresh(obj)
    return obj


def soft_delete(db: Session, obj) -> None:
    obj.is_active = False
    db.commit()


def hard_delete(db: Session, obj) -> None:
    db.delete(obj)
    db.commit()
