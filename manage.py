# manage.py
"""
Maintenance commands.

    python manage.py create-admin --email a@b.com --password secret123 [--name "Jane"]
    python manage.py reset-password --kind engineer --email a@b.com --password newpass123
    python manage.py seed-categories
"""
import argparse
import logging
import sys

from sqlalchemy.orm import Session

from database import Base, SessionLocal, engine
from deps.auth import PRINCIPAL_MODELS, find_principal, get_password_hash
from logging_config import configure_logging
from models import Admin, ProcessItem
from services.registry import find_duplicate

logger = logging.getLogger("manage")

DEFAULT_CATEGORIES = [
    "Applicable Documents",
    "General Instructions",
    "Kit Release",
    "SMT Preparation/Planning",
    "Paste Print",
    "Reflow",
    "First Article Approval",
    "SMT Additional Instructions",
    "Wave Solder",
    "Through Hole Stuffing",
    "2nd Operations",
    "Selective Solder",
    "Wash and Dry",
    "Flying Probe Test",
    "Solder Paste Inspection",
    "Automatic Optical Inspection (AOI)",
    "Final QC",
    "Ship and Delivery",
    "Packaging",
    "Test",
]


def create_admin(db: Session, email: str, password: str, name: str) -> int:
    if len(password) < 8:
        logger.error("password must be at least 8 characters")
        return 1
    if find_principal(db, "admin", email):
        logger.error("admin %s already exists", email)
        return 1
    db.add(Admin(
        full_name=name,
        email=email.strip().lower(),
        password_hash=get_password_hash(password),
        is_active=True,
    ))
    db.commit()
    logger.info("admin %s created", email)
    return 0


def reset_password(db: Session, kind: str, email: str, password: str) -> int:
    if len(password) < 8:
        logger.error("password must be at least 8 characters")
        return 1
    p = find_principal(db, kind, email)
    if not p:
        logger.error("%s %s not found", kind, email)
        return 1
    p.password_hash = get_password_hash(password)
    db.commit()
    logger.info("password for %s %s has been reset", kind, email)
    return 0


def seed_categories(db: Session) -> int:
    owner = db.query(Admin).order_by(Admin.id.asc()).first()
    added = 0
    for name in DEFAULT_CATEGORIES:
        if find_duplicate(db, ProcessItem, ["category_name"], {"category_name": name}):
            continue
        db.add(ProcessItem(
            category_name=name,
            usage_count=0,
            created_by=owner.id if owner else 0,
            created_by_model="Admin",
            is_active=True,
        ))
        added += 1
    db.commit()
    logger.info("seeded %d categories (%d already present)", added, len(DEFAULT_CATEGORIES) - added)
    return 0


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="MPI Builder maintenance commands")
    sub = ap.add_subparsers(dest="command", required=True)

    p = sub.add_parser("create-admin", help="create an admin account")
    p.add_argument("--email", required=True)
    p.add_argument("--password", required=True)
    p.add_argument("--name", default="Admin")

    p = sub.add_parser("reset-password", help="set a new password for an admin or engineer")
    p.add_argument("--kind", choices=sorted(PRINCIPAL_MODELS), default="engineer")
    p.add_argument("--email", required=True)
    p.add_argument("--password", required=True)

    sub.add_parser("seed-categories", help="insert the default process categories")

    args = ap.parse_args(argv)
    configure_logging()
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        if args.command == "create-admin":
            return create_admin(db, args.email, args.password, args.name)
        if args.command == "reset-password":
            return reset_password(db, args.kind, args.email, args.password)
        return seed_categories(db)
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
