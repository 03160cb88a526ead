# routers/v1/auth.py
import hmac
import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

import config
from database import get_db
from deps.auth import (
    Principal,
    authenticate,
    create_access_token,
    find_principal,
    get_current_claims,
    get_current_principal,
    get_password_hash,
    verify_password,
)
from errors import DuplicateKey, Forbidden, InvalidCredentials, WeakPassword
from models import Admin, Engineer
from schemas import (
    AdminSignupIn,
    AuthOut,
    ChangePasswordIn,
    EngineerSignupIn,
    LoginIn,
    MeOut,
    MessageOut,
    ProfileUpdateIn,
)
from services.registry import commit_or_conflict

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

MIN_PASSWORD_LENGTH = 8


def _auth_out(principal: Principal, role: str) -> dict:
    return {
        "token": create_access_token(principal, role),
        "user": principal,
        "user_type": role,
    }


def register(db: Session, kind: str, fields: dict, password: str) -> Principal:
    """Create an Admin or Engineer; 409 when the email is taken for that kind."""
    if find_principal(db, kind, fields["email"]):
        raise DuplicateKey(f"{kind.capitalize()} with this email already exists")
    Model = Admin if kind == "admin" else Engineer
    p = Model(**fields, password_hash=get_password_hash(password), is_active=True)
    db.add(p)
    commit_or_conflict(db, f"{kind.capitalize()} with this email already exists")
    db.refresh(p)
    logger.info("registered %s %s", kind, p.email)
    return p


@router.post("/login", response_model=AuthOut)
def login(payload: LoginIn, db: Session = Depends(get_db)):
    p = authenticate(db, payload.user_type, payload.email, payload.password)
    return _auth_out(p, payload.user_type)


@router.post("/signup", response_model=AuthOut, status_code=status.HTTP_201_CREATED)
def signup(payload: EngineerSignupIn, db: Session = Depends(get_db)):
    p = register(
        db,
        "engineer",
        {"full_name": payload.full_name, "email": payload.email, "title": payload.title},
        payload.password,
    )
    return _auth_out(p, "engineer")


@router.post("/admin-signup", response_model=AuthOut, status_code=status.HTTP_201_CREATED)
def admin_signup(payload: AdminSignupIn, db: Session = Depends(get_db)):
    if not hmac.compare_digest(payload.admin_key, config.ADMIN_SIGNUP_KEY):
        raise Forbidden("Invalid admin key")
    fields = {"email": payload.email, "title": payload.title}
    if payload.full_name:
        fields["full_name"] = payload.full_name
    p = register(db, "admin", fields, payload.password)
    return _auth_out(p, "admin")


@router.get("/me", response_model=MeOut)
def me(
    claims: dict = Depends(get_current_claims),
    principal: Principal = Depends(get_current_principal),
):
    return {"user": principal, "user_type": claims["role"]}


@router.put("/me", response_model=MeOut)
def update_me(
    payload: ProfileUpdateIn,
    claims: dict = Depends(get_current_claims),
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    for k, v in payload.model_dump(exclude_unset=True).items():
        if k == "full_name" and v is None:
            continue
        setattr(principal, k, v)
    db.commit()
    db.refresh(principal)
    return {"user": principal, "user_type": claims["role"]}


@router.post("/change-password", response_model=MessageOut)
def change_password(
    payload: ChangePasswordIn,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    if not verify_password(payload.current_password, principal.password_hash):
        raise InvalidCredentials("Current password is incorrect", status_code=400)
    if len(payload.new_password) < MIN_PASSWORD_LENGTH:
        raise WeakPassword()
    principal.password_hash = get_password_hash(payload.new_password)
    db.commit()
    return {"message": "Password updated successfully"}
