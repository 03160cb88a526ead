# deps/auth.py
from datetime import datetime, timedelta, timezone
from typing import Optional, Union

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy import func
from sqlalchemy.orm import Session

import config
from database import get_db
from errors import ExpiredToken, InvalidCredentials, InvalidToken, NotFound, Unauthenticated
from models import Admin, Engineer

Principal = Union[Admin, Engineer]

PRINCIPAL_MODELS = {"admin": Admin, "engineer": Engineer}

bearer_scheme = HTTPBearer(auto_error=False)
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=config.BCRYPT_ROUNDS,
)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def get_password_hash(plain: str) -> str:
    return pwd_context.hash(plain)


def create_access_token(principal: Principal, role: str, days: Optional[int] = None) -> str:
    claims = {
        "sub": str(principal.id),
        "email": principal.email,
        "role": role,
        "fullName": principal.full_name,
        "exp": datetime.now(timezone.utc) + timedelta(days=days or config.JWT_EXPIRE_DAYS),
    }
    return jwt.encode(claims, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)


def decode_token(token: str) -> dict:
    try:
        payload = jwt.decode(token, config.JWT_SECRET, algorithms=[config.JWT_ALGORITHM])
    except ExpiredSignatureError:
        raise ExpiredToken()
    except JWTError:
        raise InvalidToken()
    if payload.get("role") not in PRINCIPAL_MODELS or not str(payload.get("sub", "")).isdigit():
        raise InvalidToken()
    return payload


def find_principal(db: Session, kind: str, email: str) -> Optional[Principal]:
    Model = PRINCIPAL_MODELS[kind]
    return (
        db.query(Model)
          .filter(func.lower(Model.email) == email.strip().lower())
          .first()
    )


def authenticate(db: Session, kind: str, email: str, password: str) -> Principal:
    """Same error for unknown email, inactive account and bad password."""
    principal = find_principal(db, kind, email)
    if not principal or not principal.is_active:
        raise InvalidCredentials()
    if not verify_password(password, principal.password_hash):
        raise InvalidCredentials()
    return principal


# ---------- FastAPI dependencies ----------
def get_current_claims(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> dict:
    if creds is None or not creds.credentials:
        raise Unauthenticated()
    return decode_token(creds.credentials)


def get_current_principal(
    claims: dict = Depends(get_current_claims),
    db: Session = Depends(get_db),
) -> Principal:
    Model = PRINCIPAL_MODELS[claims["role"]]
    principal = db.get(Model, int(claims["sub"]))
    if not principal:
        raise NotFound("User not found")
    return principal
