# database.py
from typing import Generator
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base, Session

import config

DATABASE_URL = config.DATABASE_URL


def _engine_kwargs(url: str) -> dict:
    if url.startswith("sqlite"):
        # endpoints run in FastAPI's threadpool
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_pre_ping": True,   # drop dead connections before use
        "pool_size": 2,
        "max_overflow": 8,       # at most 10 connections
        "pool_recycle": 30,      # retire connections idle past 30s
        "pool_timeout": 5,       # wait at most 5s for a free connection
        "connect_args": {"connect_timeout": 5},
    }


engine = create_engine(DATABASE_URL, future=True, **_engine_kwargs(DATABASE_URL))
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)

Base = declarative_base()

def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency: one session per request, always closed."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
