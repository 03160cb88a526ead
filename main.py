# main.py
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

import config
from database import Base, engine
from errors import AppError
from logging_config import configure_logging
from routers.v1 import api_v1

configure_logging()
logger = logging.getLogger(__name__)

# ------------------------------
# App bootstrap
# ------------------------------
# dev databases; production schemas come from alembic
Base.metadata.create_all(bind=engine)

if config.ADMIN_SIGNUP_KEY == config.DEFAULT_ADMIN_SIGNUP_KEY:
    logger.warning("ADMIN_SIGNUP_KEY is the built-in default; set it in the environment")

app = FastAPI(title="MPI Builder API", version="1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ------------------------------
# Error translation
# ------------------------------
@app.exception_handler(AppError)
def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.exception_handler(IntegrityError)
def integrity_error_handler(request: Request, exc: IntegrityError):
    logger.warning("%s %s integrity error: %s", request.method, request.url.path, exc.orig)
    return JSONResponse(status_code=409, content={"detail": "Record already exists"})


@app.exception_handler(RequestValidationError)
def validation_error_handler(request: Request, exc: RequestValidationError):
    messages = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        messages.append(f"{loc}: {err.get('msg')}" if loc else err.get("msg", "Invalid input"))
    return JSONResponse(status_code=400, content={"detail": "; ".join(messages) or "Invalid input"})


@app.exception_handler(Exception)
def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("%s %s crashed", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.get("/healthz", include_in_schema=False)
def healthz():
    return {"status": "ok"}


app.include_router(api_v1, prefix="/api")
