# errors.py
from typing import Optional


class AppError(Exception):
    """Domain error carrying the HTTP status it maps to."""

    status_code = 500
    default_detail = "Internal server error"

    def __init__(self, detail: Optional[str] = None, status_code: Optional[int] = None):
        self.detail = detail or self.default_detail
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.detail)


class ValidationFailed(AppError):
    status_code = 400
    default_detail = "Invalid input"


class WeakPassword(AppError):
    status_code = 400
    default_detail = "Password must be at least 8 characters long"


class HasDependents(AppError):
    status_code = 400
    default_detail = "Record has dependents; cannot delete"


class InvalidCredentials(AppError):
    status_code = 401
    default_detail = "Invalid credentials"


class Unauthenticated(AppError):
    status_code = 401
    default_detail = "No token provided"


class InvalidToken(AppError):
    status_code = 401
    default_detail = "Invalid token"


class ExpiredToken(AppError):
    status_code = 401
    default_detail = "Token expired"


class Forbidden(AppError):
    status_code = 403
    default_detail = "Access denied"


class NotFound(AppError):
    status_code = 404
    default_detail = "Not found"


class DuplicateKey(AppError):
    status_code = 409
    default_detail = "Record already exists"
