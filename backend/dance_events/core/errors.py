"""
Application error taxonomy.

Services raise these instead of HTTPException so that the HTTP mapping lives
in one place (see dance_events.api.exception_handlers).
"""

from typing import Optional


class AppError(Exception):
    status_code: int = 500

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        headers: Optional[dict[str, str]] = None,
    ):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.headers = headers
        super().__init__(message)


class ValidationError(AppError):
    """Missing or malformed input."""

    status_code = 400


class AuthError(AppError):
    """Missing or invalid credentials or token."""

    status_code = 401

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class ForbiddenError(AppError):
    status_code = 403


class NotFoundError(AppError):
    status_code = 404


class ConflictError(AppError):
    """Uniqueness violation: duplicate email or duplicate ticket."""

    status_code = 409


class InternalError(AppError):
    status_code = 500
