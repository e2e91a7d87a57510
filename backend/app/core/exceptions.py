"""
Domain error kinds.

Every error carries the same ``{"code", "message"}`` detail body the API
returns, so services can raise them directly and FastAPI renders them.
"""

from __future__ import annotations

from fastapi import HTTPException, status


class AppError(HTTPException):
    """Base class for expected business errors."""

    status_code_default: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, code: str, message: str) -> None:
        super().__init__(
            status_code=self.status_code_default,
            detail={"code": code, "message": message},
        )
        self.code = code
        self.message = message

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


class NotFoundError(AppError):
    """Referenced project, task, user, invitation or member is absent."""

    status_code_default = status.HTTP_404_NOT_FOUND


class ForbiddenError(AppError):
    """Actor lacks the role or relationship the action needs."""

    status_code_default = status.HTTP_403_FORBIDDEN


class ConflictError(AppError):
    """Business rule violation."""

    status_code_default = status.HTTP_409_CONFLICT


class UnauthorizedError(AppError):
    status_code_default = status.HTTP_401_UNAUTHORIZED

    def __init__(self, code: str, message: str) -> None:
        super().__init__(code, message)
        self.headers = {"WWW-Authenticate": "Bearer"}
