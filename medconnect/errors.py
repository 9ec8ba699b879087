"""
Error taxonomy shared by every domain.

Services raise these; a single handler in main renders them as
{"success": false, "kind": ..., "message": ...}.
"""

from typing import Optional

from fastapi import HTTPException


class AppError(HTTPException):
    kind = "internal_error"
    status_code = 500

    def __init__(self, message: str, headers: Optional[dict] = None):
        super().__init__(status_code=self.status_code, detail=message, headers=headers)

    @property
    def message(self) -> str:
        return self.detail


class NotFoundError(AppError):
    kind = "not_found"
    status_code = 404


class InvalidInputError(AppError):
    kind = "invalid_input"
    status_code = 422


class UnauthenticatedError(AppError):
    kind = "unauthenticated"
    status_code = 401

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class ForbiddenError(AppError):
    kind = "forbidden"
    status_code = 403


class InvalidTransitionError(AppError):
    kind = "invalid_transition"
    status_code = 409


class ConflictError(AppError):
    kind = "conflict"
    status_code = 409


class InternalError(AppError):
    kind = "internal_error"
    status_code = 500


# Kind used when rendering a plain HTTPException raised by FastAPI itself
STATUS_KINDS = {
    400: InvalidInputError.kind,
    401: UnauthenticatedError.kind,
    403: ForbiddenError.kind,
    404: NotFoundError.kind,
    405: InvalidInputError.kind,
    409: ConflictError.kind,
    422: InvalidInputError.kind,
}


def error_body(kind: str, message: str) -> dict:
    return {"success": False, "kind": kind, "message": message}
