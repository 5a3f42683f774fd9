"""
core/errors.py -- Typed application errors shared by every layer.

Every expected, user-facing failure is an AppError subclass carrying a
machine-readable code and the HTTP status it maps to. Domain code raises
them; api/main.py converts them into the ErrorResponse envelope in a single
exception handler, so route handlers never build error responses by hand.

"No session" is a normal state, not a failure -- stores return None for it
and never raise.

Layer rule: core/ is the kernel. No imports from api/, auth/, sessions/, or cart/.
"""

from __future__ import annotations

from http import HTTPStatus


class AppError(Exception):
    """Base class for expected failures that have a defined HTTP response."""

    code: str = "app_error"
    status: HTTPStatus = HTTPStatus.BAD_REQUEST
    message: str = "Request could not be processed."

    def __init__(self, message: str | None = None, *, detail: str | None = None) -> None:
        if message is not None:
            self.message = message
        self.detail = detail
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message, "detail": self.detail}


class InvalidCredentials(AppError):
    """Unknown name or wrong password. The two cases are deliberately identical."""

    code = "bad_credentials"
    status = HTTPStatus.UNAUTHORIZED
    message = "Invalid username or password."


class Unauthenticated(AppError):
    code = "unauthorized"
    status = HTTPStatus.UNAUTHORIZED
    message = "Authentication required."


class MalformedInput(AppError):
    code = "bad_request"
    status = HTTPStatus.BAD_REQUEST
    message = "Bad Request."


class NotFound(AppError):
    code = "not_found"
    status = HTTPStatus.NOT_FOUND
    message = "Not found."


class Conflict(AppError):
    code = "conflict"
    status = HTTPStatus.CONFLICT
    message = "Resource already exists."


class SessionRequired(AppError):
    code = "session_required"
    status = HTTPStatus.FORBIDDEN
    message = "You need a valid session cookie."
