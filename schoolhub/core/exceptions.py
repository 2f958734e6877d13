"""
Domain errors and global exception handlers.

Domain errors carry a machine-readable ``kind`` plus a human-readable
``detail`` and are rendered as ``{"detail", "kind", "success": false}``.
Everything else is caught here too so stack traces never reach clients.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

logger = logging.getLogger(__name__)


# ── Domain errors ───────────────────────────────────────────────────
class DomainError(Exception):
    """Base class for rejected operations."""

    kind = "error"
    status_code = 400

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class UnauthenticatedError(DomainError):
    """No resolvable actor identity."""

    kind = "unauthenticated"
    status_code = 401


class UnauthorizedError(DomainError):
    """Actor resolved but lacks the capability for the requested scope/person."""

    kind = "unauthorized"
    status_code = 403


class InvalidSequenceError(DomainError):
    """Punch type violates the state machine relative to the last event."""

    kind = "invalid_sequence"
    status_code = 400


class InvalidInputError(DomainError):
    """Malformed timestamp, date range or settings values."""

    kind = "invalid_input"
    status_code = 400


class NotFoundError(DomainError):
    kind = "not_found"
    status_code = 404


# ── Handlers ────────────────────────────────────────────────────────
def _error_response(
    status_code: int,
    detail: object,
    kind: str | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    body: dict[str, object] = {"detail": detail, "success": False}
    if kind is not None:
        body["kind"] = kind
    return JSONResponse(status_code=status_code, content=body, headers=headers)


async def _on_domain_error(request: Request, exc: DomainError) -> JSONResponse:
    logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.kind, exc.detail)
    return _error_response(exc.status_code, exc.detail, exc.kind)


async def _on_http_exception(_request: Request, exc: HTTPException) -> JSONResponse:
    return _error_response(exc.status_code, exc.detail, headers=getattr(exc, "headers", None))


async def _on_integrity_error(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.error("Constraint violation on %s %s", request.method, request.url.path, exc_info=exc)
    return _error_response(409, "Database constraint violation", "conflict")


async def _on_database_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Database failure on %s %s", request.method, request.url.path, exc_info=exc)
    return _error_response(500, "Internal database error", "database")


async def _on_unhandled(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return _error_response(500, "Internal server error", "internal")


def register_exception_handlers(app: FastAPI) -> None:
    """Render every error as ``{"detail", "success": false}`` plus ``kind`` where known."""
    handlers = (
        (DomainError, _on_domain_error),
        (HTTPException, _on_http_exception),
        (IntegrityError, _on_integrity_error),
        (SQLAlchemyError, _on_database_error),
        (Exception, _on_unhandled),
    )
    for exc_class, handler in handlers:
        app.add_exception_handler(exc_class, handler)  # type: ignore[arg-type]
