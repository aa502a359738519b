"""
Domain errors and global exception handlers.

Every rejected precondition carries a human-readable ``detail``; the
handlers below keep stack traces away from clients.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

logger = logging.getLogger(__name__)


# ── Domain errors ───────────────────────────────────────────────────
class AttendanceError(Exception):
    """Base class for attendance rule violations."""

    status_code: int = 400
    detail: str = "Invalid attendance request"

    def __init__(self, detail: str | None = None) -> None:
        if detail is not None:
            self.detail = detail
        super().__init__(self.detail)


class InvalidFormat(AttendanceError):
    detail = "Shift time must be in HH:MM format"


class InvalidShiftConfiguration(AttendanceError):
    detail = "Shift end time must be after shift start time"


class MissingPhotos(AttendanceError):
    detail = "All four photos are required to check in"


class InvalidPhoto(AttendanceError):
    detail = "Photo must be a base64 data URL or an http(s) URL"


class DuplicateCheckin(AttendanceError):
    detail = "Already checked in today"


class NoCheckinFound(AttendanceError):
    detail = "No check-in found for today"


class AlreadyCheckedOut(AttendanceError):
    detail = "Already checked out today"


class PhotoUploadFailed(AttendanceError):
    status_code = 502
    detail = "Photo upload failed, check-in was not recorded"


# ── Handlers ────────────────────────────────────────────────────────
async def _attendance_error_handler(_request: Request, exc: AttendanceError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "success": False},
    )


async def _http_exception_handler(_request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "success": False},
        headers=getattr(exc, "headers", None),
    )


async def _integrity_error_handler(_request: Request, exc: IntegrityError) -> JSONResponse:
    logger.error("Database integrity error: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=409,
        content={"detail": "Database constraint violation", "success": False},
    )


async def _sqlalchemy_error_handler(_request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Database error: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=503,
        content={
            "detail": "Storage temporarily unavailable, please retry",
            "success": False,
            "retryable": True,
        },
    )


async def _generic_exception_handler(_request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception: %s", exc)
    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "details": str(exc),
            "success": False,
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all exception handlers to the FastAPI app."""
    app.add_exception_handler(AttendanceError, _attendance_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(HTTPException, _http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(IntegrityError, _integrity_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(SQLAlchemyError, _sqlalchemy_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _generic_exception_handler)
