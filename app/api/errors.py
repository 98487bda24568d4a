"""Problem-detail (RFC 7807) error responses."""

import logging
from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.errors import ErrorKind, ReconciliationError

logger = logging.getLogger(__name__)

PROBLEM_BASE_URL = "/docs#/error-handling/"

# HTTP status per error kind; the error kinds themselves know nothing of HTTP
STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.UNSUPPORTED_API_VERSION: 400,
    ErrorKind.CSV_PROCESSING_ERROR: 400,
    ErrorKind.MALFORMED_RECORD: 400,
    ErrorKind.INVALID_FILE: 400,
    ErrorKind.FILE_TOO_LARGE: 413,
    ErrorKind.RETRY_EXHAUSTED: 503,
    ErrorKind.INTERNAL_SERVER_ERROR: 500,
}


def status_for(kind: ErrorKind) -> int:
    return STATUS_BY_KIND.get(kind, 500)


def problem_detail(
    kind: ErrorKind,
    detail: str,
    instance: str | None = None,
    extra: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Build a problem-detail body for an error kind."""
    body = {
        "type": PROBLEM_BASE_URL + kind.url_fragment,
        "title": kind.title,
        "status": status_for(kind),
        "detail": detail,
        "instance": instance,
        "errorCode": kind.code,
        "description": kind.description,
        "timestamp": datetime.now(UTC).isoformat(),
    }
    if extra:
        body.update(extra)
    return body


async def handle_reconciliation_error(request: Request, exc: ReconciliationError) -> JSONResponse:
    if exc.kind == ErrorKind.RETRY_EXHAUSTED:
        logger.error(f"Retry exhausted: {exc.message}")
    else:
        logger.warning(f"Reconciliation error ({exc.code}): {exc.message}")

    body = problem_detail(exc.kind, exc.message, request.url.path, exc.extra_properties())
    return JSONResponse(
        content=body,
        status_code=body["status"],
        media_type="application/problem+json",
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unexpected error on {request.url.path}: {exc}")
    body = problem_detail(
        ErrorKind.INTERNAL_SERVER_ERROR,
        "An unexpected error occurred. Please try again later.",
        request.url.path,
    )
    return JSONResponse(
        content=body,
        status_code=body["status"],
        media_type="application/problem+json",
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ReconciliationError, handle_reconciliation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
