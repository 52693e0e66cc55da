"""Custom exceptions following RFC 9457 Problem Details for HTTP APIs."""

import logging
import re
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, NoReturn, Optional

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

logger = logging.getLogger(__name__)


def _timestamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


class ProblemDetailsException(HTTPException):
    """
    Base exception class following RFC 9457 Problem Details for HTTP APIs.

    https://tools.ietf.org/rfc/rfc9457.txt
    """

    def __init__(
        self,
        status_code: int,
        title: str,
        detail: Optional[str] = None,
        type_uri: Optional[str] = None,
        instance: Optional[str] = None,
        extensions: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        """
        Initialize Problem Details exception.

        Args:
            status_code: HTTP status code
            title: Short, human-readable summary of the problem type
            detail: Human-readable explanation specific to this occurrence
            type_uri: URI reference that identifies the problem type
            instance: URI reference that identifies the specific occurrence
            extensions: Additional problem-specific information
            headers: HTTP headers to include in response
        """
        self.status_code = status_code
        self.title = title
        self.detail = detail
        self.type_uri = type_uri or f"about:blank#{status_code}"
        self.instance = instance
        self.extensions = extensions or {}

        self.problem_details = {
            "type": self.type_uri,
            "title": self.title,
            "status": self.status_code,
        }

        if self.detail:
            self.problem_details["detail"] = self.detail

        if self.instance:
            self.problem_details["instance"] = self.instance

        self.problem_details.update(self.extensions)

        super().__init__(
            status_code=status_code,
            detail=self.problem_details,
            headers=headers
        )


class ValidationError(ProblemDetailsException):
    """
    Field-level validation failure.

    ``errors`` maps a field name to its message so clients can attach each
    message to the matching form control.
    """

    def __init__(
        self,
        detail: str = "The request data failed validation",
        errors: Optional[Dict[str, str]] = None,
        instance: Optional[str] = None,
    ):
        self.errors = dict(errors or {})
        extensions = {}
        if self.errors:
            extensions["errors"] = self.errors

        super().__init__(
            status_code=400,
            title="Validation Error",
            detail=detail,
            type_uri="https://vip-transfer.example/problems/validation-error",
            instance=instance,
            extensions=extensions,
        )


class AuthenticationError(ProblemDetailsException):
    """Exception for authentication errors."""

    def __init__(
        self,
        detail: str = "Authentication credentials are required",
        instance: Optional[str] = None,
    ):
        super().__init__(
            status_code=401,
            title="Authentication Required",
            detail=detail,
            type_uri="https://vip-transfer.example/problems/authentication-required",
            instance=instance,
            headers={"WWW-Authenticate": "Bearer"},
        )


class NotFoundError(ProblemDetailsException):
    """Exception for resource not found errors."""

    def __init__(
        self,
        resource_type: str = "resource",
        resource_id: Optional[Any] = None,
        detail: Optional[str] = None,
        instance: Optional[str] = None,
    ):
        if not detail:
            detail = f"The requested {resource_type}"
            if resource_id is not None:
                detail += f" with ID '{resource_id}'"
            detail += " could not be found"

        extensions = {
            "resource_type": resource_type,
        }
        if resource_id is not None:
            extensions["resource_id"] = str(resource_id)

        super().__init__(
            status_code=404,
            title="Resource Not Found",
            detail=detail,
            type_uri="https://vip-transfer.example/problems/resource-not-found",
            instance=instance,
            extensions=extensions,
        )


class ConflictError(ProblemDetailsException):
    """Exception for resource conflict errors."""

    def __init__(
        self,
        detail: str = "The request conflicts with the current state of the resource",
        conflicting_resource: Optional[Dict[str, Any]] = None,
        instance: Optional[str] = None,
    ):
        extensions = {}
        if conflicting_resource:
            extensions["conflicting_resource"] = conflicting_resource

        super().__init__(
            status_code=409,
            title="Resource Conflict",
            detail=detail,
            type_uri="https://vip-transfer.example/problems/resource-conflict",
            instance=instance,
            extensions=extensions,
        )


class InvalidTransitionError(ConflictError):
    """Raised when a reservation status change is not allowed."""

    def __init__(self, reservation_id: int, current: str, requested: str):
        super().__init__(
            detail=f"Reservation {reservation_id} cannot move from {current} to {requested}",
            conflicting_resource={
                "id": reservation_id,
                "status": current,
                "requested_status": requested,
            },
        )


class PersistenceError(ProblemDetailsException):
    """A database write failed; ``detail`` carries the translated, readable reason."""

    def __init__(
        self,
        detail: str,
        status_code: int = 409,
        instance: Optional[str] = None,
    ):
        super().__init__(
            status_code=status_code,
            title="Save Failed",
            detail=detail,
            type_uri="https://vip-transfer.example/problems/persistence-error",
            instance=instance,
        )


_NOT_NULL = re.compile(r"NOT NULL constraint failed: \w+\.(\w+)|null value in column \"(\w+)\"")


def translate_integrity_error(exc: IntegrityError) -> str:
    """Turn a driver-level constraint message into a sentence an admin can act on."""
    message = str(exc.orig) if exc.orig is not None else str(exc)
    lowered = message.lower()

    match = _NOT_NULL.search(message)
    if match:
        field = match.group(1) or match.group(2)
        return f"Field '{field}' cannot be empty"
    if "not null" in lowered:
        return "A required field cannot be empty"
    if "unique" in lowered or "duplicate" in lowered:
        return "A record with the same value already exists"
    if "foreign key" in lowered:
        return "Related record not found or still in use"
    return f"Database save error: {message}"


def raise_persistence_error(exc: SQLAlchemyError, context: Optional[Dict[str, Any]] = None) -> NoReturn:
    """Log a failed write with full detail and raise its readable form."""
    if isinstance(exc, IntegrityError):
        readable = translate_integrity_error(exc)
        status_code = 409
    else:
        readable = f"Database save error: {exc.__class__.__name__}"
        status_code = 500

    logger.error(
        "Database write failed",
        extra={**(context or {}), "error": str(exc), "readable": readable},
    )
    raise PersistenceError(detail=readable, status_code=status_code) from exc


async def problem_details_handler(request: Request, exc: ProblemDetailsException) -> JSONResponse:
    """
    Exception handler for Problem Details exceptions.

    Args:
        request: FastAPI request object
        exc: Problem Details exception

    Returns:
        JSONResponse: Problem Details formatted response
    """
    content = dict(exc.problem_details)
    content.setdefault("instance", request.url.path)
    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=exc.headers,
        media_type="application/problem+json",
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render FastAPI body/query validation failures as a 422 problem with violations."""
    violations = [
        {
            "path": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
            "message": error.get("msg", "Invalid value"),
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=422,
        content={
            "type": "https://vip-transfer.example/problems/request-validation",
            "title": "Unprocessable Request",
            "status": 422,
            "detail": "The request body or parameters are malformed",
            "instance": request.url.path,
            "violations": violations,
        },
        media_type="application/problem+json",
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Generic exception handler that converts unhandled exceptions to Problem Details format.

    Args:
        request: FastAPI request object
        exc: Unhandled exception

    Returns:
        JSONResponse: Problem Details formatted response
    """
    error_id = str(uuid.uuid4())

    logger.error(
        "Unhandled exception",
        extra={"error_id": error_id, "path": request.url.path, "error": str(exc)},
        exc_info=exc,
    )

    problem_details = {
        "type": "https://vip-transfer.example/problems/internal-server-error",
        "title": "Internal Server Error",
        "status": 500,
        "detail": "An unexpected error occurred while processing the request",
        "instance": str(request.url),
        "error_id": error_id,
        "timestamp": _timestamp(),
    }

    return JSONResponse(
        status_code=500,
        content=problem_details,
        media_type="application/problem+json",
    )
