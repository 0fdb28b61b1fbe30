"""Exceptions rendered as RFC 9457 Problem Details."""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

PROBLEM_JSON = "application/problem+json"


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
            extensions: Additional problem-specific members
            headers: HTTP headers to include in the response
        """
        self.title = title
        self.type_uri = type_uri or f"about:blank#{status_code}"
        self.instance = instance
        self.extensions = extensions or {}

        self.problem_details: Dict[str, Any] = {
            "type": self.type_uri,
            "title": title,
            "status": status_code,
        }
        if detail:
            self.problem_details["detail"] = detail
        if instance:
            self.problem_details["instance"] = instance
        self.problem_details.update(self.extensions)

        super().__init__(status_code=status_code, detail=detail, headers=headers)


class ValidationError(ProblemDetailsException):
    """Request body or parameters failed validation."""

    def __init__(
        self,
        detail: str = "The request data failed validation",
        violations: Optional[List[Dict[str, str]]] = None,
        instance: Optional[str] = None,
    ):
        super().__init__(
            status_code=400,
            title="Validation Error",
            detail=detail,
            type_uri="https://example.com/problems/validation-error",
            instance=instance,
            extensions={"violations": violations or []},
        )


class AuthenticationError(ProblemDetailsException):
    """Missing, malformed or revoked bearer credentials."""

    def __init__(self, detail: str = "Authentication credentials are required"):
        super().__init__(
            status_code=401,
            title="Authentication Required",
            detail=detail,
            type_uri="https://example.com/problems/authentication-required",
            headers={"WWW-Authenticate": "Bearer"},
        )


class NotFoundError(ProblemDetailsException):
    """Referenced room or booking does not exist."""

    def __init__(
        self,
        resource_type: str = "resource",
        resource_id: Optional[str] = None,
        detail: Optional[str] = None,
    ):
        if not detail:
            detail = f"The requested {resource_type}"
            if resource_id:
                detail += f" with ID '{resource_id}'"
            detail += " could not be found"

        extensions = {"resource_type": resource_type}
        if resource_id:
            extensions["resource_id"] = resource_id

        self.resource_type = resource_type
        self.resource_id = resource_id

        super().__init__(
            status_code=404,
            title="Resource Not Found",
            detail=detail,
            type_uri="https://example.com/problems/resource-not-found",
            extensions=extensions,
        )


class ForbiddenReason(str, Enum):
    """Eligibility gates that can refuse a booking, valued by their message."""

    ENROLLMENT_NOT_FOUND = "enrollment not found"
    TICKET_NOT_FOUND = "ticket not found"
    TICKET_NOT_PAID = "ticket not paid"
    TICKET_IS_REMOTE = "ticket is remote"
    TICKET_WITHOUT_HOTEL = "ticket does not include hotel"
    ROOM_FULL = "room is full"
    BOOKING_NOT_FOUND = "booking not found"
    BOOKING_NOT_OWNED = "booking does not belong to user"


class ForbiddenError(ProblemDetailsException):
    """An eligibility precondition failed."""

    def __init__(self, reason: ForbiddenReason):
        self.reason = reason
        super().__init__(
            status_code=403,
            title="Access Forbidden",
            detail=f"Forbidden! {reason.value}",
            type_uri="https://example.com/problems/access-forbidden",
            extensions={"code": reason.name, "reason": reason.value},
        )


async def problem_details_handler(request: Request, exc: ProblemDetailsException) -> JSONResponse:
    """Render a ProblemDetailsException as a Problem Details response."""
    content = dict(exc.problem_details)
    content.setdefault("instance", request.url.path)
    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=exc.headers,
        media_type=PROBLEM_JSON,
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Convert FastAPI validation failures into a 400 with a list of violations."""
    violations = [
        {
            "path": ".".join(str(part) for part in error["loc"]),
            "message": error["msg"],
        }
        for error in exc.errors()
    ]
    return await problem_details_handler(request, ValidationError(violations=violations))


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Convert unhandled exceptions into a 500 Problem Details response."""
    problem_details = {
        "type": "https://example.com/problems/internal-server-error",
        "title": "Internal Server Error",
        "status": 500,
        "detail": "An unexpected error occurred while processing the request",
        "instance": request.url.path,
        "error_id": str(uuid.uuid4()),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    return JSONResponse(status_code=500, content=problem_details, media_type=PROBLEM_JSON)
