"""
Domain errors raised by the service layer.

Routes stay thin: services raise one of these and the exception handlers
registered in app.main render them. Each class carries its HTTP status code
and a user-facing message.
"""
from __future__ import annotations

from typing import Optional

from fastapi import Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
import structlog

logger = structlog.get_logger()

MSG_INTERNAL_ERROR = "Internal server error"
MSG_SLOT_TAKEN = "This table is already reserved for the selected time"


class DomainError(Exception):
    status_code = 500
    default_message = MSG_INTERNAL_ERROR

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationFailed(DomainError):
    """Missing or malformed input"""
    status_code = 400
    default_message = "Invalid request"

    def __init__(self, message: Optional[str] = None, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class Conflict(DomainError):
    status_code = 409
    default_message = MSG_SLOT_TAKEN


class NotFound(DomainError):
    status_code = 404
    default_message = "Not found"


class Forbidden(DomainError):
    status_code = 403
    default_message = "You do not have permission to perform this action"


class InvalidState(DomainError):
    """Action not valid for the entity's current state"""
    status_code = 400
    default_message = "Action not allowed in the current state"


class InvalidTransition(InvalidState):
    def __init__(self, current: str, target: str):
        super().__init__(f"Cannot change reservation status from {current} to {target}")
        self.current = current
        self.target = target


class StorageError(DomainError):
    """Persistence failure. The message never leaks driver details."""
    status_code = 500
    default_message = MSG_INTERNAL_ERROR


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    body = {"detail": exc.message}
    if isinstance(exc, ValidationFailed) and exc.field:
        body["field"] = exc.field
    if isinstance(exc, StorageError):
        logger.error("Storage error", path=request.url.path, cause=repr(exc.__cause__))
    return JSONResponse(status_code=exc.status_code, content=body)


async def storage_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Unhandled database error", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=StorageError.status_code, content={"detail": MSG_INTERNAL_ERROR})
