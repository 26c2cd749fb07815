"""Failure types raised by the contact service and their HTTP rendering."""
from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException

logger = logging.getLogger(__name__)

ERROR_CODE_MAP: dict[int, str] = {
    400: "VALIDATION_ERROR",
    404: "RESOURCE_NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
}


class ContactServiceError(Exception):
    """Base error for contact service operations."""

    code = "INTERNAL_SERVER_ERROR"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_payload(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message}


class ValidationFailure(ContactServiceError):
    """Raised when input violates a field constraint."""

    code = "VALIDATION_ERROR"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, *, fields: Sequence[str]) -> None:
        super().__init__(message)
        self.fields = list(fields)

    @classmethod
    def from_pydantic(cls, exc: ValidationError) -> "ValidationFailure":
        fields = _field_names(error.get("loc", ()) for error in exc.errors())
        return cls(f"Invalid value for {', '.join(fields)}", fields=fields)

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        payload["fields"] = self.fields
        return payload


class DuplicateFailure(ContactServiceError):
    """Raised when the email address already belongs to another record."""

    code = "DUPLICATE_EMAIL"
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, message: str = "That email address already exists") -> None:
        super().__init__(message)


class NotFoundFailure(ContactServiceError):
    """Raised when no record matches the target identifier."""

    code = "RESOURCE_NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, message: str = "There is no contact with that identifier.") -> None:
        super().__init__(message)


class InternalFailure(ContactServiceError):
    """Raised when the datastore fails or returns something unexpected."""

    def __init__(self, message: str = "Internal server error") -> None:
        super().__init__(message)


def _field_names(locations: Iterable[Sequence[Any]]) -> list[str]:
    names: list[str] = []
    for loc in locations:
        parts = [str(part) for part in loc if part not in ("body", "path", "query")]
        name = parts[0] if parts else "payload"
        if name not in names:
            names.append(name)
    return names


def register_exception_handlers(application: FastAPI) -> None:
    application.add_exception_handler(ContactServiceError, _service_error_handler)
    application.add_exception_handler(HTTPException, _http_exception_handler)
    application.add_exception_handler(RequestValidationError, _validation_exception_handler)
    application.add_exception_handler(Exception, _unhandled_exception_handler)


async def _service_error_handler(_: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, ContactServiceError)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.to_payload()})


async def _http_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, HTTPException)
    message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    code = ERROR_CODE_MAP.get(exc.status_code, f"HTTP_{exc.status_code}")
    return _error_response(code, message, exc.status_code)


async def _validation_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, RequestValidationError)
    logger.info("Validation error", extra={"errors": exc.errors()})
    fields = _field_names(error.get("loc", ()) for error in exc.errors())
    failure = ValidationFailure(f"Invalid value for {', '.join(fields)}", fields=fields)
    return JSONResponse(status_code=failure.status_code, content={"error": failure.to_payload()})


async def _unhandled_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled application error")
    return _error_response("INTERNAL_SERVER_ERROR", "Internal server error", status_code=500)


def _error_response(code: str, message: str, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": {"code": code, "message": message}})
