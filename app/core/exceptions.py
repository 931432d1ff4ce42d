"""
Boundary exceptions and global exception handlers for the FastAPI application.

The service layer never raises these: it returns :class:`~app.core.results.Err`
values.  Route handlers turn an ``Err`` into one of the exceptions below via
:func:`raise_for_error`, and the handlers registered by
:func:`add_exception_handlers` render every failure with the same envelope::

    {
        "error": true,
        "message": "<human-readable description>"
    }
"""

import logging
from typing import Any, Dict, NoReturn, Type

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.results import Err, ErrorKind

logger = logging.getLogger(__name__)


# ────────────────────────────────────────────────────────────────────────────
# Boundary exceptions
# ────────────────────────────────────────────────────────────────────────────


class AppException(Exception):
    """Base exception for all application-level errors."""

    def __init__(self, status_code: int, message: str, details: Any = None):
        self.status_code = status_code
        self.message = message
        self.details = details
        super().__init__(message)


class InvalidInputException(AppException):
    """Malformed or missing required input (400)."""

    def __init__(self, message: str):
        super().__init__(status_code=400, message=message)


class NotFoundException(AppException):
    """Referenced fund does not exist (404)."""

    def __init__(self, message: str):
        super().__init__(status_code=404, message=message)

    @classmethod
    def for_fund(cls, code: str) -> "NotFoundException":
        return cls(f"Fund with code '{code}' not found")


class ConflictException(AppException):
    """Duplicate unique key or other store constraint violation (409)."""

    def __init__(self, message: str):
        super().__init__(status_code=409, message=message)


class InvalidOperationException(AppException):
    """Business rule violation, e.g. a movement that would go negative (400)."""

    def __init__(self, message: str):
        super().__init__(status_code=400, message=message)


_EXCEPTION_BY_KIND: Dict[ErrorKind, Type[AppException]] = {
    ErrorKind.INVALID_INPUT: InvalidInputException,
    ErrorKind.NOT_FOUND: NotFoundException,
    ErrorKind.CONFLICT: ConflictException,
    ErrorKind.INVALID_OPERATION: InvalidOperationException,
}


def raise_for_error(error: Err) -> NoReturn:
    """Translate a service-layer ``Err`` into its boundary exception."""
    raise _EXCEPTION_BY_KIND[error.kind](error.message)


# ────────────────────────────────────────────────────────────────────────────
# FastAPI exception handler registration
# ────────────────────────────────────────────────────────────────────────────


def add_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the FastAPI application instance."""

    @app.exception_handler(AppException)
    async def app_exception_handler(
        request: Request, exc: AppException
    ) -> JSONResponse:
        logger.info(
            "%s %s rejected with %d: %s",
            request.method,
            request.url.path,
            exc.status_code,
            exc.message,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": True, "message": exc.message},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        """Handle standard HTTP exceptions (e.g. 404 from path-not-found)."""
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": True, "message": exc.detail},
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """
        Handle malformed request bodies and parameters.

        Reported as 400 Bad Request with the list of failing fields, the same
        category as input rejected by the service layer.
        """
        errors = []
        for err in exc.errors():
            loc = " -> ".join(str(part) for part in err["loc"])
            errors.append({"field": loc, "message": err["msg"]})
        return JSONResponse(
            status_code=400,
            content={"error": True, "message": "Validation failed", "details": errors},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Catch-all: log the cause, return an opaque 500."""
        logger.exception(
            "Unhandled exception on %s %s", request.method, request.url.path
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": True,
                "message": "Internal Server Error. Please contact support.",
            },
        )
