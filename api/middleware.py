"""FastAPI middleware for logging and error handling."""
import time
import uuid
from typing import Callable

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_403_FORBIDDEN,
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_503_SERVICE_UNAVAILABLE,
)

from logging_config import get_logger, bind_context, clear_context
from exceptions import (
    ConfigurationError,
    ConflictingStateError,
    DatabaseError,
    DocumentStorageError,
    ForbiddenError,
    InvalidInputError,
    LedgerException,
    NotFoundError,
)

logger = get_logger(__name__)

# Most specific first; first match wins
ERROR_STATUS = (
    (NotFoundError, HTTP_404_NOT_FOUND, "NotFound"),
    (ForbiddenError, HTTP_403_FORBIDDEN, "Forbidden"),
    (InvalidInputError, HTTP_400_BAD_REQUEST, "InvalidInput"),
    (ConflictingStateError, HTTP_409_CONFLICT, "ConflictingState"),
    (DocumentStorageError, HTTP_503_SERVICE_UNAVAILABLE, "DocumentStorage"),
    (DatabaseError, HTTP_500_INTERNAL_SERVER_ERROR, "Internal"),
    (ConfigurationError, HTTP_500_INTERNAL_SERVER_ERROR, "Internal"),
)


def error_response(exc: LedgerException) -> JSONResponse:
    """Build the JSON error body for a ledger exception."""
    status_code, kind = HTTP_500_INTERNAL_SERVER_ERROR, "Internal"
    for exc_type, code, name in ERROR_STATUS:
        if isinstance(exc, exc_type):
            status_code, kind = code, name
            break

    return JSONResponse(
        status_code=status_code,
        content={
            "error": kind,
            "message": exc.message,
            "detail": exc.details or None,
        },
    )


async def ledger_exception_handler(request: Request, exc: LedgerException) -> JSONResponse:
    response = error_response(exc)
    log = logger.error if response.status_code >= 500 else logger.warning
    log(
        "Request rejected",
        error=exc.message,
        error_type=type(exc).__name__,
        status_code=response.status_code,
    )
    return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware to log all API requests and responses.

    Adds request ID to all logs and tracks request duration.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable
    ) -> Response:
        request_id = str(uuid.uuid4())

        bind_context(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            principal_id=request.headers.get("x-user-id"),
        )

        logger.info(
            "Request started",
            query=str(request.query_params) if request.query_params else None,
        )
        start_time = time.time()

        try:
            response = await call_next(request)
            duration_ms = (time.time() - start_time) * 1000
            response.headers["X-Request-ID"] = request_id
            logger.info(
                "Request completed",
                status_code=response.status_code,
                duration_ms=round(duration_ms, 2),
            )
            return response

        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                "Request failed",
                error=str(e),
                error_type=type(e).__name__,
                duration_ms=round(duration_ms, 2),
                exc_info=True,
            )
            raise

        finally:
            clear_context()


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """
    Converts anything the exception handlers did not catch into a 500.

    Ledger exceptions are mapped by ledger_exception_handler before they
    reach this middleware.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable
    ) -> Response:
        try:
            return await call_next(request)

        except LedgerException as e:
            return error_response(e)

        except Exception as e:
            logger.error(
                "Unhandled exception",
                error=str(e),
                error_type=type(e).__name__,
                exc_info=True,
            )
            return JSONResponse(
                status_code=HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "error": "Internal",
                    "message": "An unexpected error occurred.",
                    "detail": None,
                }
            )


def setup_middleware(app: FastAPI) -> None:
    """
    Add exception handlers and middleware to the app.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(LedgerException, ledger_exception_handler)

    # Last added runs first
    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(RequestLoggingMiddleware)

    logger.info("Middleware configured")
