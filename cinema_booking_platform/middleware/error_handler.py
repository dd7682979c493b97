"""
Error handling middleware: maps platform errors to structured JSON responses.
"""

import logging
import traceback
from datetime import datetime, timezone
from uuid import uuid4

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from pydantic import ValidationError as PydanticValidationError

from ..utils.exceptions import (
    BookingPlatformError,
    ErrorCode,
    ExternalServiceError,
    MissingContextError,
    NotFoundError,
    SubmissionError,
    UpstreamFetchError,
    ValidationError
)

logger = logging.getLogger(__name__)

STATUS_MAP = {
    ErrorCode.VALIDATION_ERROR: status.HTTP_422_UNPROCESSABLE_CONTENT,
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.MISSING_CONTEXT: status.HTTP_409_CONFLICT,
    ErrorCode.INVALID_TRANSITION: status.HTTP_409_CONFLICT,
    ErrorCode.SEAT_NOT_AVAILABLE: status.HTTP_409_CONFLICT,
    ErrorCode.SEAT_MAP_LOADING: status.HTTP_409_CONFLICT,
    ErrorCode.SUBMISSION_IN_PROGRESS: status.HTTP_409_CONFLICT,
    ErrorCode.EXTERNAL_SERVICE_ERROR: status.HTTP_502_BAD_GATEWAY,
    ErrorCode.UPSTREAM_FETCH_FAILED: status.HTTP_502_BAD_GATEWAY,
    ErrorCode.SUBMISSION_FAILED: status.HTTP_502_BAD_GATEWAY,
}


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Middleware that turns raised errors into error responses."""

    def __init__(self, app, debug: bool = False):
        super().__init__(app)
        self.debug = debug

    async def dispatch(self, request: Request, call_next):
        error_id = str(uuid4())

        try:
            return await call_next(request)
        except Exception as exc:
            return self._handle_exception(request, exc, error_id)

    def _handle_exception(self, request: Request, exc: Exception, error_id: str) -> JSONResponse:
        self._log_error(request, exc, error_id)

        if isinstance(exc, BookingPlatformError):
            return self._error_response(exc, error_id, self.get_status_code(exc))
        if isinstance(exc, PydanticValidationError):
            return self._handle_validation_error(exc, error_id)
        return self._handle_unexpected_error(exc, error_id)

    def _handle_validation_error(self, exc: PydanticValidationError, error_id: str) -> JSONResponse:
        field_errors = {}
        for error in exc.errors():
            field_path = ".".join(str(loc) for loc in error["loc"])
            field_errors.setdefault(field_path, error["msg"])

        validation_error = ValidationError("Request validation failed", field_errors=field_errors)
        return self._error_response(validation_error, error_id, status.HTTP_422_UNPROCESSABLE_CONTENT)

    def _handle_unexpected_error(self, exc: Exception, error_id: str) -> JSONResponse:
        error = BookingPlatformError(
            "An unexpected error occurred",
            error_code=ErrorCode.INTERNAL_ERROR,
            details={"error_type": type(exc).__name__} if self.debug else None
        )
        content = self._body(error, error_id)
        if self.debug:
            content["debug"] = {
                "exception": str(exc),
                "traceback": "".join(traceback.format_exception(exc)),
            }
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)

    @staticmethod
    def get_status_code(exc: BookingPlatformError) -> int:
        """Map error codes to HTTP status codes."""
        return STATUS_MAP.get(exc.error_code, status.HTTP_500_INTERNAL_SERVER_ERROR)

    def _error_response(self, exc: BookingPlatformError, error_id: str, status_code: int) -> JSONResponse:
        return JSONResponse(status_code=status_code, content=self._body(exc, error_id))

    @staticmethod
    def _body(exc: BookingPlatformError, error_id: str) -> dict:
        return {
            "error": exc.to_dict(),
            "error_id": error_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    def _log_error(self, request: Request, exc: Exception, error_id: str):
        request_info = {
            "method": request.method,
            "path": request.url.path,
            "client_ip": request.client.host if request.client else None,
        }

        if isinstance(exc, (ValidationError, NotFoundError, MissingContextError)):
            logger.warning(
                f"Client error [{error_id}]: {exc.message}",
                extra={"error_id": error_id, "error_code": exc.error_code.value, "request": request_info}
            )
        elif isinstance(exc, (UpstreamFetchError, SubmissionError, ExternalServiceError)):
            logger.error(
                f"Upstream error [{error_id}]: {exc.message}",
                extra={"error_id": error_id, "error_code": exc.error_code.value, "request": request_info}
            )
        elif isinstance(exc, BookingPlatformError):
            logger.warning(
                f"Workflow error [{error_id}]: {exc.message}",
                extra={"error_id": error_id, "error_code": exc.error_code.value, "request": request_info}
            )
        else:
            logger.error(
                f"Unexpected error [{error_id}]: {exc}",
                extra={"error_id": error_id, "error_type": type(exc).__name__, "request": request_info},
                exc_info=exc
            )
