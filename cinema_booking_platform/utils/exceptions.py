"""
Custom exceptions for the Cinema Booking Platform.
"""

from typing import Any, Dict, Optional, List
from enum import Enum


class ErrorCode(str, Enum):
    """Standard error codes for the platform."""

    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"

    # Selection workflow errors
    MISSING_CONTEXT = "MISSING_CONTEXT"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    SEAT_NOT_AVAILABLE = "SEAT_NOT_AVAILABLE"
    SEAT_MAP_LOADING = "SEAT_MAP_LOADING"

    # Remote service errors
    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"
    UPSTREAM_FETCH_FAILED = "UPSTREAM_FETCH_FAILED"
    SUBMISSION_FAILED = "SUBMISSION_FAILED"
    SUBMISSION_IN_PROGRESS = "SUBMISSION_IN_PROGRESS"


class BookingPlatformError(Exception):
    """Base exception class for the booking platform."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.suggestions = suggestions or []
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        result = {
            "error_code": self.error_code.value,
            "message": self.message,
        }

        if self.details:
            result["details"] = self.details

        if self.suggestions:
            result["suggestions"] = self.suggestions

        return result


class ValidationError(BookingPlatformError):
    """Exception raised when checkout fields fail their rules.

    ``field_errors`` holds one message per failing field.
    """

    def __init__(self, message: str, field_errors: Optional[Dict[str, str]] = None, **kwargs):
        super().__init__(
            message,
            error_code=ErrorCode.VALIDATION_ERROR,
            details={"field_errors": field_errors} if field_errors else None,
            **kwargs
        )
        self.field_errors = field_errors or {}


class NotFoundError(BookingPlatformError):
    """Base exception for resource not found errors."""

    def __init__(self, message: str, resource_type: Optional[str] = None, resource_id: Optional[str] = None, **kwargs):
        super().__init__(
            message,
            error_code=ErrorCode.NOT_FOUND,
            details={"resource_type": resource_type, "resource_id": resource_id} if resource_type else None,
            **kwargs
        )


class MovieNotFoundError(NotFoundError):
    """Exception raised when a movie is not in the catalog."""

    def __init__(self, movie_id: str, **kwargs):
        super().__init__(
            f"Movie with id {movie_id} not found",
            resource_type="movie",
            resource_id=movie_id,
            suggestions=["Browse the movies that are now showing"],
            **kwargs
        )


class ShowNotFoundError(NotFoundError):
    """Exception raised when a show is not listed for the selected date."""

    def __init__(self, show_id: str, **kwargs):
        super().__init__(
            f"Show {show_id} is not available on the selected date",
            resource_type="show",
            resource_id=show_id,
            **kwargs
        )


class SeatNotFoundError(NotFoundError):
    """Exception raised when a seat is not part of the current show."""

    def __init__(self, seat_id: str, **kwargs):
        super().__init__(
            f"Seat {seat_id} not found",
            resource_type="seat",
            resource_id=seat_id,
            **kwargs
        )


class SessionNotFoundError(NotFoundError):
    """Exception raised when a booking session is unknown or expired."""

    def __init__(self, session_id: str, **kwargs):
        super().__init__(
            f"Booking session {session_id} not found",
            resource_type="session",
            resource_id=session_id,
            suggestions=["Start a new booking session"],
            **kwargs
        )


class MissingContextError(BookingPlatformError):
    """Exception raised when a step is reached without its prior state.

    ``redirect_step`` names the earlier step the caller has to go back to.
    """

    def __init__(self, message: str, redirect_step: str, **kwargs):
        super().__init__(
            message,
            error_code=ErrorCode.MISSING_CONTEXT,
            details={"redirect_step": redirect_step},
            **kwargs
        )
        self.redirect_step = redirect_step


class InvalidTransitionError(BookingPlatformError):
    """Exception raised when an action is not allowed in the current step."""

    def __init__(self, action: str, current_step: str, **kwargs):
        super().__init__(
            f"Cannot {action} while in step {current_step}",
            error_code=ErrorCode.INVALID_TRANSITION,
            details={"action": action, "current_step": current_step},
            **kwargs
        )


class SeatNotAvailableError(BookingPlatformError):
    """Exception raised when selecting a seat that is already reserved."""

    def __init__(self, seat_id: str, label: Optional[str] = None, **kwargs):
        super().__init__(
            f"Seat {label or seat_id} is already reserved",
            error_code=ErrorCode.SEAT_NOT_AVAILABLE,
            details={"seat_id": seat_id, "label": label},
            suggestions=["Choose a different seat", "Reload seat availability"],
            **kwargs
        )


class SeatMapLoadingError(BookingPlatformError):
    """Exception raised when the seat map for the chosen show is not loaded yet."""

    def __init__(self, show_id: str, **kwargs):
        super().__init__(
            f"Seats for show {show_id} are still loading",
            error_code=ErrorCode.SEAT_MAP_LOADING,
            details={"show_id": show_id},
            suggestions=["Wait for the seat map to load"],
            **kwargs
        )


class ExternalServiceError(BookingPlatformError):
    """Exception raised for external service failures."""

    def __init__(self, service_name: str, message: str, status_code: Optional[int] = None, **kwargs):
        kwargs.setdefault("error_code", ErrorCode.EXTERNAL_SERVICE_ERROR)
        super().__init__(
            message,
            details={"service_name": service_name, "status_code": status_code},
            **kwargs
        )
        self.service_name = service_name
        self.status_code = status_code


class CatalogAPIError(ExternalServiceError):
    """Failure talking to the remote catalog/reservation service.

    ``status_code`` is None for network-level failures; ``body`` carries the
    decoded error payload the server returned, if any.
    """

    def __init__(self, message: str, status_code: Optional[int] = None, body: Any = None, **kwargs):
        super().__init__("catalog", message, status_code=status_code, **kwargs)
        self.body = body


class UpstreamFetchError(BookingPlatformError):
    """Exception raised when a catalog or seat fetch fails."""

    def __init__(self, resource: str, cause: CatalogAPIError, **kwargs):
        super().__init__(
            f"Failed to load {resource}: {cause.message}",
            error_code=ErrorCode.UPSTREAM_FETCH_FAILED,
            details={"resource": resource, "status_code": cause.status_code},
            suggestions=["Try again"],
            **kwargs
        )
        self.resource = resource
        self.status_code = cause.status_code


class SubmissionError(BookingPlatformError):
    """Exception raised when the reservation request fails.

    No reservation is assumed to exist after this error.
    """

    def __init__(self, cause: CatalogAPIError, **kwargs):
        super().__init__(
            cause.message or "Failed to create reservation",
            error_code=ErrorCode.SUBMISSION_FAILED,
            details={"status_code": cause.status_code},
            suggestions=["Check your details and submit again"],
            **kwargs
        )
        self.status_code = cause.status_code


class SubmissionInProgressError(BookingPlatformError):
    """Exception raised when a reservation request is already outstanding."""

    def __init__(self, session_id: str, **kwargs):
        super().__init__(
            "A reservation request is already being processed",
            error_code=ErrorCode.SUBMISSION_IN_PROGRESS,
            details={"session_id": session_id},
            suggestions=["Wait for the current request to finish"],
            **kwargs
        )
