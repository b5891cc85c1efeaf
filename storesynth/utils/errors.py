"""
Error taxonomy and centralized error categorization.

Fatal errors (acquisition, synthesis, persistence, input validation) are
surfaced to the caller. AI failures are recovered inside the design analyzer
and extraction gaps resolve to defaults, so neither is ever raised past its
component.
"""

import asyncio
from typing import Any, Optional


# =============================================================================
# Custom Exceptions
# =============================================================================

class AppError(Exception):
    """Base application exception."""

    code = "APP_ERROR"

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class AcquisitionError(AppError):
    """Navigation, timeout or browser failure while loading a page."""

    code = "ACQUISITION_ERROR"

    def __init__(self, message: str, url: Optional[str] = None, details: Optional[dict[str, Any]] = None):
        super().__init__(message, details={**(details or {}), "url": url})
        self.url = url


class AIServiceUnavailable(AppError):
    """The completion service could not produce a usable JSON answer."""

    code = "AI_SERVICE_UNAVAILABLE"


class SynthesisError(AppError):
    """Template synthesis or store assembly received unusable input."""

    code = "SYNTHESIS_ERROR"


class PersistenceError(AppError):
    """Opaque failure from the store persistence collaborator."""

    code = "PERSISTENCE_ERROR"


class InputValidationError(AppError):
    """Caller supplied an invalid URL, store info or identity."""

    code = "INVALID_INPUT"

    def __init__(self, message: str, code: str = "INVALID_INPUT", details: Optional[dict[str, Any]] = None):
        super().__init__(message, details=details)
        self.code = code


class ExtractionDegraded(Warning):
    """
    Warning category for signals that resolved to defaults.

    Never raised; used as the ``category`` field of degradation log events.
    """


# =============================================================================
# Error Handler
# =============================================================================

class ErrorHandler:
    """Centralized error categorization for the CLI and external callers."""

    @staticmethod
    def categorize_error(error: Exception) -> str:
        """Map an exception to a stable error code."""
        if isinstance(error, AppError):
            return error.code
        if isinstance(error, (asyncio.TimeoutError, TimeoutError)):
            return "TIMEOUT_ERROR"
        if isinstance(error, (ConnectionError, OSError)):
            return "NETWORK_ERROR"
        if isinstance(error, (ValueError, TypeError)):
            return "VALIDATION_ERROR"

        err_str = str(error).lower()
        if "timeout" in err_str:
            return "TIMEOUT_ERROR"
        if "api key" in err_str or "unauthorized" in err_str:
            return "API_KEY_ERROR"
        if "connection" in err_str:
            return "NETWORK_ERROR"

        return "UNKNOWN_ERROR"

    @staticmethod
    def to_response(error: Exception) -> dict[str, Any]:
        """Build the error payload returned to external callers."""
        payload: dict[str, Any] = {
            "error": ErrorHandler.categorize_error(error),
            "message": str(error),
        }
        if isinstance(error, AppError) and error.details:
            payload["details"] = error.details
        return payload
