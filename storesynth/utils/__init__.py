"""Utils module for the Site-to-Store Synthesis Pipeline."""

from storesynth.utils.logger import get_logger, setup_logging, LogContext
from storesynth.utils.errors import (
    AppError,
    AcquisitionError,
    AIServiceUnavailable,
    SynthesisError,
    PersistenceError,
    InputValidationError,
    ExtractionDegraded,
    ErrorHandler,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "LogContext",
    "AppError",
    "AcquisitionError",
    "AIServiceUnavailable",
    "SynthesisError",
    "PersistenceError",
    "InputValidationError",
    "ExtractionDegraded",
    "ErrorHandler",
]
