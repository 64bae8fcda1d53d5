"""
Comprehensive error handling for the shorts pipeline.

Provides structured error handling with:
- Categorized error codes for all failure scenarios
- User-friendly error messages
- Retry logic determination
- HTTP status mapping for the API layer
"""

from enum import Enum
from typing import Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)


class ErrorCode(Enum):
    """
    Enumeration of all possible error codes in the pipeline.

    Organized by category:
    - API Errors: Client-side input validation errors
    - Pipeline Errors: Failures in script/media generation stages
    - External API Errors: Third-party service failures
    - System Errors: Infrastructure issues
    """

    # API Errors (4xx - client errors)
    INVALID_INPUT = "INVALID_INPUT"
    MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"
    INVALID_CLIMATE = "INVALID_CLIMATE"
    INVALID_STYLE = "INVALID_STYLE"
    INVALID_STATE = "INVALID_STATE"
    NOT_FOUND = "NOT_FOUND"
    FORBIDDEN = "FORBIDDEN"

    # Pipeline Errors (5xx - processing errors)
    SCRIPT_GENERATION_FAILED = "SCRIPT_GENERATION_FAILED"
    PROMPT_GENERATION_FAILED = "PROMPT_GENERATION_FAILED"
    IMAGE_GENERATION_FAILED = "IMAGE_GENERATION_FAILED"
    VIDEO_GENERATION_FAILED = "VIDEO_GENERATION_FAILED"

    # External API Errors (retryable)
    OPENROUTER_API_ERROR = "OPENROUTER_API_ERROR"
    FAL_API_ERROR = "FAL_API_ERROR"
    API_RATE_LIMIT = "API_RATE_LIMIT"
    API_TIMEOUT = "API_TIMEOUT"
    PROVIDER_NOT_CONFIGURED = "PROVIDER_NOT_CONFIGURED"

    # System Errors
    DATABASE_ERROR = "DATABASE_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


CLIENT_ERROR_CODES = {
    ErrorCode.INVALID_INPUT: 400,
    ErrorCode.MISSING_REQUIRED_FIELD: 400,
    ErrorCode.INVALID_CLIMATE: 400,
    ErrorCode.INVALID_STYLE: 400,
    ErrorCode.INVALID_STATE: 409,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.FORBIDDEN: 403,
}

PROVIDER_ERROR_CODES = {
    ErrorCode.OPENROUTER_API_ERROR,
    ErrorCode.FAL_API_ERROR,
    ErrorCode.API_RATE_LIMIT,
    ErrorCode.API_TIMEOUT,
    ErrorCode.PROVIDER_NOT_CONFIGURED,
}


class PipelineError(Exception):
    """
    Base exception for pipeline errors.

    Provides structured error information including:
    - Error code for categorization
    - Detailed message for logging
    - Context dictionary for debugging
    - User-friendly message for API responses

    Example:
        >>> raise PipelineError(
        ...     ErrorCode.INVALID_INPUT,
        ...     "Premise is required",
        ...     {"field": "premise"}
        ... )
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        user_message: Optional[str] = None
    ):
        """
        Initialize pipeline error.

        Args:
            code: Error code from ErrorCode enum
            message: Detailed error message for logging
            details: Additional context (field names, values, etc.)
            user_message: Optional override for user-friendly message
        """
        self.code = code
        self.message = message
        self.details = details or {}
        self._user_message = user_message
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        """HTTP status the API layer should answer with"""
        if self.code in CLIENT_ERROR_CODES:
            return CLIENT_ERROR_CODES[self.code]
        if self.code in PROVIDER_ERROR_CODES:
            return 502
        return 500

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert error to dictionary for API responses.

        Returns:
            Dictionary with error information
        """
        return {
            "error_code": self.code.value,
            "message": self.message,
            "details": self.details,
            "user_message": self.get_user_friendly_message()
        }

    def get_user_friendly_message(self) -> str:
        """
        Returns user-friendly error message.

        If a custom user message was provided, returns that.
        Otherwise, returns a predefined friendly message based on error code.
        """
        if self._user_message:
            return self._user_message

        friendly_messages = {
            # API Errors
            ErrorCode.INVALID_INPUT: "Please check your input and try again.",
            ErrorCode.MISSING_REQUIRED_FIELD: "Required field is missing. Please check your request.",
            ErrorCode.INVALID_CLIMATE: "This climate combination is not valid. Please review its settings.",
            ErrorCode.INVALID_STYLE: "This style is incomplete. Please review its settings.",
            ErrorCode.INVALID_STATE: "This action is not available in the short's current state.",
            ErrorCode.NOT_FOUND: "The requested item was not found.",
            ErrorCode.FORBIDDEN: "You do not have permission to change this item.",

            # Pipeline Errors
            ErrorCode.SCRIPT_GENERATION_FAILED: "Failed to generate script. Please try again.",
            ErrorCode.PROMPT_GENERATION_FAILED: "Failed to prepare scene prompts. Please try again.",
            ErrorCode.IMAGE_GENERATION_FAILED: "Failed to generate image. Please try again.",
            ErrorCode.VIDEO_GENERATION_FAILED: "Failed to generate video. Please try again.",

            # External API Errors
            ErrorCode.OPENROUTER_API_ERROR: "AI service temporarily unavailable. Please try again in a moment.",
            ErrorCode.FAL_API_ERROR: "Image/video service temporarily unavailable. Please try again.",
            ErrorCode.API_RATE_LIMIT: "Too many requests. Please wait a moment and try again.",
            ErrorCode.API_TIMEOUT: "Request timed out. Please try again.",
            ErrorCode.PROVIDER_NOT_CONFIGURED: "AI provider is not configured. Please contact support.",

            # System Errors
            ErrorCode.DATABASE_ERROR: "Database error occurred. Please try again or contact support.",
            ErrorCode.INTERNAL_ERROR: "An error occurred. Please try again or contact support.",
        }

        return friendly_messages.get(
            self.code,
            "An error occurred. Please try again or contact support."
        )

    def log_error(self) -> None:
        """
        Log error with appropriate level and context.

        - Client errors (4xx): WARNING
        - Retryable errors: WARNING
        - Everything else: ERROR
        """
        log_data = {
            "error_code": self.code.value,
            "message": self.message,
            "details": self.details
        }

        if self.code in CLIENT_ERROR_CODES:
            logger.warning(f"Client error: {log_data}")
        elif should_retry(self):
            logger.warning(f"Retryable error: {log_data}")
        else:
            logger.error(f"Pipeline error: {log_data}")

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


def should_retry(error: Exception) -> bool:
    """
    Determines if an error is transient and worth retrying by the user.

    Example:
        >>> should_retry(PipelineError(ErrorCode.OPENROUTER_API_ERROR, "API down"))
        True
        >>> should_retry(PipelineError(ErrorCode.INVALID_INPUT, "Bad input"))
        False
    """
    transient_error_codes = [
        ErrorCode.OPENROUTER_API_ERROR,
        ErrorCode.FAL_API_ERROR,
        ErrorCode.API_RATE_LIMIT,
        ErrorCode.API_TIMEOUT,
        ErrorCode.DATABASE_ERROR,
    ]

    if isinstance(error, PipelineError):
        return error.code in transient_error_codes

    if isinstance(error, (TimeoutError, ConnectionError)):
        return True

    return False


def categorize_error(error: Exception) -> ErrorCode:
    """
    Categorize a generic exception into an ErrorCode.

    Example:
        >>> categorize_error(TimeoutError())
        <ErrorCode.API_TIMEOUT: 'API_TIMEOUT'>
    """
    if isinstance(error, PipelineError):
        return error.code

    mapping = {
        "TimeoutError": ErrorCode.API_TIMEOUT,
        "ConnectTimeout": ErrorCode.API_TIMEOUT,
        "ReadTimeout": ErrorCode.API_TIMEOUT,
        "ValueError": ErrorCode.INVALID_INPUT,
        "ClimateConfigError": ErrorCode.INVALID_CLIMATE,
        "SQLAlchemyError": ErrorCode.DATABASE_ERROR,
        "OperationalError": ErrorCode.DATABASE_ERROR,
    }

    return mapping.get(type(error).__name__, ErrorCode.INTERNAL_ERROR)


class ValidationError(PipelineError):
    """
    Error for input validation failures.
    """

    def __init__(self, message: str, field: Optional[str] = None, details: Optional[Dict] = None):
        error_details = details or {}
        if field:
            error_details["field"] = field

        super().__init__(
            ErrorCode.INVALID_INPUT,
            message,
            error_details
        )


class APIError(PipelineError):
    """
    Error for external API failures (OpenRouter, fal.ai).
    """

    def __init__(
        self,
        service: str,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Dict] = None
    ):
        """
        Initialize API error.

        Args:
            service: Name of the API service (openrouter, fal)
            message: Error message
            status_code: HTTP status code if available
            details: Additional context
        """
        service_codes = {
            "openrouter": ErrorCode.OPENROUTER_API_ERROR,
            "fal": ErrorCode.FAL_API_ERROR,
        }

        code = service_codes.get(service.lower(), ErrorCode.OPENROUTER_API_ERROR)
        if status_code == 429:
            code = ErrorCode.API_RATE_LIMIT

        error_details = details or {}
        error_details["service"] = service
        if status_code:
            error_details["status_code"] = status_code

        super().__init__(code, message, error_details)
