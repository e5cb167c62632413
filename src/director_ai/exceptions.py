"""
Director.AI exceptions.

Every failure the pipeline can surface is one of these classes. Gateway
errors carry an ``ErrorCode`` so a front-end can react to the category
(for example, re-prompt for a key on ``CREDENTIAL``) instead of parsing
messages.
"""

from enum import Enum
from typing import Optional

FALLBACK_MESSAGE = "Production halted due to an internal error."


class ErrorCode(str, Enum):
    """Category of a pipeline failure."""

    VALIDATION = "VALIDATION"
    CONFIGURATION = "CONFIGURATION"
    CREDENTIAL = "CREDENTIAL"
    CONTENT_POLICY = "CONTENT_POLICY"
    EMPTY_RESPONSE = "EMPTY_RESPONSE"
    TIMEOUT = "TIMEOUT"
    CANCELLED = "CANCELLED"
    UNKNOWN = "UNKNOWN"


class DirectorError(Exception):
    """Base exception for all Director.AI errors."""

    code = ErrorCode.UNKNOWN

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        return self.message


# =============================================================================
# INPUT / CONFIGURATION ERRORS
# =============================================================================

class InputValidationError(DirectorError):
    """Raised when user input is missing or malformed."""

    code = ErrorCode.VALIDATION


class ConfigurationError(DirectorError):
    """Raised when there's an issue with configuration."""

    code = ErrorCode.CONFIGURATION


class InvalidConfigError(ConfigurationError):
    """Raised when a configuration value is invalid."""
    pass


# =============================================================================
# GATEWAY ERRORS
# =============================================================================

class GatewayError(DirectorError):
    """Raised when a call to the generation API fails."""

    def __init__(self, message: Optional[str] = None, details: Optional[dict] = None):
        super().__init__(message or FALLBACK_MESSAGE, details)


class CredentialError(GatewayError):
    """Raised when the API key is missing or rejected."""

    code = ErrorCode.CREDENTIAL


class ContentPolicyError(GatewayError):
    """Raised when the model refuses a request on safety grounds."""

    code = ErrorCode.CONTENT_POLICY

    def __init__(self, message: str, reason: Optional[str] = None):
        details = {"reason": reason} if reason else {}
        super().__init__(message, details)

    @property
    def is_content_block(self) -> bool:
        return True


class EmptyResponseError(GatewayError):
    """Raised when a call succeeds but carries no usable payload."""

    code = ErrorCode.EMPTY_RESPONSE


class GenerationTimeoutError(GatewayError):
    """Raised when a long-running generation exceeds its polling budget."""

    code = ErrorCode.TIMEOUT

    def __init__(self, operation: str, attempts: int, elapsed: float):
        message = (
            f"Video generation did not finish after {attempts} polls "
            f"({elapsed:.0f}s). Please try again."
        )
        super().__init__(message, {"operation": operation, "attempts": attempts})


class GenerationCancelledError(GatewayError):
    """Raised when a long-running generation is cancelled by the user."""

    code = ErrorCode.CANCELLED

    def __init__(self, operation: str):
        super().__init__("Video generation was cancelled.", {"operation": operation})


def error_message_for(exc: BaseException) -> str:
    """Return the user-facing message for an exception."""
    message = getattr(exc, "message", None) or str(exc)
    return message or FALLBACK_MESSAGE
