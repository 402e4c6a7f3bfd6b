"""Custom exception hierarchy for blobgate."""

from enum import Enum
from typing import Optional, Dict, Any


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    # Object errors
    OBJECT_NOT_FOUND = "OBJECT_NOT_FOUND"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Storage errors
    STORAGE_ERROR = "STORAGE_ERROR"

    # Auth
    UNAUTHORIZED = "UNAUTHORIZED"


class GatewayException(Exception):
    """
    Base exception for all blobgate errors.

    Provides structured error responses with:
    - Human-readable message
    - Machine-readable error code
    - HTTP status code
    - Optional additional details
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize exception.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
            status_code: HTTP status code to return
            details: Optional additional context/details
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response."""
        return {
            "error": self.error_code.value,
            "message": self.message,
            "details": self.details
        }


class UnauthorizedError(GatewayException):
    """Policy evaluation denied the operation.

    The message is the same whether no rule matched or the caller lacked a
    role, so callers cannot probe the policy.
    """

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(
            message,
            ErrorCode.UNAUTHORIZED,
            status_code=401,
        )


class ObjectNotFoundError(GatewayException):
    """No object exists at an authorized key."""

    def __init__(self, key: str):
        super().__init__(
            "Not found",
            ErrorCode.OBJECT_NOT_FOUND,
            status_code=404,
            details={"key": key}
        )


class ValidationError(GatewayException):
    """Validation failed for user input."""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(
            message,
            ErrorCode.VALIDATION_ERROR,
            status_code=400,
            details=details
        )


class StorageError(GatewayException):
    """Blob or token store operation failed.

    The driver error stays on ``original_error`` for the server log and is
    never copied into the response body.
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        super().__init__(
            message,
            ErrorCode.STORAGE_ERROR,
            status_code=500,
        )
        self.original_error = original_error
