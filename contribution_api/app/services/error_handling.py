from fastapi import status
from typing import Optional, Dict, Any

class ServiceError(Exception):

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details
        super().__init__(message)

class NotFoundError(ServiceError):
    """
    No matching record for the caller.

    Raised both when the record does not exist and when it belongs to
    another owner, so the message never reveals which case applied.
    """

    def __init__(self, resource_type: str, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message or f"{resource_type.lower()} not found or not owned",
            status_code=status.HTTP_404_NOT_FOUND,
            error_code=f"{resource_type.upper()}_NOT_FOUND",
            details=details
        )

class ValidationError(ServiceError):
    """Validation error for input data."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="VALIDATION_ERROR",
            details=details
        )

class DatabaseError(ServiceError):
    """Database-related errors, including storage deadline expiry."""

    def __init__(self, message: str, original_error: Optional[Exception] = None, details: Optional[Dict[str, Any]] = None):
        error_details = details or {}
        if original_error:
            error_details["error_type"] = type(original_error).__name__

        super().__init__(
            message=message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code="DATABASE_ERROR",
            details=error_details
        )
