"""Custom exception classes for the application."""
from typing import Any


class AppException(Exception):
    """Base exception for the application."""

    def __init__(self, message: str, detail: Any = None):
        self.message = message
        self.detail = detail
        super().__init__(message)


class NotFoundError(AppException):
    """Resource not found."""
    pass


class ValidationError(AppException):
    """Malformed input, detected before any network activity."""
    pass


class FetchError(AppException):
    """Page content could not be obtained (direct and proxy fetch both failed)."""
    pass


class ExtractionError(AppException):
    """AI extraction failed or returned unusable content."""
    pass


class ServerError(AppException):
    """The extraction service answered with a non-success status."""

    def __init__(self, message: str, status_code: int | None = None, detail: Any = None):
        self.status_code = status_code
        super().__init__(message, detail)
