"""Project-wide custom exceptions."""

from __future__ import annotations


class DbConsoleError(Exception):
    """Base exception for the database console."""


class ConfigurationError(DbConsoleError):
    """Raised when configuration loading or validation fails."""


class ApiError(DbConsoleError):
    """Raised when the backend API cannot satisfy a request."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class TransportError(ApiError):
    """Raised when the backend could not be reached at all."""


class MalformedResponseError(ApiError):
    """Raised when a backend response is not the JSON shape we expect."""


class InputValidationError(DbConsoleError):
    """Raised when an operator action is missing a required selection or input."""


class ExportError(DbConsoleError):
    """Raised when writing an export file fails."""
