"""
Custom exceptions for vercel-source-downloader.

This module defines domain-specific exceptions that categorize failures of
identifier resolution, API access and local file writes. Each class carries
the process exit code the command-line interface uses when the error ends a
run.
"""

from vercel_source.constants import (
    EXIT_CONFIG,
    EXIT_FAILURE,
    EXIT_FILESYSTEM,
    EXIT_NOT_FOUND,
    EXIT_SOURCE_NOT_FOUND,
    EXIT_TRANSPORT,
    EXIT_USAGE,
)


class VercelSourceError(Exception):
    """
    Base exception for all vercel-source-downloader errors.

    All custom exceptions should inherit from this class to allow for easy
    catching of all application-specific errors.
    """

    exit_code = EXIT_FAILURE

    def __init__(self, message: str, details: str | None = None) -> None:
        """
        Initialize the exception.

        Args:
            message: The primary error message.
            details: Optional additional context about the error.
        """
        self.message = message
        self.details = details
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


# =============================================================================
# Configuration and Input Errors
# =============================================================================


class ConfigError(VercelSourceError):
    """Exception raised when the API credential or a setting is missing or invalid."""

    exit_code = EXIT_CONFIG


class InputError(VercelSourceError):
    """
    Exception raised when a required command-line argument is missing.

    Attributes:
        usage_hint: Example invocations shown to the user.
    """

    exit_code = EXIT_USAGE

    def __init__(
        self,
        message: str,
        usage_hint: str | None = None,
        details: str | None = None,
    ) -> None:
        super().__init__(message, details)
        self.usage_hint = usage_hint


# =============================================================================
# API Errors
# =============================================================================


class APIError(VercelSourceError):
    """
    Exception raised for API-related errors.

    This includes:
    - Invalid or unexpected API payloads
    - HTTP and network failures (see TransportError)
    - Identifiers that do not resolve (see ResourceNotFoundError)
    """

    exit_code = EXIT_TRANSPORT

    def __init__(
        self,
        message: str,
        endpoint: str | None = None,
        status_code: int | None = None,
        details: str | None = None,
    ) -> None:
        """
        Initialize the API exception.

        Args:
            message: The primary error message.
            endpoint: The API endpoint that was accessed.
            status_code: The HTTP status code returned.
            details: Optional additional context.
        """
        super().__init__(message, details)
        self.endpoint = endpoint
        self.status_code = status_code


class TransportError(APIError):
    """Exception raised when an HTTP request fails or returns an error status."""

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404


class ResourceNotFoundError(APIError):
    """
    Exception raised when a remote identifier does not resolve.

    Attributes:
        hint: Remediation suggestion shown to the user.
    """

    exit_code = EXIT_NOT_FOUND

    def __init__(
        self,
        message: str,
        hint: str | None = None,
        endpoint: str | None = None,
        status_code: int | None = 404,
    ) -> None:
        super().__init__(message, endpoint=endpoint, status_code=status_code)
        self.hint = hint

    def __str__(self) -> str:
        if self.hint:
            return f"{self.message}\n\n{self.hint}"
        return self.message


class NotFound(ResourceNotFoundError):
    """Exception raised when no deployment exists for a domain."""

    pass


class DeploymentNotFound(ResourceNotFoundError):
    """Exception raised when the file listing for a deployment id returns 404."""

    pass


class SourceNotFound(VercelSourceError):
    """Exception raised when a deployment has no top-level 'src' directory."""

    exit_code = EXIT_SOURCE_NOT_FOUND


# =============================================================================
# File System Errors
# =============================================================================


class FileSystemError(VercelSourceError):
    """
    Exception raised for local file system errors.

    Attributes:
        path: The file path that caused the error.
    """

    exit_code = EXIT_FILESYSTEM

    def __init__(
        self,
        message: str,
        path: str | None = None,
        details: str | None = None,
    ) -> None:
        super().__init__(message, details)
        self.path = path


class WriteError(FileSystemError):
    """Exception raised when a downloaded file cannot be written."""

    pass


class PathValidationError(FileSystemError):
    """Exception raised when a remote entry name is not a safe relative path."""

    pass
