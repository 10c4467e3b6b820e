"""
Custom exceptions for the PearDB application.

This module defines domain-specific exceptions that separate catalog
failures (which degrade and get logged) from persistence failures (which
are surfaced to the user).
"""

from typing import Optional


class PeardbError(Exception):
    """
    Base exception for all PearDB errors.

    All custom exceptions in PearDB inherit from this class so callers can
    catch every application-specific error in one place.
    """

    def __init__(self, message: str, details: Optional[str] = None) -> None:
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
# Configuration Errors
# =============================================================================


class ConfigurationError(PeardbError):
    """
    Exception raised when configuration is invalid or missing.

    This includes:
    - Configuration file parsing errors
    - Invalid configuration values
    """

    pass


class ConfigFileError(ConfigurationError):
    """Exception raised when configuration file cannot be read or written."""

    pass


class ConfigValidationError(ConfigurationError):
    """Exception raised when configuration validation fails."""

    pass


# =============================================================================
# Catalog Errors
# =============================================================================


class CatalogError(PeardbError):
    """
    Base exception for failures while reading the remote catalog.

    Attributes:
        url: The catalog URL that was being read.
        status_code: HTTP status code, when the server answered.
    """

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[str] = None,
    ) -> None:
        """
        Initialize the catalog exception.

        Args:
            message: The primary error message.
            url: The URL that was being fetched.
            status_code: The HTTP status code, if any.
            details: Optional additional context.
        """
        super().__init__(message, details)
        self.url = url
        self.status_code = status_code


class NetworkError(CatalogError):
    """
    Exception raised for transport-level catalog failures.

    This includes:
    - Connection timeouts and refused connections
    - DNS resolution failures
    - Non-success HTTP status codes
    - Unsupported URL schemes
    """

    pass


class EmptyResponseError(CatalogError):
    """Exception raised when the catalog answers successfully with an empty body."""

    pass


class DecodeError(CatalogError):
    """Exception raised when a catalog body is not valid JSON or does not match the schema."""

    pass


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(PeardbError):
    """
    Exception raised when a value fails validation.

    Attributes:
        field: The name of the field that failed validation.
        value: The value that failed validation.
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[str] = None,
        details: Optional[str] = None,
    ) -> None:
        super().__init__(message, details)
        self.field = field
        self.value = value


class MissingIdentifierError(ValidationError):
    """Exception raised when a device record carries no base identifier."""

    pass


# =============================================================================
# Persistence Errors
# =============================================================================


class PersistenceError(PeardbError):
    """
    Exception raised when the hardware store rejects a read or write.

    This includes:
    - Entries failing validation before commit
    - I/O failures writing the store file
    - A store file that cannot be parsed
    """

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        details: Optional[str] = None,
    ) -> None:
        """
        Initialize the persistence exception.

        Args:
            message: The primary error message.
            path: The store file involved.
            details: Optional additional context.
        """
        super().__init__(message, details)
        self.path = path
