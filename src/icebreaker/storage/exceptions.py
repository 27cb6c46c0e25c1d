"""Custom exceptions for document store operations.

This module defines a hierarchy of exceptions for the team and user store,
providing clear error categorization and context for error handling.
"""

from typing import Any


class StoreError(Exception):
    """Base exception for all document store errors.

    Attributes:
        message: Human-readable error message.
        container: Container name (e.g., 'TeamsInfo', 'UsersInfo').
        operation: Store operation name (e.g., 'upsert_item').
        status_code: HTTP status code returned by the store, if any.
        details: Additional error context as dictionary.
    """

    def __init__(
        self,
        message: str,
        container: str | None = None,
        operation: str | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize store error with context.

        Args:
            message: Human-readable error message.
            container: Container name. Defaults to None.
            operation: Store operation name. Defaults to None.
            status_code: HTTP status code if available. Defaults to None.
            details: Additional error context. Defaults to None.
        """
        super().__init__(message)
        self.message = message
        self.container = container
        self.operation = operation
        self.status_code = status_code
        self.details = details or {}

    def __str__(self) -> str:
        """Return formatted error string with context."""
        parts = [self.message]
        if self.container:
            parts.append(f"Container: {self.container}")
        if self.operation:
            parts.append(f"Operation: {self.operation}")
        if self.status_code is not None:
            parts.append(f"Status: {self.status_code}")
        return " | ".join(parts)


class RecordNotFoundError(StoreError):
    """Exception raised when a document does not exist.

    Raised by point reads and deletes of an unknown ID. Callers may treat
    it as recoverable.
    """


class StoreInitializationError(StoreError):
    """Exception raised when the store cannot be initialized.

    Initialization failures are permanent for the lifetime of the data
    provider; every dependent operation re-raises the same error.
    """
