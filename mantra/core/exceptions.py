"""
Core Exceptions
================

Custom exceptions for the application following clean architecture principles.

These exceptions define domain-specific errors that can be caught and handled
appropriately at the application boundaries.
"""

from typing import Any, Optional


class ApplicationException(Exception):
    """Base exception for all application errors."""

    status_code = 500

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class DomainException(ApplicationException):
    """Base exception for domain logic violations."""

    status_code = 409


class RepositoryException(ApplicationException):
    """Base exception for repository/data access errors."""


class ValidationException(ApplicationException):
    """Exception for validation errors."""

    status_code = 422


class ResourceNotFoundException(ApplicationException):
    """Exception when a requested resource is not found."""

    status_code = 404

    def __init__(
        self,
        resource_type: str,
        resource_id: Optional[str] = None,
        details: Optional[dict] = None
    ):
        self.resource_type = resource_type
        self.resource_id = resource_id
        message = f"{resource_type}"
        if resource_id:
            message += f" with id '{resource_id}'"
        message += " not found"
        super().__init__(message, details)


class ConfigurationException(ApplicationException):
    """Exception for configuration errors."""


class InvalidTimestampException(ValidationException):
    """Raised when an instant cannot be parsed."""

    def __init__(self, value: Any, details: Optional[dict] = None):
        self.value = value
        super().__init__(
            f"Invalid timestamp: {value!r}",
            details or {"value": repr(value)}
        )


class AuthenticationException(ApplicationException):
    """Raised when an action needs an authenticated session."""

    status_code = 401


class PermissionDeniedException(ApplicationException):
    """Raised when the session's user may not perform an action."""

    status_code = 403


class SessionStateException(DomainException):
    """Raised on an invalid session lifecycle transition."""

    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(
            f"Invalid session transition: {current} -> {target}",
            {"current": current, "target": target}
        )
