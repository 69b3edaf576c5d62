# Thrive - Multi-Tenant Assessment Report Platform
# Copyright (c) 2026 George Scott Foley
# ORCID: 0009-0006-4957-0540
# Email: Georgescottfoley@proton.me
# Licensed under the MIT License - see LICENSE file for details

"""
Exception Hierarchy

Structured exceptions for the Thrive platform core.
All exceptions include context via `details` dict.
"""

from typing import Any


class ThriveError(Exception):
    """
    Base exception for all Thrive errors.

    Attributes:
        message: Human-readable error message
        details: Additional context as key-value pairs
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


# ============================================================
# LOOKUP ERRORS
# ============================================================


class NotFoundError(ThriveError):
    """Referenced user, organization or resource does not exist."""

    def __init__(self, entity: str, entity_id: Any, **kwargs):
        super().__init__(
            f"{entity} not found: {entity_id}",
            details={"entity": entity, "entity_id": entity_id, **kwargs.get("details", {})},
        )
        self.entity = entity
        self.entity_id = entity_id


# ============================================================
# ACCESS ERRORS
# ============================================================


class PermissionDeniedError(ThriveError):
    """Role, module or organization check failed."""

    def __init__(
        self,
        message: str,
        reason: str,
        user_id: int | None = None,
        target_module: str | None = None,
        **kwargs,
    ):
        details = kwargs.get("details", {})
        details["reason"] = reason
        if user_id is not None:
            details["user_id"] = user_id
        if target_module:
            details["target_module"] = target_module
        super().__init__(message, details)
        self.reason = reason


class QuotaExceededError(ThriveError):
    """Demo report quota reached."""

    def __init__(
        self,
        message: str,
        current: int | None = None,
        limit: int | None = None,
        **kwargs,
    ):
        details = kwargs.get("details", {})
        if current is not None:
            details["current"] = current
        if limit is not None:
            details["limit"] = limit
        super().__init__(message, details)
        self.current = current
        self.limit = limit


class InvalidRoleError(ThriveError):
    """A role string outside the closed role set."""

    def __init__(self, value: Any, **kwargs):
        super().__init__(
            f"Invalid role: {value!r}",
            details={"value": str(value), **kwargs.get("details", {})},
        )


# ============================================================
# LIFECYCLE ERRORS
# ============================================================


class LifecycleError(ThriveError):
    """Base class for demo lifecycle errors."""

    pass


class ExportFailureError(LifecycleError):
    """A user's data could not be snapshotted before cleanup."""

    def __init__(self, user_id: int, original_error: Exception | None = None, **kwargs):
        details = {"user_id": user_id, **kwargs.get("details", {})}
        if original_error:
            details["original_error"] = str(original_error)
        super().__init__(f"Failed to export data for user {user_id}", details)
        self.user_id = user_id


class NotificationFailureError(LifecycleError):
    """An outbound notification could not be delivered."""

    def __init__(self, message: str, recipient: str | None = None, **kwargs):
        details = kwargs.get("details", {})
        if recipient:
            details["recipient"] = recipient
        super().__init__(message, details)


# ============================================================
# CONFIGURATION ERRORS
# ============================================================


class ConfigurationError(ThriveError):
    """Configuration is invalid or missing."""

    pass


# ============================================================
# EXPORTS
# ============================================================

__all__ = [
    # Base
    "ThriveError",
    # Lookup
    "NotFoundError",
    # Access
    "PermissionDeniedError",
    "QuotaExceededError",
    "InvalidRoleError",
    # Lifecycle
    "LifecycleError",
    "ExportFailureError",
    "NotificationFailureError",
    # Configuration
    "ConfigurationError",
]
