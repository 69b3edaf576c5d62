# Thrive - Multi-Tenant Assessment Report Platform
# Copyright (c) 2026 George Scott Foley
# ORCID: 0009-0006-4957-0540
# Email: Georgescottfoley@proton.me
# Licensed under the MIT License - see LICENSE file for details

"""
Thrive Core - Shared Primitives

This package contains the I/O-free primitives shared by every part of
the Thrive platform:

Modules:
    security: Roles, modules and role capabilities
    exceptions: Structured exception hierarchy
"""

__version__ = "1.0.0"

from .exceptions.hierarchy import (
    ConfigurationError,
    ExportFailureError,
    InvalidRoleError,
    LifecycleError,
    NotFoundError,
    NotificationFailureError,
    PermissionDeniedError,
    QuotaExceededError,
    ThriveError,
)
from .security.roles import (
    DEVELOPER_ONLY_CAPABILITIES,
    ROLE_CAPABILITIES,
    Capability,
    ModuleType,
    UserRole,
    check_capability,
    get_capabilities_for_role,
    module_access_for,
)

__all__ = [
    # Version
    "__version__",
    # Roles
    "UserRole",
    "ModuleType",
    "Capability",
    "DEVELOPER_ONLY_CAPABILITIES",
    "ROLE_CAPABILITIES",
    "get_capabilities_for_role",
    "check_capability",
    "module_access_for",
    # Exceptions
    "ThriveError",
    "NotFoundError",
    "PermissionDeniedError",
    "QuotaExceededError",
    "InvalidRoleError",
    "LifecycleError",
    "ExportFailureError",
    "NotificationFailureError",
    "ConfigurationError",
]
