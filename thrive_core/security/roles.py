# Thrive - Multi-Tenant Assessment Report Platform
# Copyright (c) 2026 George Scott Foley
# ORCID: 0009-0006-4957-0540
# Email: Georgescottfoley@proton.me
# Licensed under the MIT License - see LICENSE file for details

"""
Role and Capability Model

Closed vocabulary of user roles, product modules and the capabilities
each role is granted by default. Shared by the permission gate, the
quota enforcer and the persistence layer's write-time validation.
"""

from enum import StrEnum
from typing import Any

from ..exceptions.hierarchy import InvalidRoleError

# Legacy stored role strings and the role they now mean
LEGACY_ROLE_ALIASES: dict[str, str] = {
    "system_admin": "admin",
}


class UserRole(StrEnum):
    DEVELOPER = "developer"
    ADMIN = "admin"
    ORG_ADMIN = "org_admin"
    CUSTOMER = "customer"
    DEMO = "demo"

    @classmethod
    def _missing_(cls, value: object) -> "UserRole | None":
        if isinstance(value, str):
            normalized = value.strip().lower()
            normalized = LEGACY_ROLE_ALIASES.get(normalized, normalized)
            for member in cls:
                if member.value == normalized:
                    return member
        return None

    @classmethod
    def parse(cls, value: Any) -> "UserRole":
        """Parse a stored role string, raising InvalidRoleError for unknown values."""
        try:
            return cls(value)
        except ValueError:
            raise InvalidRoleError(value) from None

    @property
    def is_platform_admin(self) -> bool:
        """Developer and admin bypass module and organization checks."""
        return self in (UserRole.DEVELOPER, UserRole.ADMIN)


class ModuleType(StrEnum):
    K12 = "k12"
    POST_SECONDARY = "post_secondary"
    TUTORING = "tutoring"


class Capability(StrEnum):
    # Modules
    SWITCH_MODULES = "modules:switch"
    # Admin dashboard
    ACCESS_ADMIN_DASHBOARD = "admin:dashboard"
    VIEW_SYSTEM_ANALYTICS = "admin:analytics"
    VIEW_ALL_REPORTS = "reports:view_all"
    # System configuration
    EDIT_PROMPTS = "prompts:edit"
    EDIT_SYSTEM_CONFIG = "system_config:edit"
    VIEW_DATABASE_TABLES = "database:view"
    EDIT_DATABASE_TABLES = "database:edit"
    # User management
    MANAGE_USERS = "users:manage"
    MANAGE_ORGANIZATIONS = "organizations:manage"
    VIEW_ORG_USERS = "users:view_org"
    EDIT_ORG_USERS = "users:edit_org"
    # Reports
    CREATE_REPORTS = "reports:create"
    VIEW_OWN_REPORTS = "reports:view_own"
    VIEW_ORG_REPORTS = "reports:view_org"
    EDIT_OWN_REPORTS = "reports:edit_own"
    EDIT_ORG_REPORTS = "reports:edit_org"
    SHARE_REPORTS = "reports:share"
    # Demo
    UPGRADE_ACCOUNT = "account:upgrade"


# Capabilities only a developer may exercise, even where an admin has module access
DEVELOPER_ONLY_CAPABILITIES: frozenset[Capability] = frozenset(
    {
        Capability.EDIT_PROMPTS,
        Capability.EDIT_SYSTEM_CONFIG,
        Capability.EDIT_DATABASE_TABLES,
    }
)

_BASE_CAPABILITIES: frozenset[Capability] = frozenset(
    {
        Capability.CREATE_REPORTS,
        Capability.VIEW_OWN_REPORTS,
        Capability.EDIT_OWN_REPORTS,
        Capability.SHARE_REPORTS,
    }
)

_ORG_MANAGEMENT: frozenset[Capability] = frozenset(
    {
        Capability.VIEW_ORG_USERS,
        Capability.EDIT_ORG_USERS,
        Capability.MANAGE_USERS,
        Capability.VIEW_ORG_REPORTS,
        Capability.EDIT_ORG_REPORTS,
    }
)

ROLE_CAPABILITIES: dict[UserRole, frozenset[Capability]] = {
    UserRole.DEVELOPER: frozenset(set(Capability) - {Capability.UPGRADE_ACCOUNT}),
    UserRole.ADMIN: _BASE_CAPABILITIES
    | _ORG_MANAGEMENT
    | frozenset(
        {
            Capability.SWITCH_MODULES,
            Capability.ACCESS_ADMIN_DASHBOARD,
            Capability.VIEW_SYSTEM_ANALYTICS,
            Capability.VIEW_ALL_REPORTS,
            Capability.MANAGE_ORGANIZATIONS,
        }
    ),
    UserRole.ORG_ADMIN: _BASE_CAPABILITIES | _ORG_MANAGEMENT,
    UserRole.CUSTOMER: _BASE_CAPABILITIES,
    UserRole.DEMO: _BASE_CAPABILITIES | frozenset({Capability.UPGRADE_ACCOUNT}),
}


def get_capabilities_for_role(role: UserRole) -> frozenset[Capability]:
    """Get default capabilities for a role."""
    return ROLE_CAPABILITIES.get(role, frozenset())


def check_capability(required: Capability, role: UserRole) -> bool:
    """Check if a role holds a required capability."""
    if required in DEVELOPER_ONLY_CAPABILITIES:
        return role == UserRole.DEVELOPER
    return required in get_capabilities_for_role(role)


def module_access_for(role: UserRole, assigned_modules: "frozenset[ModuleType] | set[ModuleType]") -> frozenset[ModuleType]:
    """Modules a role may use: all of them for platform admins, else the assigned set."""
    if role.is_platform_admin:
        return frozenset(ModuleType)
    return frozenset(assigned_modules)


__all__ = [
    "LEGACY_ROLE_ALIASES",
    "UserRole",
    "ModuleType",
    "Capability",
    "DEVELOPER_ONLY_CAPABILITIES",
    "ROLE_CAPABILITIES",
    "get_capabilities_for_role",
    "check_capability",
    "module_access_for",
]
