# Thrive - Multi-Tenant Assessment Report Platform
# Copyright (c) 2026 George Scott Foley
# ORCID: 0009-0006-4957-0540
# Email: Georgescottfoley@proton.me
# Licensed under the MIT License - see LICENSE file for details

"""
Resource/action access matrix.

Maps (resource, action) pairs onto the role capability table for the
admin surfaces: reports, users, organizations, system config, prompts
and database tables. Complements PermissionGate, which answers the
module / organization question.
"""

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from thrive_core.security.roles import (
    Capability,
    ModuleType,
    UserRole,
    check_capability,
    module_access_for,
)

from ..accounts.models import User


class ResourceType(StrEnum):
    MODULES = "modules"
    REPORTS = "reports"
    ADMIN = "admin"
    USERS = "users"
    ORGANIZATIONS = "organizations"
    SYSTEM_CONFIG = "system_config"
    PROMPTS = "prompts"
    DATABASE = "database"


class ActionType(StrEnum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    SWITCH = "switch"
    MANAGE = "manage"
    VIEW = "view"
    EDIT = "edit"
    SHARE = "share"


class AccessDeniedCode(StrEnum):
    INSUFFICIENT_PERMISSIONS = "insufficient_permissions"
    MODULE_ACCESS_DENIED = "module_access_denied"
    DEMO_LIMIT_EXCEEDED = "demo_limit_exceeded"
    ORGANIZATION_ACCESS_DENIED = "organization_access_denied"


@dataclass
class AccessContext:
    """Optional facts about the target of an access check."""

    organization_id: str | None = None
    module_type: ModuleType | None = None
    is_own_report: bool = False
    is_org_report: bool = False
    is_org_user: bool = False
    current_report_count: int | None = None


@dataclass(frozen=True)
class AccessResult:
    allowed: bool
    code: AccessDeniedCode | None = None
    message: str = ""
    details: dict[str, Any] | None = None

    def __bool__(self) -> bool:
        return self.allowed

    def to_dict(self) -> dict[str, Any]:
        return {
            "allowed": self.allowed,
            "code": self.code.value if self.code else None,
            "message": self.message,
            "details": self.details or {},
        }


_READ_ACTIONS = (ActionType.READ, ActionType.VIEW)
_WRITE_ACTIONS = (ActionType.UPDATE, ActionType.EDIT)


class PermissionMatrix:
    """Resource/action checks against role capabilities."""

    def __init__(self, demo_report_limit: int, upgrade_url: str = "/upgrade"):
        self.demo_report_limit = demo_report_limit
        self.upgrade_url = upgrade_url

    def check_access(
        self,
        user: User,
        resource: ResourceType | str,
        action: ActionType | str,
        context: AccessContext | None = None,
    ) -> AccessResult:
        context = context or AccessContext()
        try:
            resource = ResourceType(resource)
            action = ActionType(action)
        except ValueError:
            return self._insufficient(resource, action)

        if not user.is_active:
            return self._insufficient(resource, action)

        if (
            context.organization_id is not None
            and not user.role.is_platform_admin
            and context.organization_id != user.organization_id
        ):
            return AccessResult(
                allowed=False,
                code=AccessDeniedCode.ORGANIZATION_ACCESS_DENIED,
                message="Access denied to resources outside your organization",
                details={
                    "requested_organization": context.organization_id,
                    "user_organization": user.organization_id,
                },
            )

        if self._evaluate(user, resource, action, context):
            return AccessResult(allowed=True)

        if resource == ResourceType.MODULES and context.module_type is not None:
            return AccessResult(
                allowed=False,
                code=AccessDeniedCode.MODULE_ACCESS_DENIED,
                message=f"Access denied to {context.module_type} module",
                details={
                    "requested_module": str(context.module_type),
                    "assigned_modules": sorted(m.value for m in user.assigned_modules),
                },
            )
        if resource == ResourceType.REPORTS and action == ActionType.CREATE and user.is_demo:
            return AccessResult(
                allowed=False,
                code=AccessDeniedCode.DEMO_LIMIT_EXCEEDED,
                message="Demo user report limit exceeded",
                details={
                    "current_count": self._report_count(user, context),
                    "limit": self.demo_report_limit,
                    "upgrade_url": self.upgrade_url,
                },
            )
        return self._insufficient(resource, action)

    def _insufficient(self, resource: Any, action: Any) -> AccessResult:
        return AccessResult(
            allowed=False,
            code=AccessDeniedCode.INSUFFICIENT_PERMISSIONS,
            message=f"Insufficient permissions to {action} {resource}",
            details={"required_permission": f"{action}_{resource}"},
        )

    def _report_count(self, user: User, context: AccessContext) -> int:
        if context.current_report_count is not None:
            return context.current_report_count
        return user.report_count

    def _evaluate(
        self, user: User, resource: ResourceType, action: ActionType, context: AccessContext
    ) -> bool:
        role = user.role

        def has(capability: Capability) -> bool:
            return check_capability(capability, role)

        if resource == ResourceType.MODULES:
            if action == ActionType.SWITCH:
                return has(Capability.SWITCH_MODULES)
            if action in _READ_ACTIONS:
                modules = module_access_for(role, user.assigned_modules)
                if context.module_type is not None:
                    return ModuleType(context.module_type) in modules
                return bool(modules)
            return False

        if resource == ResourceType.REPORTS:
            if action == ActionType.CREATE:
                if role == UserRole.DEMO:
                    return self._report_count(user, context) < self.demo_report_limit
                return has(Capability.CREATE_REPORTS)
            if action in _READ_ACTIONS:
                if context.is_own_report:
                    return has(Capability.VIEW_OWN_REPORTS)
                if context.is_org_report:
                    return has(Capability.VIEW_ORG_REPORTS)
                return has(Capability.VIEW_ALL_REPORTS)
            if action in _WRITE_ACTIONS:
                if context.is_own_report:
                    return has(Capability.EDIT_OWN_REPORTS)
                if context.is_org_report:
                    return has(Capability.EDIT_ORG_REPORTS)
                return has(Capability.VIEW_ALL_REPORTS)
            if action == ActionType.SHARE:
                return has(Capability.SHARE_REPORTS)
            return False

        if resource == ResourceType.ADMIN:
            if action in _READ_ACTIONS:
                return has(Capability.ACCESS_ADMIN_DASHBOARD)
            if action == ActionType.MANAGE:
                return has(Capability.VIEW_SYSTEM_ANALYTICS)
            return False

        if resource == ResourceType.USERS:
            if action == ActionType.VIEW:
                if context.is_org_user:
                    return has(Capability.VIEW_ORG_USERS)
                return has(Capability.MANAGE_USERS)
            if action in (ActionType.MANAGE, ActionType.CREATE, ActionType.UPDATE, ActionType.DELETE):
                if context.is_org_user:
                    return has(Capability.EDIT_ORG_USERS)
                return has(Capability.MANAGE_USERS)
            return False

        if resource == ResourceType.ORGANIZATIONS:
            if action in (
                ActionType.VIEW,
                ActionType.READ,
                ActionType.MANAGE,
                ActionType.CREATE,
                ActionType.UPDATE,
                ActionType.DELETE,
            ):
                return has(Capability.MANAGE_ORGANIZATIONS)
            return False

        if resource == ResourceType.SYSTEM_CONFIG:
            if action in _READ_ACTIONS:
                return has(Capability.EDIT_SYSTEM_CONFIG) or has(Capability.VIEW_DATABASE_TABLES)
            if action in _WRITE_ACTIONS:
                return has(Capability.EDIT_SYSTEM_CONFIG)
            return False

        if resource == ResourceType.PROMPTS:
            if action in _READ_ACTIONS:
                return has(Capability.EDIT_PROMPTS) or has(Capability.EDIT_SYSTEM_CONFIG)
            if action in _WRITE_ACTIONS:
                return has(Capability.EDIT_PROMPTS)
            return False

        if resource == ResourceType.DATABASE:
            if action in _READ_ACTIONS:
                return has(Capability.VIEW_DATABASE_TABLES)
            if action in (*_WRITE_ACTIONS, ActionType.CREATE, ActionType.DELETE):
                return has(Capability.EDIT_DATABASE_TABLES)
            return False

        return False


__all__ = [
    "ResourceType",
    "ActionType",
    "AccessDeniedCode",
    "AccessContext",
    "AccessResult",
    "PermissionMatrix",
]
