# Thrive - Multi-Tenant Assessment Report Platform
# Copyright (c) 2026 George Scott Foley
# ORCID: 0009-0006-4957-0540
# Email: Georgescottfoley@proton.me
# Licensed under the MIT License - see LICENSE file for details

"""
Permission Gate

Evaluates whether a user may act on a module, optionally scoped to an
organization, and returns an Allow/Deny decision with a machine-checkable
reason code.

Rules:
- developer and admin bypass module and organization checks
- prompt / system-config / database editing is developer-only
- org_admin and customer need the module assigned, a matching
  organization, and that organization to be active
- demo needs the module assigned; demo users have no organization, so
  any organization-scoped target is a mismatch

Evaluation is a pure function of the user, the target and the registry
snapshot. It performs no I/O and has no side effects.
"""

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from thrive_core.exceptions.hierarchy import InvalidRoleError, PermissionDeniedError
from thrive_core.security.roles import (
    DEVELOPER_ONLY_CAPABILITIES,
    Capability,
    ModuleType,
    UserRole,
    get_capabilities_for_role,
)

from ..accounts.models import User
from ..accounts.registry import OrganizationRegistry


class DenyReason(StrEnum):
    MODULE_NOT_ASSIGNED = "module_not_assigned"
    ORGANIZATION_MISMATCH = "organization_mismatch"
    ORGANIZATION_INACTIVE = "organization_inactive"
    INSUFFICIENT_ROLE = "insufficient_role"
    ACCOUNT_INACTIVE = "account_inactive"


@dataclass(frozen=True)
class Decision:
    """Result of a permission evaluation."""

    allowed: bool
    reason: DenyReason | None = None
    message: str = ""

    @classmethod
    def allow(cls) -> "Decision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: DenyReason, message: str) -> "Decision":
        return cls(allowed=False, reason=reason, message=message)

    def __bool__(self) -> bool:
        return self.allowed

    def to_dict(self) -> dict[str, Any]:
        return {
            "allowed": self.allowed,
            "reason": self.reason.value if self.reason else None,
            "message": self.message,
        }


class PermissionGate:
    """
    Role- and module-scoped access evaluation across tenant boundaries.

    Usage:
        gate = PermissionGate(registry)
        decision = gate.evaluate(user, ModuleType.K12, target_organization_id="org-1")
        if not decision:
            ...
    """

    def __init__(self, registry: OrganizationRegistry):
        self.registry = registry

    def evaluate(
        self,
        user: User,
        target_module: ModuleType | str,
        target_organization_id: str | None = None,
        capability: Capability | None = None,
    ) -> Decision:
        if not user.is_active:
            return Decision.deny(DenyReason.ACCOUNT_INACTIVE, "Account is inactive")

        try:
            module = ModuleType(target_module)
        except ValueError:
            # Unknown modules are never assigned, for any role
            return Decision.deny(
                DenyReason.MODULE_NOT_ASSIGNED, f"Unknown module {target_module!r}"
            )

        if capability is not None:
            decision = self._check_capability(user, capability)
            if not decision:
                return decision

        role = user.role
        if role in (UserRole.DEVELOPER, UserRole.ADMIN):
            return Decision.allow()
        if role in (UserRole.ORG_ADMIN, UserRole.CUSTOMER):
            return self._evaluate_tenant_member(user, module, target_organization_id)
        if role == UserRole.DEMO:
            return self._evaluate_demo(user, module, target_organization_id)
        raise InvalidRoleError(role)

    def enforce(
        self,
        user: User,
        target_module: ModuleType | str,
        target_organization_id: str | None = None,
        capability: Capability | None = None,
    ) -> None:
        """Evaluate and raise PermissionDeniedError on deny."""
        decision = self.evaluate(user, target_module, target_organization_id, capability)
        if not decision:
            raise PermissionDeniedError(
                decision.message,
                reason=decision.reason.value,
                user_id=user.id,
                target_module=str(target_module),
            )

    def _check_capability(self, user: User, capability: Capability) -> Decision:
        if capability in DEVELOPER_ONLY_CAPABILITIES:
            if user.role != UserRole.DEVELOPER:
                return Decision.deny(
                    DenyReason.INSUFFICIENT_ROLE,
                    f"{capability.value} is restricted to developers",
                )
            return Decision.allow()
        if capability not in get_capabilities_for_role(user.role):
            return Decision.deny(
                DenyReason.INSUFFICIENT_ROLE,
                f"Role {user.role.value} lacks {capability.value}",
            )
        return Decision.allow()

    def _evaluate_tenant_member(
        self, user: User, module: ModuleType, target_organization_id: str | None
    ) -> Decision:
        if module not in user.assigned_modules:
            return Decision.deny(
                DenyReason.MODULE_NOT_ASSIGNED, f"Access denied to {module.value} module"
            )

        if target_organization_id is not None:
            if target_organization_id != user.organization_id:
                return Decision.deny(
                    DenyReason.ORGANIZATION_MISMATCH,
                    "Access denied to resources outside your organization",
                )
            org_id = target_organization_id
        else:
            org_id = user.organization_id

        if org_id is not None and not self.registry.is_active(org_id):
            return Decision.deny(DenyReason.ORGANIZATION_INACTIVE, f"Organization {org_id} is inactive")
        return Decision.allow()

    def _evaluate_demo(
        self, user: User, module: ModuleType, target_organization_id: str | None
    ) -> Decision:
        if module not in user.assigned_modules:
            return Decision.deny(
                DenyReason.MODULE_NOT_ASSIGNED, f"Access denied to {module.value} module"
            )
        if target_organization_id is not None:
            return Decision.deny(
                DenyReason.ORGANIZATION_MISMATCH,
                "Demo accounts cannot access organization resources",
            )
        return Decision.allow()


__all__ = [
    "DenyReason",
    "Decision",
    "PermissionGate",
]
