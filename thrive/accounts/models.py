# Thrive - Multi-Tenant Assessment Report Platform
# Copyright (c) 2026 George Scott Foley
# ORCID: 0009-0006-4957-0540
# Email: Georgescottfoley@proton.me
# Licensed under the MIT License - see LICENSE file for details

"""
Account domain types.

Immutable snapshots of users, organizations and assessment cases as the
permission gate, quota enforcer and lifecycle scheduler see them. They
are built from ORM rows with from_model() so no service holds a live
session-bound object.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from thrive_core.security.roles import ModuleType, UserRole

from ..data.models import AssessmentCaseModel, OrganizationModel, UserModel
from ..data.repositories import (
    ANONYMIZED_PASSWORD,
    anonymized_email,
    anonymized_username,
)

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(UTC)


def ensure_utc(value: datetime | None) -> datetime | None:
    """SQLite drops tzinfo on round trip; stored timestamps are always UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class AccountState(StrEnum):
    ACTIVE = "active"
    DEACTIVATED = "deactivated"
    ANONYMIZED = "anonymized"


@dataclass(frozen=True)
class User:
    """Resolved identity handed to the core by the authentication layer."""

    id: int
    username: str
    email: str
    role: UserRole
    organization_id: str | None = None
    assigned_modules: frozenset[ModuleType] = field(default_factory=frozenset)
    report_count: int = 0
    max_reports: int = -1
    is_active: bool = True
    created_at: datetime = field(default_factory=utcnow)
    last_login: datetime | None = None
    customer_id: str | None = None
    last_warned_at: datetime | None = None
    anonymized_at: datetime | None = None

    @classmethod
    def from_model(cls, model: UserModel) -> "User":
        return cls(
            id=model.id,
            username=model.username,
            email=model.email,
            role=UserRole.parse(model.role),
            organization_id=model.organization_id,
            assigned_modules=frozenset(ModuleType(m) for m in (model.assigned_modules or [])),
            report_count=model.report_count or 0,
            max_reports=model.max_reports if model.max_reports is not None else -1,
            is_active=bool(model.is_active),
            created_at=ensure_utc(model.created_at) or utcnow(),
            last_login=ensure_utc(model.last_login),
            customer_id=model.customer_id,
            last_warned_at=ensure_utc(model.last_warned_at),
            anonymized_at=ensure_utc(model.anonymized_at),
        )

    @property
    def is_demo(self) -> bool:
        return self.role == UserRole.DEMO

    @property
    def account_state(self) -> AccountState:
        if self.anonymized_at is not None:
            return AccountState.ANONYMIZED
        if not self.is_active:
            return AccountState.DEACTIVATED
        return AccountState.ACTIVE

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "role": self.role.value,
            "organization_id": self.organization_id,
            "assigned_modules": sorted(m.value for m in self.assigned_modules),
            "report_count": self.report_count,
            "max_reports": self.max_reports,
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat(),
            "account_state": self.account_state.value,
        }


def pii_violations(model: UserModel) -> list[str]:
    """
    Check the anonymized-account post-condition.

    Returns the fields that still hold readable PII or an active flag;
    an empty list means the account is fully anonymized.
    """
    violations = []
    if model.email != anonymized_email(model.id):
        violations.append("email")
    if model.username != anonymized_username(model.id):
        violations.append("username")
    if model.password != ANONYMIZED_PASSWORD:
        violations.append("password")
    if model.reset_token is not None:
        violations.append("reset_token")
    if model.reset_token_expiry is not None:
        violations.append("reset_token_expiry")
    if model.registration_token is not None:
        violations.append("registration_token")
    if model.is_active:
        violations.append("is_active")
    return violations


def is_anonymized(model: UserModel) -> bool:
    return not pii_violations(model)


@dataclass(frozen=True)
class Organization:
    id: str
    name: str
    assigned_modules: frozenset[ModuleType] = field(default_factory=frozenset)
    max_users: int = 10
    is_active: bool = True
    customer_id: str | None = None

    @classmethod
    def from_model(cls, model: OrganizationModel) -> "Organization":
        return cls(
            id=model.id,
            name=model.name,
            assigned_modules=frozenset(ModuleType(m) for m in (model.assigned_modules or [])),
            max_users=model.max_users if model.max_users is not None else 10,
            is_active=bool(model.is_active),
            customer_id=model.customer_id,
        )


@dataclass(frozen=True)
class AssessmentCase:
    id: str
    case_id: str
    module_type: ModuleType
    status: str
    created_by_user_id: int | None
    created_date: datetime
    display_name: str | None = None
    report_data: dict | None = None
    organization_id: str | None = None
    customer_id: str | None = None

    @classmethod
    def from_model(cls, model: AssessmentCaseModel) -> "AssessmentCase":
        return cls(
            id=model.id,
            case_id=model.case_id,
            module_type=ModuleType(model.module_type),
            status=model.status,
            created_by_user_id=model.created_by_user_id,
            created_date=ensure_utc(model.created_date) or utcnow(),
            display_name=model.display_name,
            report_data=model.report_data,
            organization_id=model.organization_id,
            customer_id=model.customer_id,
        )


__all__ = [
    "Clock",
    "utcnow",
    "ensure_utc",
    "AccountState",
    "User",
    "pii_violations",
    "is_anonymized",
    "Organization",
    "AssessmentCase",
]
