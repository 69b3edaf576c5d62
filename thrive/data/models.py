# Thrive - Multi-Tenant Assessment Report Platform
# Copyright (c) 2026 George Scott Foley
# ORCID: 0009-0006-4957-0540
# Email: Georgescottfoley@proton.me
# Licensed under the MIT License - see LICENSE file for details

"""
SQLAlchemy ORM models.

Maps directly to the Alembic migration 001:
organizations, users, assessment_cases.

Uses sa.JSON instead of postgresql.JSONB for SQLite compatibility.
UUID columns use String(36) so the same models run on SQLite.
"""

import uuid
from datetime import UTC, datetime

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    mapped_column,
    relationship,
    validates,
)

from thrive_core.security.roles import ModuleType, UserRole


def _new_uuid() -> str:
    return str(uuid.uuid4())


def _new_case_id() -> str:
    return f"case-{uuid.uuid4().hex[:12]}"


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class OrganizationModel(Base):
    __tablename__ = "organizations"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_uuid)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    customer_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    assigned_modules: Mapped[list] = mapped_column(JSON, default=list)
    max_users: Mapped[int] = mapped_column(Integer, default=10)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )
    last_updated: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, server_default=func.now()
    )

    users = relationship("UserModel", back_populates="organization")

    @validates("assigned_modules")
    def _validate_modules(self, key: str, value: list) -> list:
        return [ModuleType(m).value for m in (value or [])]

    def __repr__(self) -> str:
        return f"<Organization {self.id} ({'active' if self.is_active else 'inactive'})>"


class UserModel(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    password: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default=UserRole.CUSTOMER.value)
    assigned_modules: Mapped[list] = mapped_column(JSON, default=list)
    organization_id: Mapped[str | None] = mapped_column(
        String(64), ForeignKey("organizations.id", ondelete="SET NULL"), nullable=True
    )
    customer_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    report_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    max_reports: Mapped[int] = mapped_column(Integer, nullable=False, default=-1)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    reset_token: Mapped[str | None] = mapped_column(String(255), nullable=True)
    reset_token_expiry: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    registration_token: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )
    last_login: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    last_warned_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    anonymized_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    organization = relationship("OrganizationModel", back_populates="users")
    cases = relationship("AssessmentCaseModel", back_populates="created_by")

    @validates("role")
    def _validate_role(self, key: str, value: str) -> str:
        # Rejects unknown roles at write time; legacy aliases are normalized
        return UserRole.parse(value).value

    @validates("assigned_modules")
    def _validate_modules(self, key: str, value: list) -> list:
        return [ModuleType(m).value for m in (value or [])]

    def __repr__(self) -> str:
        return f"<User {self.id} {self.username} ({self.role})>"


class AssessmentCaseModel(Base):
    __tablename__ = "assessment_cases"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_uuid)
    case_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, default=_new_case_id)
    module_type: Mapped[str] = mapped_column(String(30), nullable=False)
    status: Mapped[str] = mapped_column(String(30), default="pending")
    display_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    report_data: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    organization_id: Mapped[str | None] = mapped_column(
        String(64), ForeignKey("organizations.id", ondelete="SET NULL"), nullable=True
    )
    customer_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_by_user_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    created_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )
    last_updated: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, server_default=func.now()
    )

    created_by = relationship("UserModel", back_populates="cases")

    @validates("module_type")
    def _validate_module(self, key: str, value: str) -> str:
        return ModuleType(value).value

    def __repr__(self) -> str:
        return f"<AssessmentCase {self.case_id} ({self.module_type}, {self.status})>"
