# Thrive - Multi-Tenant Assessment Report Platform
# Copyright (c) 2026 George Scott Foley
# ORCID: 0009-0006-4957-0540
# Email: Georgescottfoley@proton.me
# Licensed under the MIT License - see LICENSE file for details

"""
Repository pattern for organization, user and assessment-case storage.

Every repository is constructed with an AsyncSession and provides
typed query methods. Case listings are always scoped by an owning
user or organization; there is no unscoped case listing.
"""

from collections.abc import Iterable, Sequence
from datetime import UTC, datetime

from sqlalchemy import and_, delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from thrive_core.security.roles import UserRole

from .models import AssessmentCaseModel, OrganizationModel, UserModel

# Scrubbed-field values written when a demo account is anonymized
ANONYMIZED_PASSWORD = "ACCOUNT_EXPIRED"
ANONYMIZED_EMAIL_DOMAIN = "demo.expired"


def _utcnow() -> datetime:
    return datetime.now(UTC)


def anonymized_email(user_id: int) -> str:
    return f"deleted_{user_id}@{ANONYMIZED_EMAIL_DOMAIN}"


def anonymized_username(user_id: int) -> str:
    return f"deleted_{user_id}"


# ---------------------------------------------------------------------------
# OrganizationRepository
# ---------------------------------------------------------------------------


class OrganizationRepository:
    """CRUD for the organizations table."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self,
        name: str,
        assigned_modules: Iterable[str] = (),
        max_users: int = 10,
        customer_id: str | None = None,
        is_active: bool = True,
        org_id: str | None = None,
    ) -> OrganizationModel:
        org = OrganizationModel(
            name=name,
            assigned_modules=list(assigned_modules),
            max_users=max_users,
            customer_id=customer_id,
            is_active=is_active,
        )
        if org_id is not None:
            org.id = org_id
        self.session.add(org)
        await self.session.flush()
        return org

    async def get_by_id(self, org_id: str) -> OrganizationModel | None:
        result = await self.session.execute(
            select(OrganizationModel).where(OrganizationModel.id == org_id)
        )
        return result.scalar_one_or_none()

    async def list_all(self) -> Sequence[OrganizationModel]:
        result = await self.session.execute(select(OrganizationModel))
        return result.scalars().all()

    async def set_active(self, org: OrganizationModel, is_active: bool) -> OrganizationModel:
        org.is_active = is_active
        org.last_updated = _utcnow()
        await self.session.flush()
        return org

    async def count_users(self, org_id: str) -> int:
        result = await self.session.execute(
            select(func.count(UserModel.id)).where(UserModel.organization_id == org_id)
        )
        return result.scalar_one()


# ---------------------------------------------------------------------------
# UserRepository
# ---------------------------------------------------------------------------


class UserRepository:
    """CRUD for the users table, including the atomic report counter."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self,
        username: str,
        email: str,
        password: str,
        role: UserRole | str = UserRole.CUSTOMER,
        assigned_modules: Iterable[str] = (),
        organization_id: str | None = None,
        customer_id: str | None = None,
        report_count: int = 0,
        max_reports: int = -1,
        is_active: bool = True,
        created_at: datetime | None = None,
    ) -> UserModel:
        user = UserModel(
            username=username,
            email=email,
            password=password,
            role=role,
            assigned_modules=list(assigned_modules),
            organization_id=organization_id,
            customer_id=customer_id,
            report_count=report_count,
            max_reports=max_reports,
            is_active=is_active,
        )
        if created_at is not None:
            user.created_at = created_at
        self.session.add(user)
        await self.session.flush()
        return user

    async def get_by_id(self, user_id: int) -> UserModel | None:
        result = await self.session.execute(select(UserModel).where(UserModel.id == user_id))
        return result.scalar_one_or_none()

    async def list_by_role(self, role: UserRole, active_only: bool = False) -> Sequence[UserModel]:
        conditions = [UserModel.role == role.value]
        if active_only:
            conditions.append(UserModel.is_active.is_(True))
        result = await self.session.execute(
            select(UserModel).where(and_(*conditions)).order_by(UserModel.id)
        )
        return result.scalars().all()

    async def increment_report_count(self, user_id: int, demo_limit: int) -> int | None:
        """
        Conditionally increment a user's report counter in one statement.

        Demo users are only incremented while below demo_limit; every other
        role is always incremented. Returns the new count, or None when the
        condition was not met (or the user does not exist).
        """
        result = await self.session.execute(
            update(UserModel)
            .where(
                and_(
                    UserModel.id == user_id,
                    or_(
                        UserModel.role != UserRole.DEMO.value,
                        UserModel.report_count < demo_limit,
                    ),
                )
            )
            .values(report_count=UserModel.report_count + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            return None
        return await self.get_report_count(user_id)

    async def get_report_count(self, user_id: int) -> int | None:
        result = await self.session.execute(
            select(UserModel.report_count).where(UserModel.id == user_id)
        )
        return result.scalar_one_or_none()

    async def reset_report_count(self, user_id: int, max_reports: int) -> bool:
        result = await self.session.execute(
            update(UserModel)
            .where(UserModel.id == user_id)
            .values(report_count=0, max_reports=max_reports)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def mark_warned(self, user_id: int, warned_at: datetime) -> None:
        await self.session.execute(
            update(UserModel)
            .where(UserModel.id == user_id)
            .values(last_warned_at=warned_at)
            .execution_options(synchronize_session=False)
        )

    async def anonymize_and_deactivate(self, user_id: int, anonymized_at: datetime) -> bool:
        """
        Scrub PII and deactivate an account that is still active.

        The is_active condition makes this a claim: only one caller can
        transition a given user, so repeated or overlapping cleanups
        never double-process an account. Returns True if this call
        performed the transition.
        """
        result = await self.session.execute(
            update(UserModel)
            .where(and_(UserModel.id == user_id, UserModel.is_active.is_(True)))
            .values(
                is_active=False,
                username=anonymized_username(user_id),
                email=anonymized_email(user_id),
                password=ANONYMIZED_PASSWORD,
                reset_token=None,
                reset_token_expiry=None,
                registration_token=None,
                anonymized_at=anonymized_at,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def count_by_role(self, role: UserRole) -> int:
        result = await self.session.execute(
            select(func.count(UserModel.id)).where(UserModel.role == role.value)
        )
        return result.scalar_one()


# ---------------------------------------------------------------------------
# AssessmentCaseRepository
# ---------------------------------------------------------------------------


class AssessmentCaseRepository:
    """CRUD for the assessment_cases table."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self,
        module_type: str,
        created_by_user_id: int | None,
        display_name: str | None = None,
        report_data: dict | None = None,
        organization_id: str | None = None,
        customer_id: str | None = None,
        status: str = "pending",
    ) -> AssessmentCaseModel:
        case = AssessmentCaseModel(
            module_type=module_type,
            created_by_user_id=created_by_user_id,
            display_name=display_name,
            report_data=report_data,
            organization_id=organization_id,
            customer_id=customer_id,
            status=status,
        )
        self.session.add(case)
        await self.session.flush()
        return case

    async def get_by_id(self, case_id: str) -> AssessmentCaseModel | None:
        result = await self.session.execute(
            select(AssessmentCaseModel).where(AssessmentCaseModel.id == case_id)
        )
        return result.scalar_one_or_none()

    async def list_for_user(self, user_id: int) -> Sequence[AssessmentCaseModel]:
        result = await self.session.execute(
            select(AssessmentCaseModel)
            .where(AssessmentCaseModel.created_by_user_id == user_id)
            .order_by(AssessmentCaseModel.created_date)
        )
        return result.scalars().all()

    async def list_for_organization(self, organization_id: str) -> Sequence[AssessmentCaseModel]:
        result = await self.session.execute(
            select(AssessmentCaseModel)
            .where(AssessmentCaseModel.organization_id == organization_id)
            .order_by(AssessmentCaseModel.created_date)
        )
        return result.scalars().all()

    async def count_for_user(self, user_id: int) -> int:
        result = await self.session.execute(
            select(func.count(AssessmentCaseModel.id)).where(
                AssessmentCaseModel.created_by_user_id == user_id
            )
        )
        return result.scalar_one()

    async def count_for_role(self, role: UserRole) -> int:
        result = await self.session.execute(
            select(func.count(AssessmentCaseModel.id))
            .join(UserModel, AssessmentCaseModel.created_by_user_id == UserModel.id)
            .where(UserModel.role == role.value)
        )
        return result.scalar_one()

    async def delete_for_user(self, user_id: int, case_ids: Iterable[str] | None = None) -> int:
        """
        Delete cases created by the user.

        With case_ids, only those cases are deleted; cases the user
        created outside that set are left in place.
        """
        conditions = [AssessmentCaseModel.created_by_user_id == user_id]
        if case_ids is not None:
            ids = list(case_ids)
            if not ids:
                return 0
            conditions.append(AssessmentCaseModel.id.in_(ids))
        result = await self.session.execute(
            delete(AssessmentCaseModel)
            .where(and_(*conditions))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount


__all__ = [
    "ANONYMIZED_PASSWORD",
    "ANONYMIZED_EMAIL_DOMAIN",
    "anonymized_email",
    "anonymized_username",
    "OrganizationRepository",
    "UserRepository",
    "AssessmentCaseRepository",
]
