"""
Tests for ORM models, repositories and domain snapshots.
"""

from datetime import timedelta

import pytest

from thrive.accounts.models import AccountState, User, ensure_utc, is_anonymized, pii_violations
from thrive.data.models import AssessmentCaseModel, UserModel
from thrive.data.repositories import AssessmentCaseRepository, OrganizationRepository, UserRepository
from thrive_core.exceptions.hierarchy import InvalidRoleError
from thrive_core.security.roles import ModuleType, UserRole

from conftest import T0


class TestModelValidation:
    def test_unknown_role_rejected_at_write(self):
        with pytest.raises(InvalidRoleError):
            UserModel(username="x", email="x@example.com", password="p", role="superuser")

    def test_legacy_role_normalized(self):
        user = UserModel(username="x", email="x@example.com", password="p", role="system_admin")
        assert user.role == "admin"

    def test_unknown_module_rejected(self):
        with pytest.raises(ValueError):
            UserModel(username="x", email="x@example.com", password="p", assigned_modules=["astronomy"])
        with pytest.raises(ValueError):
            AssessmentCaseModel(module_type="astronomy")


class TestUserRepository:
    @pytest.mark.asyncio
    async def test_roundtrip_snapshot(self, create_user, create_org):
        await create_org("org-1")
        user = await create_user(
            UserRole.ORG_ADMIN,
            organization_id="org-1",
            assigned_modules=["k12", "tutoring"],
            created_at=T0 - timedelta(days=3),
        )

        assert user.role == UserRole.ORG_ADMIN
        assert user.organization_id == "org-1"
        assert user.assigned_modules == frozenset({ModuleType.K12, ModuleType.TUTORING})
        assert user.created_at == T0 - timedelta(days=3)
        assert user.account_state == AccountState.ACTIVE

    @pytest.mark.asyncio
    async def test_list_by_role(self, database, create_user):
        first = await create_user(UserRole.DEMO)
        await create_user(UserRole.CUSTOMER)
        inactive = await create_user(UserRole.DEMO, is_active=False)

        async with database.session() as session:
            repo = UserRepository(session)
            all_demo = await repo.list_by_role(UserRole.DEMO)
            active_demo = await repo.list_by_role(UserRole.DEMO, active_only=True)
            assert await repo.count_by_role(UserRole.DEMO) == 2

        assert [u.id for u in all_demo] == [first.id, inactive.id]
        assert [u.id for u in active_demo] == [first.id]

    @pytest.mark.asyncio
    async def test_anonymize_claims_once(self, database, create_user, get_user_row):
        user = await create_user(UserRole.DEMO)

        async with database.session() as session:
            repo = UserRepository(session)
            assert await repo.anonymize_and_deactivate(user.id, T0) is True
            assert await repo.anonymize_and_deactivate(user.id, T0) is False

        row = await get_user_row(user.id)
        assert pii_violations(row) == []
        assert is_anonymized(row)
        assert ensure_utc(row.anonymized_at) == T0

    @pytest.mark.asyncio
    async def test_pii_violations_on_live_account(self, create_user, get_user_row):
        user = await create_user(UserRole.DEMO)
        violations = pii_violations(await get_user_row(user.id))
        assert set(violations) == {"email", "username", "password", "is_active"}


class TestCaseRepository:
    @pytest.mark.asyncio
    async def test_counts_and_delete(self, database, create_user, create_org, create_cases):
        await create_org("org-1")
        demo = await create_user(UserRole.DEMO)
        customer = await create_user(UserRole.CUSTOMER, organization_id="org-1")
        await create_cases(demo.id, 2)
        await create_cases(customer.id, 3, organization_id="org-1")

        async with database.session() as session:
            repo = AssessmentCaseRepository(session)
            assert await repo.count_for_role(UserRole.DEMO) == 2
            assert await repo.count_for_role(UserRole.CUSTOMER) == 3
            assert len(await repo.list_for_organization("org-1")) == 3
            assert await repo.delete_for_user(demo.id) == 2
            assert await repo.count_for_user(demo.id) == 0
            assert await repo.count_for_user(customer.id) == 3

    @pytest.mark.asyncio
    async def test_delete_limited_to_given_ids(self, database, create_user, create_cases):
        user = await create_user(UserRole.DEMO)
        other = await create_user(UserRole.DEMO)
        first, second = await create_cases(user.id, 2)
        [foreign] = await create_cases(other.id, 1)

        async with database.session() as session:
            repo = AssessmentCaseRepository(session)
            assert await repo.delete_for_user(user.id, case_ids=[first, foreign]) == 1
            assert await repo.delete_for_user(user.id, case_ids=[]) == 0
            assert await repo.count_for_user(user.id) == 1
            assert await repo.count_for_user(other.id) == 1
            assert (await repo.get_by_id(second)) is not None

    @pytest.mark.asyncio
    async def test_case_ids_generated(self, database, create_user, create_cases):
        user = await create_user(UserRole.DEMO)
        [case_pk] = await create_cases(user.id, 1)

        async with database.session() as session:
            case = await AssessmentCaseRepository(session).get_by_id(case_pk)
        assert case.case_id.startswith("case-")
        assert case.status == "pending"


class TestOrganizationRepository:
    @pytest.mark.asyncio
    async def test_set_active_and_count_users(self, database, create_org, create_user):
        await create_org("org-1")
        await create_user(UserRole.CUSTOMER, organization_id="org-1")

        async with database.session() as session:
            repo = OrganizationRepository(session)
            org = await repo.get_by_id("org-1")
            await repo.set_active(org, False)
            assert await repo.count_users("org-1") == 1

        async with database.session() as session:
            assert (await OrganizationRepository(session).get_by_id("org-1")).is_active is False


class TestUserSnapshot:
    def test_to_dict(self):
        user = User(id=1, username="u", email="u@example.com", role=UserRole.DEMO, created_at=T0)
        data = user.to_dict()
        assert data["role"] == "demo"
        assert data["account_state"] == "active"
        assert data["created_at"] == T0.isoformat()

    def test_deactivated_state(self):
        user = User(id=1, username="u", email="u@example.com", role=UserRole.DEMO, is_active=False)
        assert user.account_state == AccountState.DEACTIVATED
