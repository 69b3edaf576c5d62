"""
Tests for demo report quota enforcement.

Covers the limit truth table, upgrade prompts, and the atomic
check-and-increment on both counter backends.
"""

import asyncio

import pytest

from thrive.core.settings import DemoSettings
from thrive.data.repositories import UserRepository
from thrive.demo.quota_service import QuotaEnforcer
from thrive.demo.quotas import InMemoryReportCounterBackend, SqlReportCounterBackend
from thrive_core.exceptions.hierarchy import NotFoundError, QuotaExceededError
from thrive_core.security.roles import UserRole

from conftest import make_user


@pytest.fixture
def demo_settings():
    return DemoSettings(demo_report_limit=5, upgrade_prompt_threshold=4)


@pytest.fixture
def memory_backend():
    return InMemoryReportCounterBackend()


@pytest.fixture
def enforcer(memory_backend, demo_settings):
    return QuotaEnforcer(memory_backend, demo_settings)


# ============================================================
# check_limit
# ============================================================


class TestCheckLimit:
    @pytest.mark.parametrize(
        "count,can_create,is_near,should_prompt",
        [
            (0, True, False, False),
            (3, True, False, False),
            (4, True, True, True),
            (5, False, True, False),
            (7, False, True, False),
        ],
    )
    def test_demo_truth_table(self, enforcer, count, can_create, is_near, should_prompt):
        check = enforcer.check_limit(make_user(role=UserRole.DEMO, report_count=count))
        assert check.can_create is can_create
        assert check.is_near_limit is is_near
        assert check.should_prompt is should_prompt
        assert check.limit == 5
        assert check.current_count == count

    @pytest.mark.parametrize("role", [UserRole.CUSTOMER, UserRole.ORG_ADMIN, UserRole.ADMIN])
    def test_non_demo_unlimited(self, enforcer, role):
        check = enforcer.check_limit(make_user(role=role, report_count=999))
        assert check.can_create is True
        assert check.limit == -1
        assert check.should_prompt is False

    def test_stored_max_reports_ignored_for_demo(self, enforcer):
        check = enforcer.check_limit(make_user(role=UserRole.DEMO, report_count=5, max_reports=50))
        assert check.can_create is False
        assert check.limit == 5


# ============================================================
# Upgrade prompts
# ============================================================


class TestUpgradePrompt:
    def test_hidden_below_threshold(self, enforcer):
        prompt = enforcer.get_upgrade_prompt(make_user(role=UserRole.DEMO, report_count=3))
        assert prompt.show is False

    def test_last_report(self, enforcer):
        prompt = enforcer.get_upgrade_prompt(make_user(role=UserRole.DEMO, report_count=4))
        assert prompt.show is True
        assert prompt.title == "Last Demo Report"
        assert prompt.message == (
            "This is your final demo report (5 of 5). "
            "Upgrade to continue creating unlimited assessment reports."
        )
        assert prompt.upgrade_url == "/upgrade"

    def test_approaching_limit(self, memory_backend):
        enforcer = QuotaEnforcer(
            memory_backend, DemoSettings(demo_report_limit=5, upgrade_prompt_threshold=3)
        )
        prompt = enforcer.get_upgrade_prompt(make_user(role=UserRole.DEMO, report_count=3))
        assert prompt.title == "Demo Limit Approaching"
        assert prompt.message == (
            "You have 2 demo reports remaining (3 of 5 used). "
            "Upgrade to unlock unlimited reports and advanced features."
        )

    def test_hidden_at_limit(self, enforcer):
        assert enforcer.get_upgrade_prompt(make_user(role=UserRole.DEMO, report_count=5)).show is False

    def test_hidden_for_customers(self, enforcer):
        prompt = enforcer.get_upgrade_prompt(make_user(role=UserRole.CUSTOMER, report_count=500))
        assert prompt.show is False


# ============================================================
# increment_on_create - in-memory backend
# ============================================================


class TestInMemoryIncrement:
    @pytest.mark.asyncio
    async def test_stops_at_limit(self, enforcer, memory_backend):
        memory_backend.register_user(1, UserRole.DEMO)
        results = [await enforcer.increment_on_create(1) for _ in range(6)]

        assert [r.ok for r in results] == [True] * 5 + [False]
        assert [r.count for r in results] == [1, 2, 3, 4, 5, 5]
        assert results[-1].quota_exceeded
        assert await memory_backend.get_report_count(1) == 5

    @pytest.mark.asyncio
    async def test_concurrent_creates_never_exceed_limit(self, enforcer, memory_backend):
        memory_backend.register_user(1, UserRole.DEMO, report_count=2)

        results = await asyncio.gather(*(enforcer.increment_on_create(1) for _ in range(20)))

        assert sum(1 for r in results if r.ok) == 3
        assert await memory_backend.get_report_count(1) == 5
        assert sorted(r.count for r in results if r.ok) == [3, 4, 5]

    @pytest.mark.asyncio
    async def test_customer_not_capped(self, enforcer, memory_backend):
        memory_backend.register_user(2, UserRole.CUSTOMER, report_count=999)
        result = await enforcer.increment_on_create(2)
        assert result.ok
        assert result.count == 1000

    @pytest.mark.asyncio
    async def test_unknown_user(self, enforcer):
        with pytest.raises(NotFoundError):
            await enforcer.increment_on_create(404)

    @pytest.mark.asyncio
    async def test_initialize_demo_user(self, enforcer, memory_backend):
        memory_backend.register_user(3, UserRole.DEMO, report_count=5)
        await enforcer.initialize_demo_user(3)
        assert await memory_backend.get_report_count(3) == 0


# ============================================================
# increment_on_create - SQL backend
# ============================================================


class TestSqlIncrement:
    @pytest.mark.asyncio
    async def test_stops_at_limit(self, session_factory, create_user, demo_settings):
        user = await create_user(UserRole.DEMO)
        enforcer = QuotaEnforcer(SqlReportCounterBackend(session_factory), demo_settings)

        results = [await enforcer.increment_on_create(user.id) for _ in range(6)]

        assert [r.count for r in results] == [1, 2, 3, 4, 5, 5]
        assert results[-1].quota_exceeded
        assert await enforcer.backend.get_report_count(user.id) == 5

    @pytest.mark.asyncio
    async def test_concurrent_creates_never_exceed_limit(self, session_factory, create_user, demo_settings):
        user = await create_user(UserRole.DEMO)
        enforcer = QuotaEnforcer(SqlReportCounterBackend(session_factory), demo_settings)

        results = await asyncio.gather(*(enforcer.increment_on_create(user.id) for _ in range(20)))

        assert sum(1 for r in results if r.ok) == 5
        assert sum(1 for r in results if r.quota_exceeded) == 15
        assert await enforcer.backend.get_report_count(user.id) == 5

    @pytest.mark.asyncio
    async def test_customer_past_demo_limit(self, session_factory, create_user, demo_settings):
        user = await create_user(UserRole.CUSTOMER, report_count=999)
        enforcer = QuotaEnforcer(SqlReportCounterBackend(session_factory), demo_settings)

        result = await enforcer.increment_on_create(user.id)

        assert result.ok
        assert result.count == 1000

    @pytest.mark.asyncio
    async def test_unknown_user(self, session_factory, demo_settings):
        enforcer = QuotaEnforcer(SqlReportCounterBackend(session_factory), demo_settings)
        with pytest.raises(NotFoundError):
            await enforcer.increment_on_create(404)

    @pytest.mark.asyncio
    async def test_initialize_demo_user(self, session_factory, create_user, demo_settings):
        user = await create_user(UserRole.DEMO, report_count=4, max_reports=-1)
        enforcer = QuotaEnforcer(SqlReportCounterBackend(session_factory), demo_settings)

        await enforcer.initialize_demo_user(user.id)

        async with session_factory() as session:
            row = await UserRepository(session).get_by_id(user.id)
        assert row.report_count == 0
        assert row.max_reports == 5


# ============================================================
# Result types
# ============================================================


class TestReportQuotaResult:
    @pytest.mark.asyncio
    async def test_exceeded_result_converts_to_error(self, enforcer, memory_backend):
        memory_backend.register_user(1, UserRole.DEMO, report_count=5)
        result = await enforcer.increment_on_create(1)

        error = result.to_error()
        assert isinstance(error, QuotaExceededError)
        assert error.current == 5
        assert error.limit == 5
        assert result.to_dict() == {"ok": False, "count": 5, "limit": 5, "error": "quota_exceeded"}
