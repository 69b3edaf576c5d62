"""
Thrive Test Suite - Shared Fixtures
"""

import itertools
from datetime import UTC, datetime, timedelta

import pytest
import pytest_asyncio

from thrive.accounts.models import User
from thrive.core.settings import DatabaseSettings, Settings
from thrive.data.database import Database
from thrive.data.repositories import (
    AssessmentCaseRepository,
    OrganizationRepository,
    UserRepository,
)
from thrive.demo.export import DataExporter, ExportArchive
from thrive.demo.lifecycle import DemoLifecycleScheduler
from thrive.notifications.handlers import LogNotifier
from thrive_core.security.roles import ModuleType, UserRole

T0 = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = T0):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


_ids = itertools.count(1)


def make_user(
    role: UserRole = UserRole.CUSTOMER,
    modules=(ModuleType.K12,),
    organization_id: str | None = None,
    **kwargs,
) -> User:
    """Build an in-memory User without touching the database."""
    user_id = kwargs.pop("id", next(_ids))
    return User(
        id=user_id,
        username=kwargs.pop("username", f"user{user_id}"),
        email=kwargs.pop("email", f"user{user_id}@example.com"),
        role=role,
        organization_id=organization_id,
        assigned_modules=frozenset(modules),
        **kwargs,
    )


# ============================================================
# CLOCK & SETTINGS
# ============================================================


@pytest.fixture
def clock():
    return FrozenClock()


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database=DatabaseSettings(url=f"sqlite+aiosqlite:///{tmp_path / 'thrive.db'}"),
        export_directory=str(tmp_path / "exports"),
        admin_email="ops@example.com",
    )


@pytest.fixture
def notifier():
    """Notifier that records every message it is asked to send."""
    return LogNotifier()


# ============================================================
# DATABASE
# ============================================================


@pytest_asyncio.fixture
async def database(settings):
    db = Database(settings.database)
    await db.init()
    yield db
    await db.close()


@pytest.fixture
def session_factory(database):
    return database.session_factory


@pytest.fixture
def create_org(database):
    async def _create(org_id: str, is_active: bool = True, modules=("k12",), **kwargs):
        async with database.session() as session:
            org = await OrganizationRepository(session).create(
                name=kwargs.pop("name", f"Org {org_id}"),
                assigned_modules=modules,
                is_active=is_active,
                org_id=org_id,
                **kwargs,
            )
            return org.id

    return _create


@pytest.fixture
def create_user(database, clock):
    """Insert a user row and return its User snapshot."""
    counter = itertools.count(1)

    async def _create(role: UserRole | str = UserRole.DEMO, created_at: datetime | None = None, **kwargs):
        n = next(counter)
        async with database.session() as session:
            row = await UserRepository(session).create(
                username=kwargs.pop("username", f"{role}_{n}"),
                email=kwargs.pop("email", f"{role}_{n}@example.com"),
                password=kwargs.pop("password", "hashed-password"),
                role=role,
                assigned_modules=kwargs.pop("assigned_modules", ["k12"]),
                created_at=created_at or clock(),
                **kwargs,
            )
            return User.from_model(row)

    return _create


@pytest.fixture
def create_cases(database):
    async def _create(user_id: int, count: int, module_type: str = "k12", **kwargs):
        async with database.session() as session:
            repo = AssessmentCaseRepository(session)
            ids = []
            for i in range(count):
                case = await repo.create(
                    module_type=module_type,
                    created_by_user_id=user_id,
                    display_name=f"Report {i + 1}",
                    report_data={"index": i},
                    **kwargs,
                )
                ids.append(case.id)
            return ids

    return _create


@pytest.fixture
def get_user_row(database):
    async def _get(user_id: int):
        async with database.session() as session:
            return await UserRepository(session).get_by_id(user_id)

    return _get


@pytest.fixture
def count_cases(database):
    async def _count(user_id: int) -> int:
        async with database.session() as session:
            return await AssessmentCaseRepository(session).count_for_user(user_id)

    return _count


# ============================================================
# LIFECYCLE
# ============================================================


@pytest.fixture
def archive(tmp_path):
    return ExportArchive(str(tmp_path / "exports"))


@pytest.fixture
def scheduler(session_factory, notifier, settings, archive, clock):
    return DemoLifecycleScheduler(
        session_factory,
        DataExporter(session_factory, clock=clock),
        notifier,
        settings.demo,
        archive=archive,
        clock=clock,
    )
