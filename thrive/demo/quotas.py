# Thrive - Multi-Tenant Assessment Report Platform
# Copyright (c) 2026 George Scott Foley
# ORCID: 0009-0006-4957-0540
# Email: Georgescottfoley@proton.me
# Licensed under the MIT License - see LICENSE file for details

"""
Report Counter Backends

Storage for the per-user report counter behind the demo quota.

The only contended shared state in the quota path is a user's
report_count. Every backend exposes a single atomic primitive,
"increment iff below limit, return the new value", so two concurrent
create-report requests can never both pass the check.

Architecture:
    QuotaEnforcer.increment_on_create() → backend.increment_report_count()
        SQL:       UPDATE ... WHERE role != 'demo' OR report_count < :limit
        In-memory: asyncio.Lock around check + increment
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from thrive_core.exceptions.hierarchy import NotFoundError
from thrive_core.security.roles import UserRole

from ..data.repositories import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CounterUpdate:
    """Outcome of a conditional increment."""

    applied: bool
    count: int


class ReportCounterBackend(ABC):
    """Abstract backend for report counter storage."""

    @abstractmethod
    async def increment_report_count(self, user_id: int, demo_limit: int) -> CounterUpdate:
        """
        Atomically increment a user's report count.

        Demo users are only incremented while below demo_limit. Raises
        NotFoundError if the user does not exist.
        """
        pass

    @abstractmethod
    async def reset_report_count(self, user_id: int, max_reports: int) -> None:
        """Reset the counter to zero and store max_reports."""
        pass

    @abstractmethod
    async def get_report_count(self, user_id: int) -> int:
        """Get current counter value."""
        pass


class SqlReportCounterBackend(ReportCounterBackend):
    """Database-backed counter using a single conditional UPDATE."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def increment_report_count(self, user_id: int, demo_limit: int) -> CounterUpdate:
        async with self.session_factory() as session:
            async with session.begin():
                repo = UserRepository(session)
                new_count = await repo.increment_report_count(user_id, demo_limit)
                if new_count is not None:
                    return CounterUpdate(applied=True, count=new_count)

                current = await repo.get_report_count(user_id)
                if current is None:
                    raise NotFoundError("User", user_id)
                return CounterUpdate(applied=False, count=current)

    async def reset_report_count(self, user_id: int, max_reports: int) -> None:
        async with self.session_factory() as session:
            async with session.begin():
                if not await UserRepository(session).reset_report_count(user_id, max_reports):
                    raise NotFoundError("User", user_id)

    async def get_report_count(self, user_id: int) -> int:
        async with self.session_factory() as session:
            current = await UserRepository(session).get_report_count(user_id)
        if current is None:
            raise NotFoundError("User", user_id)
        return current


class InMemoryReportCounterBackend(ReportCounterBackend):
    """
    In-memory counter storage for single-process use and tests.

    WARNING: Does not persist across restarts and doesn't work
    with more than one process. Use the SQL backend in production.
    """

    def __init__(self):
        self._counters: dict[int, tuple[UserRole, int]] = {}  # user_id -> (role, count)
        self._lock = asyncio.Lock()

    def register_user(self, user_id: int, role: UserRole, report_count: int = 0) -> None:
        self._counters[user_id] = (role, report_count)

    async def increment_report_count(self, user_id: int, demo_limit: int) -> CounterUpdate:
        async with self._lock:
            if user_id not in self._counters:
                raise NotFoundError("User", user_id)
            role, current = self._counters[user_id]
            if role == UserRole.DEMO and current >= demo_limit:
                return CounterUpdate(applied=False, count=current)
            await asyncio.sleep(0)
            self._counters[user_id] = (role, current + 1)
            return CounterUpdate(applied=True, count=current + 1)

    async def reset_report_count(self, user_id: int, max_reports: int) -> None:
        async with self._lock:
            if user_id not in self._counters:
                raise NotFoundError("User", user_id)
            role, _ = self._counters[user_id]
            self._counters[user_id] = (role, 0)

    async def get_report_count(self, user_id: int) -> int:
        async with self._lock:
            if user_id not in self._counters:
                raise NotFoundError("User", user_id)
            return self._counters[user_id][1]


__all__ = [
    "CounterUpdate",
    "ReportCounterBackend",
    "SqlReportCounterBackend",
    "InMemoryReportCounterBackend",
]
