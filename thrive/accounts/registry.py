# Thrive - Multi-Tenant Assessment Report Platform
# Copyright (c) 2026 George Scott Foley
# ORCID: 0009-0006-4957-0540
# Email: Georgescottfoley@proton.me
# Licensed under the MIT License - see LICENSE file for details

"""
Organization Registry

Read model of organization records (module entitlements, active flag,
seat limits) consumed by the permission gate. Lookups are in-memory so
permission evaluation stays free of I/O; the registry is loaded from
storage at start-up and refreshed explicitly.
"""

import logging
from collections.abc import Iterable

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..data.repositories import OrganizationRepository
from .models import Organization

logger = logging.getLogger(__name__)


class OrganizationRegistry:
    """In-memory snapshot of organization records."""

    def __init__(self, organizations: Iterable[Organization] = ()):
        self._organizations: dict[str, Organization] = {org.id: org for org in organizations}

    @classmethod
    async def load(cls, session_factory: async_sessionmaker[AsyncSession]) -> "OrganizationRegistry":
        registry = cls()
        await registry.refresh(session_factory)
        return registry

    async def refresh(self, session_factory: async_sessionmaker[AsyncSession]) -> int:
        """Reload every organization from storage. Returns the record count."""
        async with session_factory() as session:
            rows = await OrganizationRepository(session).list_all()
        self._organizations = {row.id: Organization.from_model(row) for row in rows}
        logger.info(f"Organization registry loaded {len(self._organizations)} organizations")
        return len(self._organizations)

    def upsert(self, organization: Organization) -> None:
        self._organizations[organization.id] = organization

    def remove(self, org_id: str) -> None:
        self._organizations.pop(org_id, None)

    def get(self, org_id: str) -> Organization | None:
        return self._organizations.get(org_id)

    def is_active(self, org_id: str) -> bool:
        """Unknown organizations are reported inactive."""
        org = self._organizations.get(org_id)
        return org is not None and org.is_active

    def seats_available(self, org_id: str, current_users: int) -> int:
        org = self._organizations.get(org_id)
        if org is None:
            return 0
        return max(org.max_users - current_users, 0)

    def all(self) -> list[Organization]:
        return list(self._organizations.values())

    def __len__(self) -> int:
        return len(self._organizations)

    def __contains__(self, org_id: object) -> bool:
        return org_id in self._organizations


__all__ = ["OrganizationRegistry"]
