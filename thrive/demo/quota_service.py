# Thrive - Multi-Tenant Assessment Report Platform
# Copyright (c) 2026 George Scott Foley
# ORCID: 0009-0006-4957-0540
# Email: Georgescottfoley@proton.me
# Licensed under the MIT License - see LICENSE file for details

"""
Demo Quota Service

Report quota enforcement for demo accounts:
- Limit checks with upgrade-prompt thresholds
- Atomic check-and-increment on report creation
- Upgrade prompt content
- Demo account counter initialization

The demo ceiling comes from DemoSettings.demo_report_limit. The stored
max_reports column is legacy for demo accounts and is never consulted
for demo accounting.
"""

import logging
from dataclasses import dataclass
from typing import Any

from thrive_core.exceptions.hierarchy import QuotaExceededError

from ..accounts.models import User
from ..core.settings import DemoSettings
from .quotas import ReportCounterBackend

logger = logging.getLogger(__name__)


# ============================================================
# RESULT TYPES
# ============================================================


@dataclass(frozen=True)
class DemoLimitCheck:
    """Result of a report limit check."""

    can_create: bool
    current_count: int
    limit: int
    is_near_limit: bool
    should_prompt: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "can_create": self.can_create,
            "current_count": self.current_count,
            "limit": self.limit,
            "is_near_limit": self.is_near_limit,
            "should_prompt": self.should_prompt,
        }


@dataclass(frozen=True)
class ReportQuotaResult:
    """
    Outcome of increment_on_create.

    Reaching the demo limit is an expected business condition, so it is
    returned as a value rather than raised.
    """

    ok: bool
    count: int
    limit: int | None = None

    @classmethod
    def success(cls, count: int, limit: int | None = None) -> "ReportQuotaResult":
        return cls(ok=True, count=count, limit=limit)

    @classmethod
    def exceeded(cls, count: int, limit: int) -> "ReportQuotaResult":
        return cls(ok=False, count=count, limit=limit)

    @property
    def quota_exceeded(self) -> bool:
        return not self.ok

    def to_error(self) -> QuotaExceededError:
        return QuotaExceededError(
            f"Demo report limit exceeded. Maximum {self.limit} reports allowed.",
            current=self.count,
            limit=self.limit,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"ok": self.ok, "count": self.count, "limit": self.limit}
        if not self.ok:
            data["error"] = "quota_exceeded"
        return data


@dataclass(frozen=True)
class UpgradePrompt:
    show: bool
    title: str = ""
    message: str = ""
    current_count: int = 0
    limit: int = 0
    upgrade_url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "show": self.show,
            "title": self.title,
            "message": self.message,
            "current_count": self.current_count,
            "limit": self.limit,
            "upgrade_url": self.upgrade_url,
        }


# ============================================================
# QUOTA ENFORCER
# ============================================================


class QuotaEnforcer:
    """
    Demo report quota enforcement.

    Usage:
        enforcer = QuotaEnforcer(SqlReportCounterBackend(session_factory), settings.demo)

        check = enforcer.check_limit(user)
        result = await enforcer.increment_on_create(user.id)
        if result.quota_exceeded:
            prompt = enforcer.get_upgrade_prompt(user)
    """

    def __init__(self, backend: ReportCounterBackend, settings: DemoSettings):
        self.backend = backend
        self.settings = settings

    @property
    def demo_report_limit(self) -> int:
        return self.settings.demo_report_limit

    @property
    def upgrade_prompt_threshold(self) -> int:
        return self.settings.upgrade_prompt_threshold

    def check_limit(self, user: User) -> DemoLimitCheck:
        """Check whether a user may create another report."""
        if not user.is_demo:
            return DemoLimitCheck(
                can_create=True,
                current_count=user.report_count,
                limit=user.max_reports,
                is_near_limit=False,
                should_prompt=False,
            )

        current = user.report_count
        limit = self.demo_report_limit
        can_create = current < limit
        is_near_limit = current >= self.upgrade_prompt_threshold
        return DemoLimitCheck(
            can_create=can_create,
            current_count=current,
            limit=limit,
            is_near_limit=is_near_limit,
            should_prompt=is_near_limit and can_create,
        )

    async def increment_on_create(self, user_id: int) -> ReportQuotaResult:
        """
        Record a report creation against the user's quota.

        The limit check and the increment are one storage operation.
        Raises NotFoundError if the user does not exist.
        """
        update = await self.backend.increment_report_count(user_id, self.demo_report_limit)
        if not update.applied:
            logger.info(
                f"Demo report limit reached for user {user_id} "
                f"({update.count}/{self.demo_report_limit})"
            )
            return ReportQuotaResult.exceeded(update.count, self.demo_report_limit)

        logger.debug(f"Report count incremented for user {user_id}. New count: {update.count}")
        return ReportQuotaResult.success(update.count, self.demo_report_limit)

    def get_upgrade_prompt(self, user: User) -> UpgradePrompt:
        """Build the upgrade prompt shown before the last permitted report."""
        check = self.check_limit(user)
        if not check.should_prompt:
            return UpgradePrompt(show=False, current_count=check.current_count, limit=check.limit)

        remaining = check.limit - check.current_count
        if remaining == 1:
            title = "Last Demo Report"
            message = (
                f"This is your final demo report ({check.current_count + 1} of {check.limit}). "
                "Upgrade to continue creating unlimited assessment reports."
            )
        else:
            title = "Demo Limit Approaching"
            message = (
                f"You have {remaining} demo reports remaining "
                f"({check.current_count} of {check.limit} used). "
                "Upgrade to unlock unlimited reports and advanced features."
            )

        return UpgradePrompt(
            show=True,
            title=title,
            message=message,
            current_count=check.current_count,
            limit=check.limit,
            upgrade_url=self.settings.upgrade_url,
        )

    async def initialize_demo_user(self, user_id: int) -> None:
        """Reset a new demo account's counter."""
        await self.backend.reset_report_count(user_id, self.demo_report_limit)
        logger.info(f"Demo user {user_id} initialized with {self.demo_report_limit} report limit")


__all__ = [
    "DemoLimitCheck",
    "ReportQuotaResult",
    "UpgradePrompt",
    "QuotaEnforcer",
]
