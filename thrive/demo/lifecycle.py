# Thrive - Multi-Tenant Assessment Report Platform
# Copyright (c) 2026 George Scott Foley
# ORCID: 0009-0006-4957-0540
# Email: Georgescottfoley@proton.me
# Licensed under the MIT License - see LICENSE file for details

"""
Demo Account Lifecycle

Classifies demo accounts by age and activity and drives the batch
lifecycle: warn -> expire -> export -> anonymize -> deactivate.

States (derived from created_at, never persisted):
- Active: inside the retention window, not yet warned about
- Warning: within WARNING_WINDOW_DAYS of expiry, has created reports
- Expired: past created_at + DEMO_RETENTION_DAYS

Provides:
- Per-user classification and cohort queries
- Expiration warnings, at most one per user per warning window
- Cleanup with export-before-delete, dry-run preview and per-user
  failure isolation
- Read-only statistics
"""

import asyncio
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import StrEnum
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from thrive_core.exceptions.hierarchy import NotFoundError, NotificationFailureError
from thrive_core.security.roles import UserRole

from ..accounts.models import Clock, User, utcnow
from ..core.settings import DemoSettings
from ..data.repositories import AssessmentCaseRepository, UserRepository
from ..notifications.handlers import Notifier
from ..observability.logging import log_context
from .export import DataExporter, ExportArchive

logger = logging.getLogger(__name__)

WARNING_EMAIL_SUBJECT = "Demo Account Expiring Soon - Export Your Data"


# ============================================================
# LIFECYCLE STATES
# ============================================================


class DemoLifecycleState(StrEnum):
    """Demo account lifecycle state."""

    ACTIVE = "active"
    WARNING = "warning"
    EXPIRED = "expired"


def expiration_date(user: User, retention_days: int) -> datetime:
    return user.created_at + timedelta(days=retention_days)


def classify(user: User, now: datetime, settings: DemoSettings) -> DemoLifecycleState:
    """Derive a demo account's lifecycle state at `now`."""
    expires = expiration_date(user, settings.demo_retention_days)
    if now > expires:
        return DemoLifecycleState.EXPIRED
    if expires - now <= timedelta(days=settings.warning_window_days) and user.report_count > 0:
        return DemoLifecycleState.WARNING
    return DemoLifecycleState.ACTIVE


@dataclass
class DemoUserCleanupInfo:
    """Lifecycle view of one demo account."""

    id: int
    username: str
    email: str
    created_at: datetime
    expiration_date: datetime
    report_count: int
    days_until_expiration: int
    state: DemoLifecycleState
    is_active: bool
    last_warned_at: datetime | None = None

    @property
    def is_expired(self) -> bool:
        return self.state == DemoLifecycleState.EXPIRED

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "created_at": self.created_at.isoformat(),
            "expiration_date": self.expiration_date.isoformat(),
            "report_count": self.report_count,
            "days_until_expiration": self.days_until_expiration,
            "state": self.state.value,
            "is_expired": self.is_expired,
            "is_active": self.is_active,
            "last_warned_at": self.last_warned_at.isoformat() if self.last_warned_at else None,
        }


@dataclass
class CleanupResult:
    """Aggregate outcome of one cleanup run."""

    dry_run: bool
    users_processed: int = 0
    users_deactivated: int = 0
    reports_deleted: int = 0
    errors: list[str] = field(default_factory=list)
    exported_files: list[str] = field(default_factory=list)
    started_at: datetime | None = None
    finished_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "dry_run": self.dry_run,
            "users_processed": self.users_processed,
            "users_deactivated": self.users_deactivated,
            "reports_deleted": self.reports_deleted,
            "errors": list(self.errors),
            "exported_files": list(self.exported_files),
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
        }


@dataclass
class WarningRunResult:
    """Aggregate outcome of one warning run."""

    users_eligible: int = 0
    warnings_sent: int = 0
    already_warned: int = 0
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "users_eligible": self.users_eligible,
            "warnings_sent": self.warnings_sent,
            "already_warned": self.already_warned,
            "errors": list(self.errors),
        }


@dataclass
class CleanupStats:
    total_demo_users: int
    active_demo_users: int
    users_needing_warning: int
    expired_users: int
    total_demo_reports: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_demo_users": self.total_demo_users,
            "active_demo_users": self.active_demo_users,
            "users_needing_warning": self.users_needing_warning,
            "expired_users": self.expired_users,
            "total_demo_reports": self.total_demo_reports,
        }


@dataclass
class _UserOutcome:
    deactivated: bool = False
    reports_deleted: int = 0
    exported_file: str | None = None
    error: str | None = None


# ============================================================
# LIFECYCLE SCHEDULER
# ============================================================


class DemoLifecycleScheduler:
    """
    Orchestrates demo account warnings and cleanup.

    Invoked by an external scheduler (see jobs.demo_cleanup); it owns no
    timer loop. Every run re-reads storage, and cleanup only considers
    accounts that are still active, so repeated runs are idempotent.

    Usage:
        scheduler = DemoLifecycleScheduler(session_factory, exporter, notifier, settings.demo, archive=archive)
        preview = await scheduler.cleanup_expired_demo_users(dry_run=True)
        result = await scheduler.cleanup_expired_demo_users(dry_run=False)
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        exporter: DataExporter,
        notifier: Notifier,
        settings: DemoSettings,
        archive: ExportArchive | None = None,
        clock: Clock = utcnow,
        concurrency: int = 1,
    ):
        self.session_factory = session_factory
        self.exporter = exporter
        self.notifier = notifier
        self.settings = settings
        self.archive = archive
        self.clock = clock
        self.concurrency = max(concurrency, 1)

    # --------------------------------------------------------
    # Classification
    # --------------------------------------------------------

    def classify(self, user: User, now: datetime | None = None) -> DemoLifecycleState:
        return classify(user, now or self.clock(), self.settings)

    def is_demo_user_expired(self, user: User) -> bool:
        """True only for demo accounts past their retention window."""
        if not user.is_demo:
            return False
        return self.classify(user) == DemoLifecycleState.EXPIRED

    def _cleanup_info(self, user: User, now: datetime) -> DemoUserCleanupInfo:
        expires = expiration_date(user, self.settings.demo_retention_days)
        days_until = math.ceil((expires - now).total_seconds() / 86400)
        return DemoUserCleanupInfo(
            id=user.id,
            username=user.username,
            email=user.email,
            created_at=user.created_at,
            expiration_date=expires,
            report_count=user.report_count,
            days_until_expiration=days_until,
            state=self.classify(user, now),
            is_active=user.is_active,
            last_warned_at=user.last_warned_at,
        )

    def _already_warned(self, user: User) -> bool:
        """A warning sent inside the current warning window counts once."""
        if user.last_warned_at is None:
            return False
        window_start = expiration_date(user, self.settings.demo_retention_days) - timedelta(
            days=self.settings.warning_window_days
        )
        return user.last_warned_at >= window_start

    # --------------------------------------------------------
    # Cohort queries
    # --------------------------------------------------------

    async def _load_demo_users(self, active_only: bool = False) -> list[User]:
        async with self.session_factory() as session:
            rows = await UserRepository(session).list_by_role(UserRole.DEMO, active_only=active_only)
        return [User.from_model(row) for row in rows]

    async def get_demo_users_cleanup_info(self) -> list[DemoUserCleanupInfo]:
        """Lifecycle view of every demo account, active or not."""
        now = self.clock()
        return [self._cleanup_info(user, now) for user in await self._load_demo_users()]

    async def get_demo_users_needing_warning(self) -> list[User]:
        now = self.clock()
        return [
            user
            for user in await self._load_demo_users(active_only=True)
            if self.classify(user, now) == DemoLifecycleState.WARNING
        ]

    async def get_expired_demo_users(self) -> list[User]:
        """Expired demo accounts that have not been cleaned up yet."""
        now = self.clock()
        return [
            user
            for user in await self._load_demo_users(active_only=True)
            if self.classify(user, now) == DemoLifecycleState.EXPIRED
        ]

    async def get_demo_users_near_limit(self) -> list[User]:
        threshold = self.settings.upgrade_prompt_threshold
        return [
            user
            for user in await self._load_demo_users(active_only=True)
            if user.report_count >= threshold
        ]

    # --------------------------------------------------------
    # Warnings
    # --------------------------------------------------------

    def build_warning_email(self, user: User, now: datetime | None = None) -> tuple[str, str]:
        info = self._cleanup_info(user, now or self.clock())
        expires = info.expiration_date.strftime("%B %d, %Y")
        created = info.created_at.strftime("%B %d, %Y")
        body = (
            "DEMO ACCOUNT EXPIRATION WARNING\n"
            "\n"
            f"Hello {info.username},\n"
            "\n"
            f"Your demo account will expire in {info.days_until_expiration} days (on {expires}).\n"
            "\n"
            "Your Demo Summary:\n"
            f"   - Reports Created: {info.report_count}\n"
            f"   - Account Created: {created}\n"
            f"   - Expiration Date: {expires}\n"
            "\n"
            "What happens when your demo expires:\n"
            "   - Your account will be deactivated\n"
            "   - All your assessment reports will be deleted\n"
            "   - This action cannot be undone\n"
            "\n"
            "To keep your data and continue using the platform:\n"
            f"   1. Upgrade to a full account before {expires}\n"
            "   2. Export your reports if you want to save them\n"
            "   3. Contact support if you need assistance\n"
            "\n"
            f"Upgrade now: {self.settings.upgrade_url}\n"
            "\n"
            "Best regards,\n"
            "The Assessment Platform Team\n"
        )
        return WARNING_EMAIL_SUBJECT, body

    async def send_cleanup_warning(self, user_id: int) -> bool:
        """
        Send the expiration warning to one demo account.

        Returns True when a warning was delivered, False when the user was
        already warned in this window. Raises NotFoundError for unknown or
        non-demo users and NotificationFailureError when delivery fails.
        """
        async with self.session_factory() as session:
            row = await UserRepository(session).get_by_id(user_id)
        if row is None or row.role != UserRole.DEMO.value:
            raise NotFoundError("Demo user", user_id)

        user = User.from_model(row)
        if self._already_warned(user):
            logger.debug(f"Demo user {user_id} already warned in this window")
            return False

        now = self.clock()
        subject, body = self.build_warning_email(user, now)
        if not await self.notifier.send(user.email, subject, body):
            raise NotificationFailureError(
                f"Failed to send expiration warning to user {user_id}",
                recipient=user.email,
            )

        async with self.session_factory() as session:
            async with session.begin():
                await UserRepository(session).mark_warned(user_id, now)

        logger.info(f"Expiration warning sent to demo user {user.username} (ID: {user_id})")
        return True

    async def send_cleanup_warnings(self) -> WarningRunResult:
        """Warn every warning-state account not yet warned in its window."""
        result = WarningRunResult()
        users = await self.get_demo_users_needing_warning()
        result.users_eligible = len(users)

        for user in users:
            if self._already_warned(user):
                result.already_warned += 1
                continue
            with log_context(user_id=user.id):
                try:
                    if await self.send_cleanup_warning(user.id):
                        result.warnings_sent += 1
                    else:
                        result.already_warned += 1
                except (NotificationFailureError, NotFoundError) as e:
                    logger.warning(f"Warning not sent to {user.username}: {e.message}")
                    result.errors.append(f"Failed to warn user {user.username}: {e.message}")
                except Exception as e:
                    message = str(e) or e.__class__.__name__
                    logger.error(f"Warning failed for {user.username}: {message}")
                    result.errors.append(f"Failed to warn user {user.username}: {message}")

        logger.info(
            f"Demo warnings: {result.warnings_sent} sent, {result.already_warned} already warned, "
            f"{len(result.errors)} failed"
        )
        return result

    # --------------------------------------------------------
    # Cleanup
    # --------------------------------------------------------

    async def cleanup_expired_demo_users(self, dry_run: bool = True) -> CleanupResult:
        """
        Export, anonymize and deactivate expired demo accounts.

        dry_run=True exports and tallies without mutating any record and
        reports the same counts a real run over the same cohort would.
        A failure for one user is recorded in errors and never aborts
        the batch.
        """
        prefix = "[DRY RUN] " if dry_run else ""
        result = CleanupResult(dry_run=dry_run, started_at=self.clock())

        expired = await self.get_expired_demo_users()
        result.users_processed = len(expired)
        logger.info(f"{prefix}Processing {len(expired)} expired demo users")

        semaphore = asyncio.Semaphore(self.concurrency)

        async def run(user: User) -> _UserOutcome:
            async with semaphore:
                with log_context(user_id=user.id):
                    return await self._cleanup_user(user, dry_run)

        outcomes = await asyncio.gather(*(run(user) for user in expired))

        for outcome in outcomes:
            if outcome.error is not None:
                result.errors.append(outcome.error)
                continue
            if outcome.deactivated:
                result.users_deactivated += 1
                result.reports_deleted += outcome.reports_deleted
            if outcome.exported_file:
                result.exported_files.append(outcome.exported_file)

        result.finished_at = self.clock()
        logger.info(
            f"{prefix}Demo cleanup complete: {result.users_deactivated}/{result.users_processed} "
            f"users deactivated, {result.reports_deleted} reports deleted, "
            f"{len(result.errors)} errors"
        )
        return result

    async def _cleanup_user(self, user: User, dry_run: bool) -> _UserOutcome:
        prefix = "[DRY RUN] " if dry_run else ""
        try:
            export = await self.exporter.export_user_data(user.id)

            if dry_run:
                logger.info(
                    f"[DRY RUN] Would delete {export.resource_count} reports "
                    f"and deactivate user {user.username}"
                )
                return _UserOutcome(deactivated=True, reports_deleted=export.resource_count)

            exported_file = None
            if self.archive is not None:
                exported_file = str(self.archive.save(export))

            async with self.session_factory() as session:
                async with session.begin():
                    claimed = await UserRepository(session).anonymize_and_deactivate(
                        user.id, self.clock()
                    )
                    if not claimed:
                        logger.info(f"User {user.id} was already cleaned up, skipping")
                        return _UserOutcome(exported_file=exported_file)
                    cases = AssessmentCaseRepository(session)
                    deleted = await cases.delete_for_user(
                        user.id, case_ids=[r.id for r in export.resources]
                    )
                    retained = await cases.count_for_user(user.id)

            if retained:
                logger.warning(
                    f"User {user.id} has {retained} reports created after export; "
                    f"they were not archived and are kept"
                )
            logger.info(f"Deleted {deleted} reports and deactivated user account {user.id}")
            return _UserOutcome(
                deactivated=True, reports_deleted=deleted, exported_file=exported_file
            )

        except Exception as e:
            message = getattr(e, "message", None) or str(e) or e.__class__.__name__
            logger.error(f"{prefix}Failed to cleanup user {user.username}: {message}")
            return _UserOutcome(error=f"Failed to cleanup user {user.username}: {message}")

    # --------------------------------------------------------
    # Statistics
    # --------------------------------------------------------

    async def get_cleanup_stats(self) -> CleanupStats:
        """Read-only aggregation over all demo accounts."""
        now = self.clock()
        users = await self._load_demo_users()
        states = [(user, self.classify(user, now)) for user in users]

        async with self.session_factory() as session:
            total_reports = await AssessmentCaseRepository(session).count_for_role(UserRole.DEMO)

        return CleanupStats(
            total_demo_users=len(users),
            active_demo_users=sum(
                1 for user, state in states if user.is_active and state != DemoLifecycleState.EXPIRED
            ),
            users_needing_warning=sum(
                1 for user, state in states if user.is_active and state == DemoLifecycleState.WARNING
            ),
            expired_users=sum(
                1 for user, state in states if user.is_active and state == DemoLifecycleState.EXPIRED
            ),
            total_demo_reports=total_reports,
        )


__all__ = [
    "WARNING_EMAIL_SUBJECT",
    "DemoLifecycleState",
    "expiration_date",
    "classify",
    "DemoUserCleanupInfo",
    "CleanupResult",
    "WarningRunResult",
    "CleanupStats",
    "DemoLifecycleScheduler",
]
