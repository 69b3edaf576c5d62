# Thrive - Multi-Tenant Assessment Report Platform
# Copyright (c) 2026 George Scott Foley
# ORCID: 0009-0006-4957-0540
# Email: Georgescottfoley@proton.me
# Licensed under the MIT License - see LICENSE file for details

"""
Demo Cleanup Job

Scheduled entrypoints around DemoLifecycleScheduler:
- Cleanup job (DEMO_CLEANUP_SCHEDULE, dry-run by default)
- Warning job (DEMO_WARNING_SCHEDULE)
- Manual triggers for the admin CLI

Each run holds a run lock so overlapping invocations never process the
same users, writes an audit record for destructive runs, and alerts
ADMIN_EMAIL when a run reports errors or fails outright. The cron
expressions are published for the external scheduler; this module runs
no timer of its own.
"""

import json
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any

from ..accounts.models import Clock, utcnow
from ..core.settings import DemoJobSettings
from ..demo.lifecycle import DemoLifecycleScheduler
from ..notifications.handlers import Notifier
from ..observability.logging import AuditLogger, log_context
from .locks import RunLock

logger = logging.getLogger(__name__)

ADMIN_ALERT_PREFIX = "[Demo Cleanup Alert] "
CLEANUP_LOCK_NAME = "demo_cleanup"
WARNING_LOCK_NAME = "demo_warnings"


class JobStatus(StrEnum):
    COMPLETED = "completed"
    DISABLED = "disabled"
    LOCKED = "locked"
    FAILED = "failed"


@dataclass
class JobRunSummary:
    """Outcome of one job invocation."""

    job: str
    run_id: str
    status: JobStatus
    started_at: datetime
    finished_at: datetime | None = None
    dry_run: bool | None = None
    result: dict[str, Any] = field(default_factory=dict)
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "job": self.job,
            "run_id": self.run_id,
            "status": self.status.value,
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "dry_run": self.dry_run,
            "result": self.result,
            "error": self.error,
        }


class DemoCleanupJob:
    """
    Scheduled demo cleanup and warning runs.

    Usage:
        job = DemoCleanupJob(scheduler, notifier, run_lock, settings.demo_jobs,
                             admin_email=settings.admin_email)
        summary = await job.run_cleanup_job()
    """

    def __init__(
        self,
        scheduler: DemoLifecycleScheduler,
        notifier: Notifier,
        run_lock: RunLock,
        settings: DemoJobSettings,
        admin_email: str | None = None,
        audit: AuditLogger | None = None,
        clock: Clock = utcnow,
    ):
        self.scheduler = scheduler
        self.notifier = notifier
        self.run_lock = run_lock
        self.settings = settings
        self.admin_email = admin_email
        self.audit = audit or AuditLogger()
        self.clock = clock
        self._last_runs: dict[str, JobRunSummary] = {}

    # --------------------------------------------------------
    # Cleanup
    # --------------------------------------------------------

    async def run_cleanup_job(self, dry_run: bool | None = None, force: bool = False) -> JobRunSummary:
        """
        Run one cleanup pass.

        dry_run defaults to DEMO_CLEANUP_DRY_RUN. Unless force is set the
        run is skipped while DEMO_AUTO_CLEANUP is off.
        """
        if dry_run is None:
            dry_run = self.settings.cleanup_dry_run
        summary = self._new_summary("cleanup", dry_run)

        if not (force or self.settings.auto_cleanup):
            logger.info("Demo cleanup is disabled via configuration")
            return self._finish(summary, JobStatus.DISABLED)

        async with self.run_lock.hold(CLEANUP_LOCK_NAME, self.settings.lock_ttl_seconds) as held:
            if not held:
                return self._finish(summary, JobStatus.LOCKED)

            with log_context(run_id=summary.run_id):
                logger.info(f"Starting demo cleanup job (dry_run={dry_run})")
                try:
                    result = await self.scheduler.cleanup_expired_demo_users(dry_run=dry_run)
                except Exception as e:
                    logger.exception("Demo cleanup job failed")
                    summary.error = str(e)
                    await self._send_admin_alert(
                        "Demo Cleanup Job Failed",
                        {"error": str(e), "timestamp": self.clock().isoformat()},
                    )
                    return self._finish(summary, JobStatus.FAILED)

                summary.result = result.to_dict()
                logger.info(
                    f"Demo cleanup job completed: processed={result.users_processed} "
                    f"deactivated={result.users_deactivated} deleted={result.reports_deleted} "
                    f"errors={len(result.errors)}"
                )

                if result.errors:
                    await self._send_admin_alert(
                        "Demo Cleanup Errors", {"errors": result.errors, "result": summary.result}
                    )

                if not dry_run and result.users_deactivated > 0:
                    self._log_cleanup_audit(summary.run_id, result.to_dict())
                    await self._send_admin_alert(
                        "Demo Cleanup Completed",
                        {
                            "users_deactivated": result.users_deactivated,
                            "reports_deleted": result.reports_deleted,
                        },
                    )

                return self._finish(summary, JobStatus.COMPLETED)

    async def trigger_manual_cleanup(self, dry_run: bool = True) -> JobRunSummary:
        """Run cleanup now, regardless of DEMO_AUTO_CLEANUP."""
        logger.info(f"Manual demo cleanup triggered (dry_run={dry_run})")
        return await self.run_cleanup_job(dry_run=dry_run, force=True)

    def _log_cleanup_audit(self, run_id: str, result: dict[str, Any]) -> None:
        self.audit.log(
            "demo_cleanup",
            "demo_users",
            resource_id=run_id,
            details={
                "users_processed": result["users_processed"],
                "users_deactivated": result["users_deactivated"],
                "reports_deleted": result["reports_deleted"],
                "errors": result["errors"],
            },
            success=not result["errors"],
        )

    # --------------------------------------------------------
    # Warnings
    # --------------------------------------------------------

    async def run_warning_job(self, force: bool = False) -> JobRunSummary:
        """Send expiration warnings unless DEMO_AUTO_WARNINGS is off."""
        summary = self._new_summary("warnings")

        if not (force or self.settings.auto_warnings):
            logger.info("Demo warning notifications are disabled via configuration")
            return self._finish(summary, JobStatus.DISABLED)

        async with self.run_lock.hold(WARNING_LOCK_NAME, self.settings.lock_ttl_seconds) as held:
            if not held:
                return self._finish(summary, JobStatus.LOCKED)

            with log_context(run_id=summary.run_id):
                logger.info("Starting demo warning notification job")
                try:
                    result = await self.scheduler.send_cleanup_warnings()
                except Exception as e:
                    logger.exception("Demo warning job failed")
                    summary.error = str(e)
                    await self._send_admin_alert(
                        "Demo Warning Job Failed",
                        {"error": str(e), "timestamp": self.clock().isoformat()},
                    )
                    return self._finish(summary, JobStatus.FAILED)

                summary.result = result.to_dict()
                if result.errors:
                    await self._send_admin_alert(
                        "Demo Warning Errors", {"errors": result.errors, "result": summary.result}
                    )
                return self._finish(summary, JobStatus.COMPLETED)

    async def trigger_manual_warnings(self) -> JobRunSummary:
        logger.info("Manual demo warnings triggered")
        return await self.run_warning_job(force=True)

    # --------------------------------------------------------
    # Status
    # --------------------------------------------------------

    def get_job_status(self) -> dict[str, Any]:
        return {
            "config": {
                "auto_cleanup": self.settings.auto_cleanup,
                "auto_warnings": self.settings.auto_warnings,
                "cleanup_schedule": self.settings.cleanup_schedule,
                "warning_schedule": self.settings.warning_schedule,
                "cleanup_dry_run": self.settings.cleanup_dry_run,
                "cleanup_concurrency": self.settings.cleanup_concurrency,
            },
            "is_enabled": self.settings.auto_cleanup or self.settings.auto_warnings,
            "admin_email_configured": bool(self.admin_email),
            "last_runs": {name: run.to_dict() for name, run in self._last_runs.items()},
        }

    # --------------------------------------------------------
    # Helpers
    # --------------------------------------------------------

    def _new_summary(self, job: str, dry_run: bool | None = None) -> JobRunSummary:
        return JobRunSummary(
            job=job,
            run_id=uuid.uuid4().hex,
            status=JobStatus.COMPLETED,
            started_at=self.clock(),
            dry_run=dry_run,
        )

    def _finish(self, summary: JobRunSummary, status: JobStatus) -> JobRunSummary:
        summary.status = status
        summary.finished_at = self.clock()
        self._last_runs[summary.job] = summary
        return summary

    async def _send_admin_alert(self, subject: str, data: dict[str, Any]) -> bool:
        if not self.admin_email:
            logger.warning(f"ADMIN_EMAIL not configured, dropping alert: {subject}")
            return False

        body = (
            "DEMO CLEANUP SYSTEM ALERT\n"
            "\n"
            f"Subject: {subject}\n"
            f"Timestamp: {self.clock().isoformat()}\n"
            "\n"
            "Details:\n"
            f"{json.dumps(data, indent=2, default=str)}\n"
            "\n"
            "This is an automated alert from the demo cleanup system.\n"
        )
        sent = await self.notifier.send(self.admin_email, f"{ADMIN_ALERT_PREFIX}{subject}", body)
        if not sent:
            logger.error(f"Failed to deliver admin alert: {subject}")
        return sent


__all__ = [
    "ADMIN_ALERT_PREFIX",
    "JobStatus",
    "JobRunSummary",
    "DemoCleanupJob",
]
