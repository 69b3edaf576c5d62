# Thrive - Multi-Tenant Assessment Report Platform
# Copyright (c) 2026 George Scott Foley
# ORCID: 0009-0006-4957-0540
# Email: Georgescottfoley@proton.me
# Licensed under the MIT License - see LICENSE file for details

"""
Service wiring.

Builds every platform service from Settings with explicit construction,
so tests and the CLI get independent instances instead of module-level
singletons.

Usage:
    services = await build_services(get_settings())
    try:
        decision = services.gate.evaluate(user, ModuleType.K12)
        summary = await services.cleanup_job.run_cleanup_job()
    finally:
        await services.close()
"""

import logging
from dataclasses import dataclass

from .accounts.models import Clock, utcnow
from .accounts.registry import OrganizationRegistry
from .core.settings import Settings
from .data.database import Database
from .demo.export import DataExporter, ExportArchive
from .demo.lifecycle import DemoLifecycleScheduler
from .demo.quota_service import QuotaEnforcer
from .demo.quotas import SqlReportCounterBackend
from .jobs.demo_cleanup import DemoCleanupJob
from .jobs.locks import RedisRunLock, RunLock, build_run_lock
from .notifications.handlers import Notifier, build_notifier
from .observability.logging import AuditLogger
from .permissions.gate import PermissionGate
from .permissions.matrix import PermissionMatrix

logger = logging.getLogger(__name__)


@dataclass
class PlatformServices:
    """Every long-lived service, constructed once per process or test."""

    settings: Settings
    database: Database
    registry: OrganizationRegistry
    gate: PermissionGate
    matrix: PermissionMatrix
    quotas: QuotaEnforcer
    exporter: DataExporter
    archive: ExportArchive
    notifier: Notifier
    scheduler: DemoLifecycleScheduler
    run_lock: RunLock
    cleanup_job: DemoCleanupJob

    async def refresh_registry(self) -> int:
        return await self.registry.refresh(self.database.session_factory)

    async def close(self) -> None:
        if isinstance(self.run_lock, RedisRunLock):
            await self.run_lock.close()
        await self.database.close()
        logger.info("Platform services closed")


async def build_services(
    settings: Settings,
    database: Database | None = None,
    clock: Clock = utcnow,
    notifier: Notifier | None = None,
    run_lock: RunLock | None = None,
) -> PlatformServices:
    """
    Construct and initialize all platform services.

    An already-initialized Database may be passed in; otherwise one is
    created from settings.database and initialized here.
    """
    if database is None:
        database = Database(settings.database)
        await database.init()
    session_factory = database.session_factory

    registry = await OrganizationRegistry.load(session_factory)
    notifier = notifier or build_notifier(settings.email)
    run_lock = run_lock or build_run_lock(settings.redis.url, settings.redis.max_connections)

    exporter = DataExporter(session_factory, clock=clock)
    archive = ExportArchive(settings.export_directory)
    scheduler = DemoLifecycleScheduler(
        session_factory,
        exporter,
        notifier,
        settings.demo,
        archive=archive,
        clock=clock,
        concurrency=settings.demo_jobs.cleanup_concurrency,
    )
    cleanup_job = DemoCleanupJob(
        scheduler,
        notifier,
        run_lock,
        settings.demo_jobs,
        admin_email=settings.admin_email,
        audit=AuditLogger(),
        clock=clock,
    )

    logger.info(f"{settings.app_name} services initialized ({settings.environment})")
    return PlatformServices(
        settings=settings,
        database=database,
        registry=registry,
        gate=PermissionGate(registry),
        matrix=PermissionMatrix(settings.demo.demo_report_limit, settings.demo.upgrade_url),
        quotas=QuotaEnforcer(SqlReportCounterBackend(session_factory), settings.demo),
        exporter=exporter,
        archive=archive,
        notifier=notifier,
        scheduler=scheduler,
        run_lock=run_lock,
        cleanup_job=cleanup_job,
    )


__all__ = ["PlatformServices", "build_services"]
