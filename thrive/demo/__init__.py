# Thrive - Multi-Tenant Assessment Report Platform
# Copyright (c) 2026 George Scott Foley
# ORCID: 0009-0006-4957-0540
# Email: Georgescottfoley@proton.me
# Licensed under the MIT License - see LICENSE file for details
"""
Demo account subsystem: report quota, lifecycle scheduling and data export.
"""

from .export import DataExporter, DemoDataExport, ExportArchive, ExportedResource
from .lifecycle import (
    CleanupResult,
    CleanupStats,
    DemoLifecycleScheduler,
    DemoLifecycleState,
    DemoUserCleanupInfo,
    WarningRunResult,
    classify,
)
from .quota_service import DemoLimitCheck, QuotaEnforcer, ReportQuotaResult, UpgradePrompt
from .quotas import (
    CounterUpdate,
    InMemoryReportCounterBackend,
    ReportCounterBackend,
    SqlReportCounterBackend,
)

__all__ = [
    # Export
    "DataExporter",
    "DemoDataExport",
    "ExportArchive",
    "ExportedResource",
    # Lifecycle
    "CleanupResult",
    "CleanupStats",
    "DemoLifecycleScheduler",
    "DemoLifecycleState",
    "DemoUserCleanupInfo",
    "WarningRunResult",
    "classify",
    # Quota
    "DemoLimitCheck",
    "QuotaEnforcer",
    "ReportQuotaResult",
    "UpgradePrompt",
    "CounterUpdate",
    "InMemoryReportCounterBackend",
    "ReportCounterBackend",
    "SqlReportCounterBackend",
]
