# Thrive - Multi-Tenant Assessment Report Platform
# Copyright (c) 2026 George Scott Foley
# ORCID: 0009-0006-4957-0540
# Email: Georgescottfoley@proton.me
# Licensed under the MIT License - see LICENSE file for details
"""
Scheduled jobs: demo cleanup / warning runs and their run locks.
"""

from .demo_cleanup import ADMIN_ALERT_PREFIX, DemoCleanupJob, JobRunSummary, JobStatus
from .locks import InMemoryRunLock, RedisRunLock, RunLock, build_run_lock

__all__ = [
    "ADMIN_ALERT_PREFIX",
    "DemoCleanupJob",
    "JobRunSummary",
    "JobStatus",
    "InMemoryRunLock",
    "RedisRunLock",
    "RunLock",
    "build_run_lock",
]
