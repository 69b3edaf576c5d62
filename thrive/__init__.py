# Thrive - Multi-Tenant Assessment Report Platform
# Copyright (c) 2026 George Scott Foley
# ORCID: 0009-0006-4957-0540
# Email: Georgescottfoley@proton.me
# Licensed under the MIT License - see LICENSE file for details

"""
Thrive - Multi-Tenant Assessment Report Platform

Core services for the assessment report platform:

- Permission gate for module and organization access
- Demo report quota with upgrade prompts
- Demo account lifecycle: warn, expire, export, anonymize, deactivate
- Demo data export archives
- Organization registry

Quick Start:
    from thrive import build_services, get_settings

    services = await build_services(get_settings())
    decision = services.gate.evaluate(user, ModuleType.K12)
    result = await services.quotas.increment_on_create(user.id)

All imports are lazy; ``import thrive`` does not pull in SQLAlchemy,
httpx or redis until a service is first accessed.
"""

from __future__ import annotations

import importlib
from typing import TYPE_CHECKING

__version__ = "1.0.0"
__author__ = "George Scott Foley"

if TYPE_CHECKING:
    from .accounts.models import Organization as Organization
    from .accounts.models import User as User
    from .accounts.registry import OrganizationRegistry as OrganizationRegistry
    from .bootstrap import PlatformServices as PlatformServices
    from .bootstrap import build_services as build_services
    from .core.settings import Settings as Settings
    from .core.settings import get_settings as get_settings
    from .demo.export import DataExporter as DataExporter
    from .demo.lifecycle import DemoLifecycleScheduler as DemoLifecycleScheduler
    from .demo.quota_service import QuotaEnforcer as QuotaEnforcer
    from .jobs.demo_cleanup import DemoCleanupJob as DemoCleanupJob
    from .permissions.gate import Decision as Decision
    from .permissions.gate import DenyReason as DenyReason
    from .permissions.gate import PermissionGate as PermissionGate

_LAZY_IMPORTS: dict[str, tuple[str, str]] = {
    # Settings
    "Settings": (".core.settings", "Settings"),
    "get_settings": (".core.settings", "get_settings"),
    # Wiring
    "PlatformServices": (".bootstrap", "PlatformServices"),
    "build_services": (".bootstrap", "build_services"),
    # Accounts
    "User": (".accounts.models", "User"),
    "Organization": (".accounts.models", "Organization"),
    "OrganizationRegistry": (".accounts.registry", "OrganizationRegistry"),
    # Permissions
    "PermissionGate": (".permissions.gate", "PermissionGate"),
    "Decision": (".permissions.gate", "Decision"),
    "DenyReason": (".permissions.gate", "DenyReason"),
    # Demo
    "QuotaEnforcer": (".demo.quota_service", "QuotaEnforcer"),
    "DataExporter": (".demo.export", "DataExporter"),
    "DemoLifecycleScheduler": (".demo.lifecycle", "DemoLifecycleScheduler"),
    # Jobs
    "DemoCleanupJob": (".jobs.demo_cleanup", "DemoCleanupJob"),
}

__all__ = [
    "__version__",
    *_LAZY_IMPORTS.keys(),
]


def __getattr__(name: str) -> object:
    if name in _LAZY_IMPORTS:
        module_path, attr_name = _LAZY_IMPORTS[name]
        module = importlib.import_module(module_path, __name__)
        value = getattr(module, attr_name)
        globals()[name] = value
        return value
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
