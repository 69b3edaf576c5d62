# Thrive - Multi-Tenant Assessment Report Platform
# Copyright (c) 2026 George Scott Foley
# ORCID: 0009-0006-4957-0540
# Email: Georgescottfoley@proton.me
# Licensed under the MIT License - see LICENSE file for details
"""
Account domain: user, organization and case snapshots plus the
organization registry read model.
"""

from .models import (
    AccountState,
    AssessmentCase,
    Clock,
    Organization,
    User,
    ensure_utc,
    is_anonymized,
    pii_violations,
    utcnow,
)
from .registry import OrganizationRegistry

__all__ = [
    "AccountState",
    "AssessmentCase",
    "Clock",
    "Organization",
    "OrganizationRegistry",
    "User",
    "ensure_utc",
    "is_anonymized",
    "pii_violations",
    "utcnow",
]
