# Thrive - Multi-Tenant Assessment Report Platform
# Copyright (c) 2026 George Scott Foley
# ORCID: 0009-0006-4957-0540
# Email: Georgescottfoley@proton.me
# Licensed under the MIT License - see LICENSE file for details
"""
Observability: structured logging and audit records.
"""

from .logging import (
    AuditLogger,
    configure_logging,
    get_log_context,
    log_context,
    mask_sensitive_data,
)

__all__ = [
    "AuditLogger",
    "configure_logging",
    "get_log_context",
    "log_context",
    "mask_sensitive_data",
]
