# Thrive - Multi-Tenant Assessment Report Platform
# Copyright (c) 2026 George Scott Foley
# ORCID: 0009-0006-4957-0540
# Email: Georgescottfoley@proton.me
# Licensed under the MIT License - see LICENSE file for details
"""
Permission evaluation: the module/organization gate and the
resource/action matrix.
"""

from .gate import Decision, DenyReason, PermissionGate
from .matrix import (
    AccessContext,
    AccessDeniedCode,
    AccessResult,
    ActionType,
    PermissionMatrix,
    ResourceType,
)

__all__ = [
    "Decision",
    "DenyReason",
    "PermissionGate",
    "AccessContext",
    "AccessDeniedCode",
    "AccessResult",
    "ActionType",
    "PermissionMatrix",
    "ResourceType",
]
