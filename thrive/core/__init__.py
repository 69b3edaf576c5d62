# Thrive - Multi-Tenant Assessment Report Platform
# Copyright (c) 2026 George Scott Foley
# ORCID: 0009-0006-4957-0540
# Email: Georgescottfoley@proton.me
# Licensed under the MIT License - see LICENSE file for details

"""
Core Module

- Settings: pydantic-settings configuration for the platform core
"""

from .settings import (
    DemoJobSettings,
    DemoSettings,
    Settings,
    get_settings,
)

__all__ = [
    "Settings",
    "DemoSettings",
    "DemoJobSettings",
    "get_settings",
]
