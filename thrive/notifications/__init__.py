# Thrive - Multi-Tenant Assessment Report Platform
# Copyright (c) 2026 George Scott Foley
# ORCID: 0009-0006-4957-0540
# Email: Georgescottfoley@proton.me
# Licensed under the MIT License - see LICENSE file for details
"""
Outbound notifications (email) for the demo lifecycle.
"""

from .handlers import (
    CallbackNotifier,
    LogNotifier,
    Notification,
    Notifier,
    SendGridNotifier,
    build_notifier,
)

__all__ = [
    "CallbackNotifier",
    "LogNotifier",
    "Notification",
    "Notifier",
    "SendGridNotifier",
    "build_notifier",
]
