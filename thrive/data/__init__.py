# Thrive - Multi-Tenant Assessment Report Platform
# Copyright (c) 2026 George Scott Foley
# ORCID: 0009-0006-4957-0540
# Email: Georgescottfoley@proton.me
# Licensed under the MIT License - see LICENSE file for details

"""
Data layer for Thrive.

Provides database engine management, ORM models, and repository classes
for organizations, users and assessment cases. Supports both PostgreSQL
(production) and SQLite (development / tests) via SQLAlchemy async.
"""

from .database import Database
from .models import AssessmentCaseModel, Base, OrganizationModel, UserModel
from .repositories import (
    ANONYMIZED_PASSWORD,
    AssessmentCaseRepository,
    OrganizationRepository,
    UserRepository,
    anonymized_email,
    anonymized_username,
)

__all__ = [
    # Engine lifecycle
    "Database",
    # Models
    "Base",
    "OrganizationModel",
    "UserModel",
    "AssessmentCaseModel",
    # Repositories
    "OrganizationRepository",
    "UserRepository",
    "AssessmentCaseRepository",
    "ANONYMIZED_PASSWORD",
    "anonymized_email",
    "anonymized_username",
]
