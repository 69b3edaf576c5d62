# Thrive - Multi-Tenant Assessment Report Platform
# Copyright (c) 2026 George Scott Foley
# ORCID: 0009-0006-4957-0540
# Email: Georgescottfoley@proton.me
# Licensed under the MIT License - see LICENSE file for details

"""
Demo Data Export

Snapshots a user's assessment reports into a portable structure before
any destructive cleanup step, and archives the snapshot as JSON.
"""

import json
import logging
import tempfile
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from thrive_core.exceptions.hierarchy import ExportFailureError, NotFoundError

from ..accounts.models import AssessmentCase, Clock, utcnow
from ..data.repositories import AssessmentCaseRepository, UserRepository

logger = logging.getLogger(__name__)

EXPORT_FORMAT_VERSION = "1.0"


def _get_export_directory(configured: str | None) -> Path:
    """
    Get the export directory path.

    Uses the configured path or a secure tempdir subdirectory,
    created with mode 0700 (owner only).
    """
    if configured:
        export_dir = Path(configured)
    else:
        export_dir = Path(tempfile.gettempdir()) / "thrive_exports"

    export_dir.mkdir(mode=0o700, parents=True, exist_ok=True)
    return export_dir


# ============================================================
# EXPORT TYPES
# ============================================================


@dataclass(frozen=True)
class ExportedResource:
    id: str
    display_name: str | None
    module_type: str
    created_date: datetime
    payload: dict | None

    @classmethod
    def from_case(cls, case: AssessmentCase) -> "ExportedResource":
        return cls(
            id=case.id,
            display_name=case.display_name,
            module_type=case.module_type.value,
            created_date=case.created_date,
            payload=case.report_data,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "display_name": self.display_name,
            "module_type": self.module_type,
            "created_date": self.created_date.isoformat(),
            "payload": self.payload,
        }


@dataclass(frozen=True)
class DemoDataExport:
    """Portable snapshot of a user's owned resources."""

    user_id: int
    username: str
    email: str
    resources: list[ExportedResource] = field(default_factory=list)
    exported_at: datetime = field(default_factory=utcnow)

    @property
    def resource_count(self) -> int:
        return len(self.resources)

    def to_dict(self) -> dict[str, Any]:
        return {
            "export_info": {
                "version": EXPORT_FORMAT_VERSION,
                "exported_at": self.exported_at.isoformat(),
            },
            "user_id": self.user_id,
            "username": self.username,
            "email": self.email,
            "resources": [r.to_dict() for r in self.resources],
            "exported_at": self.exported_at.isoformat(),
        }


# ============================================================
# EXPORTER
# ============================================================


class DataExporter:
    """Reads a user's resources into a DemoDataExport."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], clock: Clock = utcnow):
        self.session_factory = session_factory
        self.clock = clock

    async def export_user_data(self, user_id: int) -> DemoDataExport:
        """
        Snapshot every case created by the user.

        Raises NotFoundError for an unknown user and ExportFailureError
        when storage cannot be read.
        """
        try:
            async with self.session_factory() as session:
                user = await UserRepository(session).get_by_id(user_id)
                if user is None:
                    raise NotFoundError("User", user_id)
                cases = await AssessmentCaseRepository(session).list_for_user(user_id)
                export = DemoDataExport(
                    user_id=user.id,
                    username=user.username,
                    email=user.email,
                    resources=[
                        ExportedResource.from_case(AssessmentCase.from_model(c)) for c in cases
                    ],
                    exported_at=self.clock(),
                )
        except SQLAlchemyError as e:
            raise ExportFailureError(user_id, original_error=e) from e

        logger.info(f"Exported {export.resource_count} reports for user {export.username}")
        return export


class ExportArchive:
    """Writes export snapshots to the export directory."""

    def __init__(self, export_directory: str | None = None):
        self.export_directory = export_directory

    def save(self, export: DemoDataExport) -> Path:
        try:
            export_dir = _get_export_directory(self.export_directory)
            timestamp = export.exported_at.strftime("%Y%m%d_%H%M%S")
            filepath = export_dir / f"demo_export_{export.user_id}_{timestamp}.json"
            with open(filepath, "w") as f:
                json.dump(export.to_dict(), f, indent=2, default=str)
        except OSError as e:
            raise ExportFailureError(export.user_id, original_error=e) from e

        logger.info(f"Demo data export written: {filepath}")
        return filepath


__all__ = [
    "EXPORT_FORMAT_VERSION",
    "ExportedResource",
    "DemoDataExport",
    "DataExporter",
    "ExportArchive",
]
