"""
Tests for demo data export and the on-disk export archive.
"""

import json

import pytest

from thrive.demo.export import (
    EXPORT_FORMAT_VERSION,
    DataExporter,
    DemoDataExport,
    ExportArchive,
)
from thrive_core.exceptions.hierarchy import ExportFailureError, NotFoundError
from thrive_core.security.roles import UserRole

from conftest import T0


class TestDataExporter:
    @pytest.mark.asyncio
    async def test_exports_owned_cases(self, session_factory, create_user, create_cases, clock):
        owner = await create_user(UserRole.DEMO)
        other = await create_user(UserRole.DEMO)
        case_ids = await create_cases(owner.id, 3)
        await create_cases(other.id, 2)

        export = await DataExporter(session_factory, clock=clock).export_user_data(owner.id)

        assert export.user_id == owner.id
        assert export.username == owner.username
        assert export.email == owner.email
        assert export.resource_count == 3
        assert {r.id for r in export.resources} == set(case_ids)
        assert export.exported_at == T0
        assert {r.module_type for r in export.resources} == {"k12"}
        assert sorted(r.payload["index"] for r in export.resources) == [0, 1, 2]

    @pytest.mark.asyncio
    async def test_user_without_cases(self, session_factory, create_user):
        user = await create_user(UserRole.DEMO)
        export = await DataExporter(session_factory).export_user_data(user.id)
        assert export.resources == []

    @pytest.mark.asyncio
    async def test_unknown_user(self, session_factory):
        with pytest.raises(NotFoundError):
            await DataExporter(session_factory).export_user_data(12345)

    @pytest.mark.asyncio
    async def test_export_is_read_only(self, session_factory, create_user, create_cases, count_cases):
        user = await create_user(UserRole.DEMO)
        await create_cases(user.id, 2)

        await DataExporter(session_factory).export_user_data(user.id)

        assert await count_cases(user.id) == 2


class TestExportArchive:
    def test_save_writes_json(self, tmp_path):
        export = DemoDataExport(user_id=7, username="demo7", email="demo7@example.com", exported_at=T0)
        archive = ExportArchive(str(tmp_path / "exports"))

        path = archive.save(export)

        assert path.name == "demo_export_7_20260301_120000.json"
        data = json.loads(path.read_text())
        assert data["export_info"]["version"] == EXPORT_FORMAT_VERSION
        assert data["user_id"] == 7
        assert data["resources"] == []
        assert data["email"] == "demo7@example.com"

    def test_creates_private_directory(self, tmp_path):
        target = tmp_path / "nested" / "exports"
        ExportArchive(str(target)).save(
            DemoDataExport(user_id=1, username="u", email="u@example.com", exported_at=T0)
        )
        assert target.is_dir()
        assert target.stat().st_mode & 0o077 == 0

    def test_unwritable_directory(self, tmp_path):
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("occupied")
        archive = ExportArchive(str(blocker))

        with pytest.raises(ExportFailureError) as exc_info:
            archive.save(DemoDataExport(user_id=3, username="u", email="u@example.com"))
        assert exc_info.value.user_id == 3
