"""
Tests for the resource/action permission matrix.
"""

import pytest

from thrive.permissions.matrix import (
    AccessContext,
    AccessDeniedCode,
    ActionType,
    PermissionMatrix,
    ResourceType,
)
from thrive_core.security.roles import ModuleType, UserRole

from conftest import make_user


@pytest.fixture
def matrix():
    return PermissionMatrix(demo_report_limit=5, upgrade_url="/upgrade")


class TestReports:
    def test_demo_create_under_limit(self, matrix):
        demo = make_user(role=UserRole.DEMO, report_count=4)
        assert matrix.check_access(demo, ResourceType.REPORTS, ActionType.CREATE)

    def test_demo_create_at_limit(self, matrix):
        demo = make_user(role=UserRole.DEMO, report_count=5)
        result = matrix.check_access(demo, ResourceType.REPORTS, ActionType.CREATE)
        assert not result
        assert result.code == AccessDeniedCode.DEMO_LIMIT_EXCEEDED
        assert result.details == {"current_count": 5, "limit": 5, "upgrade_url": "/upgrade"}

    def test_context_count_overrides_snapshot(self, matrix):
        demo = make_user(role=UserRole.DEMO, report_count=0)
        context = AccessContext(current_report_count=5)
        result = matrix.check_access(demo, "reports", "create", context)
        assert result.code == AccessDeniedCode.DEMO_LIMIT_EXCEEDED

    def test_customer_has_no_report_ceiling(self, matrix):
        customer = make_user(role=UserRole.CUSTOMER, report_count=999)
        assert matrix.check_access(customer, ResourceType.REPORTS, ActionType.CREATE)

    def test_view_own_vs_org_reports(self, matrix):
        customer = make_user(role=UserRole.CUSTOMER, organization_id="org-1")
        org_admin = make_user(role=UserRole.ORG_ADMIN, organization_id="org-1")
        own = AccessContext(is_own_report=True)
        org = AccessContext(is_org_report=True, organization_id="org-1")

        assert matrix.check_access(customer, ResourceType.REPORTS, ActionType.VIEW, own)
        assert not matrix.check_access(customer, ResourceType.REPORTS, ActionType.VIEW, org)
        assert matrix.check_access(org_admin, ResourceType.REPORTS, ActionType.VIEW, org)

    def test_view_all_reports_is_admin_only(self, matrix):
        admin = make_user(role=UserRole.ADMIN)
        org_admin = make_user(role=UserRole.ORG_ADMIN)
        assert matrix.check_access(admin, ResourceType.REPORTS, ActionType.READ)
        result = matrix.check_access(org_admin, ResourceType.REPORTS, ActionType.READ)
        assert result.code == AccessDeniedCode.INSUFFICIENT_PERMISSIONS


class TestModules:
    def test_switch_requires_platform_admin(self, matrix):
        assert matrix.check_access(make_user(role=UserRole.ADMIN), "modules", "switch")
        result = matrix.check_access(make_user(role=UserRole.CUSTOMER), "modules", "switch")
        assert result.code == AccessDeniedCode.INSUFFICIENT_PERMISSIONS

    def test_unassigned_module(self, matrix):
        customer = make_user(role=UserRole.CUSTOMER, modules=(ModuleType.K12,))
        context = AccessContext(module_type=ModuleType.TUTORING)
        result = matrix.check_access(customer, ResourceType.MODULES, ActionType.VIEW, context)
        assert result.code == AccessDeniedCode.MODULE_ACCESS_DENIED
        assert result.details["assigned_modules"] == ["k12"]

    def test_admin_sees_every_module(self, matrix):
        admin = make_user(role=UserRole.ADMIN, modules=())
        for module in ModuleType:
            context = AccessContext(module_type=module)
            assert matrix.check_access(admin, ResourceType.MODULES, ActionType.VIEW, context)


class TestOrganizationScope:
    def test_foreign_organization_denied(self, matrix):
        customer = make_user(role=UserRole.CUSTOMER, organization_id="org-1")
        context = AccessContext(organization_id="org-2", is_own_report=True)
        result = matrix.check_access(customer, ResourceType.REPORTS, ActionType.VIEW, context)
        assert result.code == AccessDeniedCode.ORGANIZATION_ACCESS_DENIED
        assert result.details["requested_organization"] == "org-2"

    def test_demo_has_no_organization(self, matrix):
        demo = make_user(role=UserRole.DEMO)
        context = AccessContext(organization_id="org-1", is_own_report=True)
        result = matrix.check_access(demo, ResourceType.REPORTS, ActionType.VIEW, context)
        assert result.code == AccessDeniedCode.ORGANIZATION_ACCESS_DENIED

    def test_platform_admin_crosses_organizations(self, matrix):
        admin = make_user(role=UserRole.ADMIN, organization_id="org-1")
        context = AccessContext(organization_id="org-2")
        assert matrix.check_access(admin, ResourceType.REPORTS, ActionType.VIEW, context)


class TestAdministration:
    def test_org_admin_manages_org_users_only(self, matrix):
        org_admin = make_user(role=UserRole.ORG_ADMIN, organization_id="org-1")
        context = AccessContext(is_org_user=True, organization_id="org-1")
        assert matrix.check_access(org_admin, ResourceType.USERS, ActionType.MANAGE, context)
        assert not matrix.check_access(
            make_user(role=UserRole.CUSTOMER, organization_id="org-1"),
            ResourceType.USERS,
            ActionType.MANAGE,
            context,
        )

    def test_prompts_are_developer_only(self, matrix):
        assert matrix.check_access(make_user(role=UserRole.DEVELOPER), "prompts", "edit")
        assert not matrix.check_access(make_user(role=UserRole.ADMIN), "prompts", "edit")

    def test_database_view_vs_edit(self, matrix):
        developer = make_user(role=UserRole.DEVELOPER)
        admin = make_user(role=UserRole.ADMIN)
        assert matrix.check_access(developer, "database", "edit")
        assert not matrix.check_access(admin, "database", "view")

    def test_organizations_manage(self, matrix):
        assert matrix.check_access(make_user(role=UserRole.ADMIN), "organizations", "create")
        assert not matrix.check_access(make_user(role=UserRole.ORG_ADMIN), "organizations", "create")


class TestInvalidInput:
    def test_unknown_resource(self, matrix):
        result = matrix.check_access(make_user(role=UserRole.DEVELOPER), "spaceships", "view")
        assert result.code == AccessDeniedCode.INSUFFICIENT_PERMISSIONS
        assert result.details == {"required_permission": "view_spaceships"}

    def test_inactive_user(self, matrix):
        developer = make_user(role=UserRole.DEVELOPER, is_active=False)
        assert not matrix.check_access(developer, ResourceType.ADMIN, ActionType.VIEW)

    def test_to_dict(self, matrix):
        result = matrix.check_access(make_user(role=UserRole.ADMIN), "admin", "view")
        assert result.to_dict() == {"allowed": True, "code": None, "message": "", "details": {}}
