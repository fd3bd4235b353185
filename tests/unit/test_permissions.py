"""
Unit tests for role and platform-role permission predicates.
"""

import pytest

from faithsite.decorators.permissions import (
    ALL_ROLES, ROLE_PERMISSIONS, Permission, can_delete_content, can_edit_content,
    can_manage_team, can_publish_content, get_role_description, get_role_label,
    has_crm_access, has_permission, has_platform_role, is_platform_admin,
    is_platform_staff, is_platform_user,
)
from faithsite.models import PlatformRole, UserRole

EXPECTED = {
    UserRole.ADMIN: set(Permission),
    UserRole.EDITOR: {
        Permission.CONTENT_READ, Permission.CONTENT_CREATE, Permission.CONTENT_EDIT,
        Permission.CONTENT_PUBLISH, Permission.CONTENT_DELETE, Permission.TEAM_READ,
    },
    UserRole.VIEWER: {Permission.CONTENT_READ, Permission.TEAM_READ},
}


class TestChurchPermissions:
    """Tests for the church role permission table."""

    @pytest.mark.parametrize('role', ALL_ROLES)
    @pytest.mark.parametrize('permission', list(Permission))
    def test_full_table(self, role, permission):
        """Test every (role, permission) pair against the expected grants."""
        assert has_permission(role, permission) is (permission in EXPECTED[role])

    def test_accepts_string_values(self):
        assert has_permission('ADMIN', 'team:edit') is True
        assert has_permission('VIEWER', 'content:edit') is False

    @pytest.mark.parametrize('role', [None, '', 'OWNER', 'admin', 42])
    def test_unknown_roles_grant_nothing(self, role):
        assert not any(has_permission(role, permission) for permission in Permission)

    def test_unknown_permission_is_denied(self):
        assert has_permission(UserRole.ADMIN, 'billing:manage') is False

    def test_admin_is_superset(self):
        for role in ALL_ROLES:
            assert ROLE_PERMISSIONS[role] <= ROLE_PERMISSIONS[UserRole.ADMIN]

    def test_convenience_predicates(self):
        assert can_edit_content(UserRole.EDITOR)
        assert can_publish_content(UserRole.EDITOR)
        assert can_delete_content(UserRole.EDITOR)
        assert not can_manage_team(UserRole.EDITOR)
        assert can_manage_team(UserRole.ADMIN)
        assert not can_edit_content(UserRole.VIEWER)

    def test_labels(self):
        assert get_role_label(UserRole.ADMIN) == 'Admin'
        assert get_role_label('EDITOR') == 'Editor'
        assert get_role_label('nope') == 'Unknown'
        assert get_role_description(UserRole.VIEWER)
        assert get_role_description('nope') == ''


class TestPlatformPermissions:
    """Tests for the vendor-side predicates."""

    @pytest.mark.parametrize('platform_role, user, staff, admin, crm', [
        (PlatformRole.PLATFORM_ADMIN, True, True, True, True),
        (PlatformRole.PLATFORM_STAFF, True, True, False, False),
        (PlatformRole.SALES_REP, True, False, False, True),
        ('PLATFORM_ADMIN', True, True, True, True),
        (None, False, False, False, False),
        ('ADMIN', False, False, False, False),
    ])
    def test_platform_predicates(self, platform_role, user, staff, admin, crm):
        assert is_platform_user(platform_role) is user
        assert is_platform_staff(platform_role) is staff
        assert is_platform_admin(platform_role) is admin
        assert has_crm_access(platform_role) is crm

    def test_has_platform_role(self):
        assert has_platform_role('SALES_REP', PlatformRole.SALES_REP)
        assert not has_platform_role('SALES_REP', PlatformRole.PLATFORM_ADMIN)
        assert not has_platform_role(None, *PlatformRole)
