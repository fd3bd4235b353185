"""
Role-based access control.

Two independent axes:

- church role (ADMIN / EDITOR / VIEWER) from the caller's membership, mapped
  to permissions by a fixed table
- platform role (PLATFORM_ADMIN / PLATFORM_STAFF / SALES_REP) for vendor staff

Predicates are pure: they take a role and answer, without touching the
database or the request. Decorators read the role only from ``g.auth``,
which is built from the session lookup.
"""
import enum
from functools import wraps

from flask import g

from faithsite.exceptions import ForbiddenError, UnauthenticatedError
from faithsite.models import PlatformRole, UserRole


class Permission(str, enum.Enum):
    """Everything a church role can be allowed to do."""
    CONTENT_READ = 'content:read'
    CONTENT_CREATE = 'content:create'
    CONTENT_EDIT = 'content:edit'
    CONTENT_PUBLISH = 'content:publish'
    CONTENT_DELETE = 'content:delete'
    TEAM_READ = 'team:read'
    TEAM_INVITE = 'team:invite'
    TEAM_EDIT = 'team:edit'
    TEAM_DEACTIVATE = 'team:deactivate'


ROLE_PERMISSIONS = {
    UserRole.ADMIN: frozenset(Permission),
    UserRole.EDITOR: frozenset({
        Permission.CONTENT_READ,
        Permission.CONTENT_CREATE,
        Permission.CONTENT_EDIT,
        Permission.CONTENT_PUBLISH,
        Permission.CONTENT_DELETE,
        Permission.TEAM_READ,
    }),
    UserRole.VIEWER: frozenset({
        Permission.CONTENT_READ,
        Permission.TEAM_READ,
    }),
}

ALL_ROLES = (UserRole.ADMIN, UserRole.EDITOR, UserRole.VIEWER)

ROLE_LABELS = {
    UserRole.ADMIN: 'Admin',
    UserRole.EDITOR: 'Editor',
    UserRole.VIEWER: 'Viewer',
}

ROLE_DESCRIPTIONS = {
    UserRole.ADMIN: 'Full access, including team management and settings',
    UserRole.EDITOR: 'Can create, edit, publish and delete content',
    UserRole.VIEWER: 'Read-only access to content and team',
}


def _coerce_role(role):
    if isinstance(role, UserRole):
        return role
    try:
        return UserRole(role)
    except ValueError:
        return None


def _coerce_platform_role(platform_role):
    if isinstance(platform_role, PlatformRole):
        return platform_role
    try:
        return PlatformRole(platform_role)
    except ValueError:
        return None


def has_permission(role, permission) -> bool:
    """True when ``role`` grants ``permission``. Unknown roles grant nothing."""
    role = _coerce_role(role)
    if role is None:
        return False
    try:
        permission = Permission(permission)
    except ValueError:
        return False
    return permission in ROLE_PERMISSIONS[role]


def can_edit_content(role) -> bool:
    return has_permission(role, Permission.CONTENT_EDIT)


def can_publish_content(role) -> bool:
    return has_permission(role, Permission.CONTENT_PUBLISH)


def can_delete_content(role) -> bool:
    return has_permission(role, Permission.CONTENT_DELETE)


def can_manage_team(role) -> bool:
    return has_permission(role, Permission.TEAM_EDIT)


def get_role_label(role) -> str:
    role = _coerce_role(role)
    return ROLE_LABELS.get(role, 'Unknown')


def get_role_description(role) -> str:
    role = _coerce_role(role)
    return ROLE_DESCRIPTIONS.get(role, '')


# Platform axis

def has_platform_role(platform_role, *allowed) -> bool:
    role = _coerce_platform_role(platform_role)
    return role is not None and role in allowed


def is_platform_user(platform_role) -> bool:
    return _coerce_platform_role(platform_role) is not None


def is_platform_admin(platform_role) -> bool:
    return has_platform_role(platform_role, PlatformRole.PLATFORM_ADMIN)


def is_platform_staff(platform_role) -> bool:
    return has_platform_role(platform_role, PlatformRole.PLATFORM_ADMIN, PlatformRole.PLATFORM_STAFF)


def has_crm_access(platform_role) -> bool:
    return has_platform_role(platform_role, PlatformRole.PLATFORM_ADMIN, PlatformRole.SALES_REP)


# Decorators

def _current_auth():
    auth = g.get('auth')
    if auth is None:
        raise UnauthenticatedError()
    return auth


def require_permission(permission):
    """
    Decorator: require a church permission for the caller's resolved church.

    Usage:
        @require_permission(Permission.CONTENT_PUBLISH)
    """
    permission = Permission(permission)

    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            auth = _current_auth()
            if not auth.church_id:
                raise ForbiddenError("Select a church first")
            if not has_permission(auth.role, permission):
                raise ForbiddenError()
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def _platform_guard(predicate):
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            auth = _current_auth()
            if not predicate(auth.platform_role):
                raise ForbiddenError()
            return f(*args, **kwargs)
        return decorated_function
    return decorator


require_platform_user = _platform_guard(is_platform_user)
require_platform_staff = _platform_guard(is_platform_staff)
require_platform_admin = _platform_guard(is_platform_admin)
require_crm_user = _platform_guard(has_crm_access)
