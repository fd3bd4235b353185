"""
Authentication service.

Resolves the fi_session token into an ``AuthContext`` and implements the
unified login used by both church staff and platform staff.

Two entry points share one resolution path:

- ``get_auth_context``: soft, returns None when there is no usable session
- ``require_auth_context``: hard, raises UnauthenticatedError instead
"""
import logging
from dataclasses import dataclass, asdict
from functools import lru_cache
from typing import List, Optional

from sqlalchemy import func
from werkzeug.security import check_password_hash, generate_password_hash

from faithsite.exceptions import AccountLockedError, ForbiddenError, UnauthenticatedError
from faithsite.models import Church, ChurchMembership, ChurchStatus, User, UserRole
from faithsite.services import lockout_service, session_service
from faithsite.utils.http import is_safe_return_to

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"
NO_ORGANIZATION_MESSAGE = "Your account is not associated with any organization"

PLATFORM_HOME = '/platform'
ADMIN_HOME = '/admin/dashboard'
SELECT_CHURCH_PATH = '/select-church'


@dataclass(frozen=True)
class AuthContext:
    """Who is calling, and (when resolvable) in which church and with which role."""
    user_id: str
    email: str
    name: Optional[str]
    platform_role: Optional[str]
    session_id: str
    church_id: Optional[str] = None
    church_slug: Optional[str] = None
    church_name: Optional[str] = None
    role: Optional[str] = None
    membership_count: int = 0

    @property
    def has_church(self) -> bool:
        return self.church_id is not None

    @property
    def is_platform_user(self) -> bool:
        return self.platform_role is not None

    @property
    def requires_church_selection(self) -> bool:
        """No church resolved while the user has several to choose from."""
        return self.church_id is None and self.membership_count > 1

    def to_dict(self):
        data = asdict(self)
        data.pop('session_id')
        data['requires_church_selection'] = self.requires_church_selection
        return data


@dataclass(frozen=True)
class LoginResult:
    token: str
    user: User
    church_id: Optional[str]
    redirect_to: str
    requires_church_selection: bool = False


def _active_memberships(session, user_id: str) -> List[ChurchMembership]:
    """Active memberships in live churches, primary first."""
    return session.query(ChurchMembership).join(
        Church, Church.id == ChurchMembership.church_id
    ).filter(
        ChurchMembership.user_id == user_id,
        ChurchMembership.is_active.is_(True),
        Church.status == ChurchStatus.ACTIVE.value,
        Church.deleted_at.is_(None),
    ).order_by(
        ChurchMembership.is_primary.desc(),
        ChurchMembership.created_at.asc(),
    ).all()


def get_auth_context(session, token) -> Optional[AuthContext]:
    """
    Resolve a session token to an AuthContext, or None.

    Never picks between several memberships: without an active church on the
    session and with more than one membership, the context has no church and
    ``requires_church_selection`` is True.
    """
    user_session = session_service.validate_session(session, token)
    if user_session is None:
        return None

    user = session.get(User, user_session.user_id)
    if user is None or not user.is_active:
        return None

    memberships = _active_memberships(session, user.id)

    church_id = user_session.active_church_id
    if church_id is None and len(memberships) == 1:
        church_id = memberships[0].church_id

    church = None
    role = None
    if church_id is not None:
        candidate = session.get(Church, church_id)
        if candidate is not None and candidate.is_active:
            membership = next((m for m in memberships if m.church_id == candidate.id), None)
            if membership is not None:
                church, role = candidate, membership.role
            elif user.platform_role:
                # Platform staff act as church admins when entering a church
                church, role = candidate, UserRole.ADMIN.value

    return AuthContext(
        user_id=user.id,
        email=user.email,
        name=user.name,
        platform_role=user.platform_role,
        session_id=user_session.id,
        church_id=church.id if church else None,
        church_slug=church.slug if church else None,
        church_name=church.name if church else None,
        role=role,
        membership_count=len(memberships),
    )


def require_auth_context(session, token) -> AuthContext:
    """Same as get_auth_context but raises UnauthenticatedError instead of returning None."""
    auth = get_auth_context(session, token)
    if auth is None:
        raise UnauthenticatedError()
    return auth


@lru_cache(maxsize=1)
def _dummy_password_hash() -> str:
    return generate_password_hash('timing-equalizer-not-a-password', method='scrypt')


def _fail_login(session, email, ip_address, user_agent, reason):
    lockout_service.record_attempt(session, email, ip_address, False, reason, user_agent)
    session.commit()
    logger.warning(f"Login failed for {email}: {reason}")
    raise UnauthenticatedError(INVALID_CREDENTIALS_MESSAGE)


def authenticate(session, email: str, password: str, ip_address: Optional[str] = None,
                 user_agent: Optional[str] = None, return_to: Optional[str] = None,
                 lockout_policy: lockout_service.LockoutPolicy = lockout_service.LockoutPolicy(),
                 duration_days: int = session_service.DEFAULT_SESSION_DURATION_DAYS) -> LoginResult:
    """
    Unified login for church and platform users.

    Raises:
        AccountLockedError: too many recent failures for the email or IP
        UnauthenticatedError: unknown email, wrong password or inactive user (same message)
        ForbiddenError: valid credentials but no church and no platform role
    """
    email = (email or '').strip().lower()
    password = password or ''

    status = lockout_service.check_lockout(session, email, ip_address, lockout_policy)
    if status.locked:
        lockout_service.record_attempt(session, email, ip_address, False, 'locked', user_agent)
        session.commit()
        logger.warning(f"Login blocked for {email} ({status.reason} locked until {status.locked_until})")
        raise AccountLockedError()

    user = session.query(User).filter(func.lower(User.email) == email).first()
    if user is None:
        # Same cost as a real check so response time doesn't reveal unknown emails
        check_password_hash(_dummy_password_hash(), password)
        _fail_login(session, email, ip_address, user_agent, 'user_not_found')

    if not user.check_password(password):
        _fail_login(session, email, ip_address, user_agent, 'invalid_password')

    if not user.is_active:
        _fail_login(session, email, ip_address, user_agent, 'user_inactive')

    memberships = _active_memberships(session, user.id)
    safe_return_to = return_to if is_safe_return_to(return_to) else None
    requires_selection = False

    if user.platform_role:
        church_id = memberships[0].church_id if memberships else None
        redirect_to = safe_return_to or PLATFORM_HOME
    elif not memberships:
        lockout_service.record_attempt(session, email, ip_address, False, 'no_membership', user_agent)
        session.commit()
        logger.warning(f"Login refused for {email}: no active church membership")
        raise ForbiddenError(NO_ORGANIZATION_MESSAGE)
    elif len(memberships) == 1:
        church_id = memberships[0].church_id
        redirect_to = safe_return_to or ADMIN_HOME
    else:
        church_id = memberships[0].church_id
        redirect_to = SELECT_CHURCH_PATH
        requires_selection = True

    token = session_service.create_session(
        session, user.id, church_id,
        user_agent=user_agent, ip_address=ip_address, duration_days=duration_days,
    )
    lockout_service.record_attempt(session, email, ip_address, True, None, user_agent)
    session.commit()

    logger.info(f"Login succeeded for user {user.id} (church={church_id})")
    return LoginResult(token, user, church_id, redirect_to, requires_selection)


def list_switchable_churches(session, auth: AuthContext):
    """Churches the user holds an active membership in, flagged with the current one."""
    return [
        {
            'id': membership.church.id,
            'slug': membership.church.slug,
            'name': membership.church.name,
            'role': membership.role,
            'is_primary': membership.is_primary,
            'is_current': membership.church_id == auth.church_id,
        }
        for membership in _active_memberships(session, auth.user_id)
    ]
