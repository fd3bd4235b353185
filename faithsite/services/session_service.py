"""
Server-side session lifecycle.

The fi_session cookie only carries an opaque random token; everything else
(user, active church, expiry) lives in the ``user_session`` table.
"""
import logging
import secrets
from datetime import timedelta
from typing import Optional

from faithsite.models import Church, ChurchMembership, User, UserSession, utcnow

logger = logging.getLogger(__name__)

DEFAULT_SESSION_DURATION_DAYS = 7
TOKEN_BYTES = 32


def generate_session_token() -> str:
    """64 hex characters of CSPRNG output."""
    return secrets.token_hex(TOKEN_BYTES)


def looks_like_session_token(token) -> bool:
    """Cheap shape check before touching the database."""
    if not token or not isinstance(token, str) or len(token) != TOKEN_BYTES * 2:
        return False
    try:
        int(token, 16)
    except ValueError:
        return False
    return True


def create_session(session, user_id: str, church_id: Optional[str] = None,
                   user_agent: Optional[str] = None, ip_address: Optional[str] = None,
                   duration_days: int = DEFAULT_SESSION_DURATION_DAYS) -> str:
    """
    Persist a new session row and return its token.

    Caller is responsible for committing the session.
    """
    token = generate_session_token()
    user_session = UserSession(
        token=token,
        user_id=user_id,
        active_church_id=church_id,
        expires_at=utcnow() + timedelta(days=duration_days),
        user_agent=user_agent[:255] if user_agent else None,
        ip_address=ip_address,
    )
    session.add(user_session)
    session.flush()
    logger.info(f"Session created for user {user_id} (church={church_id})")
    return token


def validate_session(session, token) -> Optional[UserSession]:
    """
    Return the live session row for ``token``, or None.

    Expired rows are deleted on sight.
    """
    if not looks_like_session_token(token):
        return None

    user_session = session.query(UserSession).filter(UserSession.token == token).first()
    if user_session is None:
        return None

    if user_session.is_expired():
        logger.info(f"Expired session {user_session.id} removed")
        session.delete(user_session)
        session.commit()
        return None

    return user_session


def delete_session(session, token) -> bool:
    """Delete the session for ``token``; False when there was none."""
    if not looks_like_session_token(token):
        return False
    deleted = session.query(UserSession).filter(UserSession.token == token).delete(
        synchronize_session=False
    )
    session.commit()
    return deleted > 0


def delete_all_user_sessions(session, user_id: str, church_id: Optional[str] = None) -> int:
    """
    Sign a user out everywhere, or only of sessions active in ``church_id``.

    Caller is responsible for committing the session.
    """
    query = session.query(UserSession).filter(UserSession.user_id == user_id)
    if church_id is not None:
        query = query.filter(UserSession.active_church_id == church_id)
    deleted = query.delete(synchronize_session=False)
    logger.info(f"Deleted {deleted} sessions for user {user_id} (church={church_id})")
    return deleted


def cleanup_expired_sessions(session) -> int:
    deleted = session.query(UserSession).filter(UserSession.expires_at <= utcnow()).delete(
        synchronize_session=False
    )
    session.commit()
    return deleted


def can_access_church(session, user: User, church: Optional[Church]) -> bool:
    """Platform users may enter any live church; others need an active membership."""
    if church is None or not church.is_active:
        return False
    if user.platform_role:
        return True
    membership = session.query(ChurchMembership).filter(
        ChurchMembership.user_id == user.id,
        ChurchMembership.church_id == church.id,
        ChurchMembership.is_active.is_(True),
    ).first()
    return membership is not None


def switch_active_church(session, user_session: UserSession, church: Church) -> bool:
    """
    Point ``user_session`` at ``church`` when the user may access it.

    Returns False (and changes nothing) when access is denied.
    """
    user = session.get(User, user_session.user_id)
    if user is None or not user.is_active or not can_access_church(session, user, church):
        return False

    user_session.active_church_id = church.id
    session.commit()
    logger.info(f"User {user.id} switched active church to {church.id}")
    return True
