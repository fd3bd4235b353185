"""
Team invitations.

An ADMIN invites an email address into their church with a role; the invitee
redeems the single-use token (valid for seven days) to get a membership,
creating an account first when the email is new. Delivering the invite link
is left to the caller.
"""
import logging
import secrets
from datetime import timedelta
from typing import Optional

from faithsite.exceptions import ValidationFailedError
from faithsite.models import AuditAction, Church, ChurchMembership, User, UserInvite, utcnow
from faithsite.services.audit_service import log_action
from faithsite.tenant_session import get_tenant_session

logger = logging.getLogger(__name__)

INVITE_DURATION_DAYS = 7
INVALID_INVITE = 'Invalid or expired invite'


def generate_invite_token() -> str:
    return secrets.token_hex(32)


def list_pending_invites(db):
    """Unaccepted, unexpired invites of the church behind ``db``."""
    return db.query(
        UserInvite,
        UserInvite.accepted_at.is_(None),
        UserInvite.expires_at > utcnow(),
    ).order_by(UserInvite.created_at.desc()).all()


def create_invite(db, email: str, role: str, invited_by_id: Optional[str] = None) -> UserInvite:
    """
    Invite ``email`` into the church behind the tenant session ``db``. Caller commits.

    Raises:
        ValidationFailedError: already an active member, or an invite is still pending
    """
    email = email.strip().lower()

    existing_member = db.query(ChurchMembership).join(User, User.id == ChurchMembership.user_id).filter(
        User.email == email,
        ChurchMembership.is_active.is_(True),
    ).first()
    if existing_member is not None:
        raise ValidationFailedError({'email': ['A user with this email is already a member']})

    pending = db.query(
        UserInvite,
        UserInvite.email == email,
        UserInvite.accepted_at.is_(None),
        UserInvite.expires_at > utcnow(),
    ).first()
    if pending is not None:
        raise ValidationFailedError({'email': ['An invite for this email is already pending']})

    invite = db.add(UserInvite(
        email=email,
        role=role,
        token=generate_invite_token(),
        expires_at=utcnow() + timedelta(days=INVITE_DURATION_DAYS),
        invited_by_id=invited_by_id,
    ))
    db.flush()
    log_action(db, AuditAction.USER_INVITED, 'invite', invite.id, details={'email': email, 'role': role})
    logger.info(f"Invite created for {email} in church {db.church_id} ({role})")
    return invite


def accept_invite(session, token: str, name: str, password: str):
    """
    Redeem an invite token; returns ``(user, membership)``. Commits.

    A new email gets an account with ``name``/``password``. An existing account
    must confirm its current password before the membership is added.

    Raises:
        ValidationFailedError: unknown, used or expired token, or wrong password
    """
    invite = session.query(UserInvite).filter(UserInvite.token == token).first() if token else None
    if invite is None:
        raise ValidationFailedError({'token': [INVALID_INVITE]})
    if invite.accepted_at is not None:
        raise ValidationFailedError({'token': ['This invite has already been used']})
    if invite.is_expired():
        raise ValidationFailedError({'token': ['This invite has expired']})

    church = session.get(Church, invite.church_id)
    if church is None or not church.is_active:
        raise ValidationFailedError({'token': [INVALID_INVITE]})

    user = session.query(User).filter(User.email == invite.email).first()
    if user is None:
        user = User(email=invite.email, name=name.strip(), is_active=True)
        user.set_password(password)
        session.add(user)
        session.flush()
    elif not user.is_active or not user.check_password(password):
        raise ValidationFailedError({
            'password': ['An account with this email already exists; enter its password to join'],
        })

    db = get_tenant_session(church.id, session)
    membership = db.query(ChurchMembership, ChurchMembership.user_id == user.id).first()
    has_primary = session.query(ChurchMembership).filter(
        ChurchMembership.user_id == user.id,
        ChurchMembership.is_active.is_(True),
        ChurchMembership.is_primary.is_(True),
    ).first() is not None

    if membership is None:
        membership = db.add(ChurchMembership(user_id=user.id, role=invite.role, is_primary=not has_primary))
    else:
        membership.role = invite.role
        membership.is_active = True

    invite.accepted_at = utcnow()
    db.flush()
    log_action(db, AuditAction.INVITE_ACCEPTED, 'membership', membership.id,
               details={'invite_id': invite.id}, user_id=user.id)
    db.commit()

    logger.info(f"Invite {invite.id} accepted by user {user.id} for church {church.id}")
    return user, membership
