"""
Account lockout based on recent failed login attempts.

An email is locked once it reaches MAX_FAILED_ATTEMPTS failures inside the
attempt window, until LOCKOUT_DURATION_MINUTES after the most recent failure.
A single IP is blocked at three times that threshold.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import func

from faithsite.models import LoginAttempt, utcnow

logger = logging.getLogger(__name__)

MAX_FAILED_ATTEMPTS = 5
LOCKOUT_DURATION_MINUTES = 15
ATTEMPT_WINDOW_MINUTES = 15
IP_ATTEMPT_MULTIPLIER = 3


@dataclass(frozen=True)
class LockoutPolicy:
    max_failed_attempts: int = MAX_FAILED_ATTEMPTS
    lockout_minutes: int = LOCKOUT_DURATION_MINUTES
    window_minutes: int = ATTEMPT_WINDOW_MINUTES

    @classmethod
    def from_config(cls, config):
        return cls(
            max_failed_attempts=int(config.get('MAX_FAILED_ATTEMPTS', MAX_FAILED_ATTEMPTS)),
            lockout_minutes=int(config.get('LOCKOUT_DURATION_MINUTES', LOCKOUT_DURATION_MINUTES)),
            window_minutes=int(config.get('ATTEMPT_WINDOW_MINUTES', ATTEMPT_WINDOW_MINUTES)),
        )


@dataclass(frozen=True)
class LockoutStatus:
    locked: bool
    locked_until: Optional[datetime] = None
    failed_attempts: int = 0
    reason: Optional[str] = None  # 'email' or 'ip'


def record_attempt(session, email: str, ip_address: Optional[str], success: bool,
                   fail_reason: Optional[str] = None, user_agent: Optional[str] = None) -> LoginAttempt:
    """Store one login attempt. Caller commits."""
    attempt = LoginAttempt(
        email=(email or '').strip().lower(),
        ip_address=ip_address,
        user_agent=user_agent,
        success=success,
        fail_reason=fail_reason,
    )
    session.add(attempt)
    return attempt


def _failures_since(session, column, value, since):
    return session.query(
        func.count(LoginAttempt.id), func.max(LoginAttempt.created_at)
    ).filter(
        column == value,
        LoginAttempt.success.is_(False),
        LoginAttempt.created_at >= since,
    ).one()


def check_lockout(session, email: str, ip_address: Optional[str] = None,
                  policy: LockoutPolicy = LockoutPolicy(), now=None) -> LockoutStatus:
    """Report whether a login for ``email`` from ``ip_address`` must be refused."""
    now = now or utcnow()
    since = now - timedelta(minutes=policy.window_minutes)
    email = (email or '').strip().lower()

    count, last_failure = _failures_since(session, LoginAttempt.email, email, since)
    if count >= policy.max_failed_attempts and last_failure is not None:
        locked_until = last_failure + timedelta(minutes=policy.lockout_minutes)
        if locked_until > now:
            return LockoutStatus(True, locked_until, count, 'email')

    if ip_address:
        ip_count, ip_last = _failures_since(session, LoginAttempt.ip_address, ip_address, since)
        if ip_count >= policy.max_failed_attempts * IP_ATTEMPT_MULTIPLIER and ip_last is not None:
            locked_until = ip_last + timedelta(minutes=policy.lockout_minutes)
            if locked_until > now:
                return LockoutStatus(True, locked_until, ip_count, 'ip')

    return LockoutStatus(False, None, count)


def cleanup_old_attempts(session, days: int = 30) -> int:
    cutoff = utcnow() - timedelta(days=days)
    deleted = session.query(LoginAttempt).filter(LoginAttempt.created_at < cutoff).delete(
        synchronize_session=False
    )
    session.commit()
    logger.info(f"Deleted {deleted} login attempts older than {days} days")
    return deleted
