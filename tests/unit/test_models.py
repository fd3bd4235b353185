"""
Unit tests for SQLAlchemy models.
"""

from datetime import timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from faithsite.models import (
    TENANT_SCOPED_MODELS, Announcement, Church, ChurchMembership, ChurchStatus, ConsultationRequest,
    ContentStatus, Lead, LoginAttempt, User, UserInvite, UserRole, UserSession, is_tenant_scoped, utcnow,
)
from tests.factories import make_church, make_user


class TestChurchModel:
    """Tests for Church model."""

    def test_create_church(self, session):
        church = make_church(session, 'grace')

        assert len(church.id) == 32
        assert church.status == ChurchStatus.ACTIVE.value
        assert church.is_active is True

    def test_slug_unique(self, session, church1):
        session.add(Church(slug=church1.slug, name='Duplicate'))

        with pytest.raises(IntegrityError):
            session.commit()

    def test_suspend_and_soft_delete(self, session, church1):
        church1.suspend()
        assert church1.is_active is False

        church1.unsuspend()
        assert church1.is_active is True

        church1.deleted_at = utcnow()
        assert church1.is_active is False


class TestUserModel:
    """Tests for User model."""

    def test_password_hashing(self, session):
        user = make_user(session, password='correct horse')

        assert user.password_hash != 'correct horse'
        assert user.password_hash.startswith('scrypt:')
        assert user.check_password('correct horse') is True
        assert user.check_password('wrong') is False

    def test_no_password_never_matches(self):
        assert User(email='x@test.com').check_password('') is False

    def test_email_unique(self, session, admin1):
        session.add(User(email=admin1.email))

        with pytest.raises(IntegrityError):
            session.commit()


class TestMembershipModel:

    def test_one_membership_per_church(self, session, admin1, church1):
        session.add(ChurchMembership(user_id=admin1.id, church_id=church1.id, role=UserRole.VIEWER.value))

        with pytest.raises(IntegrityError):
            session.commit()

    def test_default_role_is_viewer(self, session, church1):
        user = make_user(session)
        membership = ChurchMembership(user_id=user.id, church_id=church1.id)
        session.add(membership)
        session.commit()

        assert membership.role == UserRole.VIEWER.value
        assert membership.is_active is True


class TestContentModels:

    def test_publish_sets_timestamp_once(self, session, church1):
        announcement = Announcement(church_id=church1.id, title='Picnic')
        session.add(announcement)
        session.commit()

        assert announcement.status == ContentStatus.DRAFT.value

        announcement.publish()
        first_published = announcement.published_at
        assert announcement.is_published is True
        assert first_published is not None

        announcement.unpublish()
        announcement.publish()
        assert announcement.published_at == first_published

    def test_announcement_expiry(self):
        now = utcnow()
        announcement = Announcement(title='x', expires_at=now - timedelta(minutes=1))

        assert announcement.is_expired(now) is True
        assert Announcement(title='y').is_expired(now) is False


class TestTenantScoping:

    def test_scoped_models(self):
        for model in TENANT_SCOPED_MODELS:
            assert is_tenant_scoped(model)
            assert model.__table__.c.church_id.nullable is False

    @pytest.mark.parametrize('model', [Church, User, UserSession, LoginAttempt, Lead, ConsultationRequest])
    def test_unscoped_models(self, model):
        assert is_tenant_scoped(model) is False
        assert is_tenant_scoped(model()) is False


class TestUserSessionModel:

    def test_is_expired(self):
        now = utcnow()

        assert UserSession(expires_at=now - timedelta(seconds=1)).is_expired(now) is True
        assert UserSession(expires_at=now).is_expired(now) is True
        assert UserSession(expires_at=now + timedelta(days=7)).is_expired(now) is False


class TestUserInviteModel:

    def test_pending_until_accepted_or_expired(self):
        now = utcnow()
        invite = UserInvite(email='a@test.com', token='t', expires_at=now + timedelta(days=7))

        assert invite.is_pending is True
        invite.accepted_at = now
        assert invite.is_pending is False
        assert UserInvite(expires_at=now - timedelta(seconds=1)).is_pending is False

    def test_to_dict_omits_token(self):
        invite = UserInvite(email='a@test.com', role=UserRole.EDITOR.value, token='secret-token',
                            expires_at=utcnow() + timedelta(days=7))

        data = invite.to_dict()

        assert 'token' not in data
        assert 'secret-token' not in data.values()
        assert data['email'] == 'a@test.com'
