"""Church announcements API (admin surface)."""
from flask import Blueprint, g, jsonify, request

from faithsite.decorators.permissions import Permission, require_permission
from faithsite.forms.api_forms import (
    AnnouncementForm, AnnouncementStatusForm, validate_json_form,
)
from faithsite.middleware import require_auth, restrict_to_surfaces
from faithsite.models import Announcement, AuditAction, ContentStatus
from faithsite.services.audit_service import log_action
from faithsite.tenant_session import get_tenant_session
from faithsite.utils.hostname import Surface

announcements_bp = Blueprint('announcements', __name__, url_prefix='/api/announcements')
restrict_to_surfaces(announcements_bp, Surface.ADMIN)


def _tenant_db():
    return get_tenant_session(g.auth.church_id)


@announcements_bp.route('', methods=['GET'])
@require_auth
@require_permission(Permission.CONTENT_READ)
def list_announcements():
    """List announcements for the current church, newest first."""
    criteria = []
    status = request.args.get('status', '').strip().upper()
    if status in (ContentStatus.DRAFT.value, ContentStatus.PUBLISHED.value):
        criteria.append(Announcement.status == status)

    announcements = _tenant_db().query(Announcement, *criteria).order_by(
        Announcement.created_at.desc()
    ).all()
    return jsonify({'status': 'success', 'announcements': [a.to_dict() for a in announcements]})


@announcements_bp.route('', methods=['POST'])
@require_auth
@require_permission(Permission.CONTENT_CREATE)
def create_announcement():
    form = validate_json_form(AnnouncementForm)
    db = _tenant_db()

    announcement = Announcement(
        title=form.title.data.strip(),
        body=form.body.data or '',
        expires_at=form.expires_at.data,
    )
    db.add(announcement)
    db.flush()
    log_action(db, AuditAction.CONTENT_CREATED, 'announcement', announcement.id)
    db.commit()

    return jsonify({'status': 'success', 'announcement': announcement.to_dict()}), 201


@announcements_bp.route('/<announcement_id>', methods=['GET'])
@require_auth
@require_permission(Permission.CONTENT_READ)
def get_announcement(announcement_id):
    announcement = _tenant_db().get_or_404(Announcement, announcement_id)
    return jsonify({'status': 'success', 'announcement': announcement.to_dict()})


@announcements_bp.route('/<announcement_id>', methods=['PUT'])
@require_auth
@require_permission(Permission.CONTENT_EDIT)
def update_announcement(announcement_id):
    db = _tenant_db()
    announcement = db.get_or_404(Announcement, announcement_id)
    form = validate_json_form(AnnouncementForm)

    announcement.title = form.title.data.strip()
    announcement.body = form.body.data or ''
    announcement.expires_at = form.expires_at.data
    log_action(db, AuditAction.CONTENT_UPDATED, 'announcement', announcement.id)
    db.commit()

    return jsonify({'status': 'success', 'announcement': announcement.to_dict()})


@announcements_bp.route('/<announcement_id>', methods=['PATCH'])
@require_auth
@require_permission(Permission.CONTENT_PUBLISH)
def change_announcement_status(announcement_id):
    """Publish or unpublish: {"action": "publish" | "unpublish"}."""
    db = _tenant_db()
    announcement = db.get_or_404(Announcement, announcement_id)
    form = validate_json_form(AnnouncementStatusForm)

    if form.action.data == 'publish':
        announcement.publish()
        action = AuditAction.CONTENT_PUBLISHED
    else:
        announcement.unpublish()
        action = AuditAction.CONTENT_UNPUBLISHED
    log_action(db, action, 'announcement', announcement.id)
    db.commit()

    return jsonify({'status': 'success', 'announcement': announcement.to_dict()})


@announcements_bp.route('/<announcement_id>', methods=['DELETE'])
@require_auth
@require_permission(Permission.CONTENT_DELETE)
def delete_announcement(announcement_id):
    db = _tenant_db()
    announcement = db.get_or_404(Announcement, announcement_id)

    db.delete(announcement)
    log_action(db, AuditAction.CONTENT_DELETED, 'announcement', announcement_id,
               details={'title': announcement.title})
    db.commit()

    return jsonify({'status': 'success'})
