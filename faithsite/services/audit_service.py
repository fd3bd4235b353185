"""
Audit logging service for tracking security-relevant church actions.
"""
from faithsite.logging_config import describe_error
from faithsite.models.audit_log import AuditLog, AuditAction
from faithsite.utils.http import get_client_ip, get_user_agent
from flask import g, has_request_context
import json
import logging

logger = logging.getLogger(__name__)


def log_action(
    tenant_session,
    action: AuditAction,
    entity_type: str = None,
    entity_id: str = None,
    details: dict = None,
    user_id: str = None
):
    """
    Log an auditable action through a tenant-scoped session.

    Args:
        tenant_session: TenantScopedSession of the church the action happened in
        action: AuditAction enum value
        entity_type: Type of entity affected (e.g., 'announcement', 'membership')
        entity_id: ID of the affected entity
        details: Dict with additional details (will be JSON encoded)
        user_id: Acting user; defaults to the request's auth context
    """
    try:
        if user_id is None and has_request_context():
            auth = g.get('auth')
            user_id = auth.user_id if auth else None

        ip_address = get_client_ip() if has_request_context() else None
        user_agent = get_user_agent() if has_request_context() else None

        # Serialize details to JSON
        details_json = None
        if details:
            try:
                details_json = json.dumps(details, default=str)
            except (TypeError, ValueError) as e:
                logger.warning(f"Failed to serialize audit details: {e}")
                details_json = str(details)

        audit_entry = AuditLog(
            user_id=user_id,
            action=action.value,
            entity_type=entity_type,
            entity_id=entity_id,
            details=details_json,
            ip_address=ip_address,
            user_agent=user_agent,
        )

        tenant_session.add(audit_entry)
        # Note: Caller is responsible for committing the session

        logger.info(f"Audit log created: {action.value} by user {user_id} on {entity_type} {entity_id}")
        return audit_entry

    except Exception as e:
        logger.error(f"Failed to create audit log: {describe_error(e)}")
        # Don't raise exception - audit failures should not break the request
        return None


def get_audit_logs(tenant_session, limit: int = 100, offset: int = 0,
                   action_filter: AuditAction = None, user_id_filter: str = None):
    """
    Retrieve audit logs for the session's church with optional filters.

    Returns:
        List of AuditLog objects, newest first
    """
    criteria = []
    if action_filter:
        criteria.append(AuditLog.action == action_filter.value)
    if user_id_filter:
        criteria.append(AuditLog.user_id == user_id_filter)

    return tenant_session.query(AuditLog, *criteria).order_by(
        AuditLog.created_at.desc()
    ).limit(limit).offset(offset).all()
