"""Public (unauthenticated) endpoints: church contact form, marketing consultation, health."""
import logging

from flask import Blueprint, g, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from faithsite.database import get_session
from faithsite.decorators.rate_limit import rate_limit
from faithsite.exceptions import NotFoundError
from faithsite.forms.api_forms import ConsultationForm, ContactForm, validate_json_form
from faithsite.logging_config import describe_error
from faithsite.middleware import require_surface
from faithsite.models import ConsultationRequest, ContactSubmission
from faithsite.services.rate_limit_service import PUBLIC_FORM_POLICY
from faithsite.tenant_session import get_tenant_session
from faithsite.utils.hostname import Surface
from faithsite.utils.http import get_client_ip, get_user_agent

logger = logging.getLogger(__name__)

public_bp = Blueprint('public', __name__, url_prefix='/api')

FORM_RECEIVED_MESSAGE = "Thank you! Your message has been sent."


def _contact_limit_key():
    church = g.get('church')
    return f"/api/contact:{church.id if church else 'unknown'}"


@public_bp.route('/contact', methods=['POST'])
@require_surface(Surface.TENANT)
@rate_limit('/api/contact', PUBLIC_FORM_POLICY, key_func=_contact_limit_key)
def contact():
    """Contact form on a church's public site."""
    church = g.get('church')
    if church is None:
        raise NotFoundError("Church not found")

    form = validate_json_form(ContactForm)

    if form.website.data:
        # Bots fill the hidden field; answer like a success and store nothing
        logger.info(f"Honeypot triggered on contact form for church {church.id}")
        return jsonify({'status': 'success', 'message': FORM_RECEIVED_MESSAGE})

    db = get_tenant_session(church.id)
    db.add(ContactSubmission(
        name=form.name.data.strip(),
        email=form.email.data.strip().lower(),
        message=form.message.data.strip(),
        ip_address=get_client_ip(),
        user_agent=get_user_agent(),
    ))
    db.commit()

    return jsonify({'status': 'success', 'message': FORM_RECEIVED_MESSAGE}), 201


@public_bp.route('/marketing/consultation', methods=['POST'])
@require_surface(Surface.MARKETING)
@rate_limit('/api/marketing/consultation', PUBLIC_FORM_POLICY)
def consultation():
    """Consultation request from the vendor marketing site."""
    form = validate_json_form(ConsultationForm)

    if form.website.data:
        logger.info("Honeypot triggered on consultation form")
        return jsonify({'status': 'success', 'message': FORM_RECEIVED_MESSAGE})

    db_session = get_session()
    db_session.add(ConsultationRequest(
        name=form.name.data.strip(),
        email=form.email.data.strip().lower(),
        church_name=(form.church_name.data or '').strip() or None,
        message=(form.message.data or '').strip() or None,
        ip_address=get_client_ip(),
    ))
    db_session.commit()

    return jsonify({'status': 'success', 'message': FORM_RECEIVED_MESSAGE}), 201


@public_bp.route('/health', methods=['GET'])
def health():
    """Liveness plus a database round trip."""
    database = 'ok'
    try:
        get_session().execute(text('SELECT 1'))
    except SQLAlchemyError as e:
        logger.error(f"Health check database error: {describe_error(e)}")
        database = 'error'

    status_code = 200 if database == 'ok' else 503
    return jsonify({
        'status': 'ok' if status_code == 200 else 'degraded',
        'database': database,
        'surface': g.surface.surface.value,
    }), status_code
