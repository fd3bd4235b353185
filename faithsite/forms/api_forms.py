"""
JSON API forms.

JSON bodies are flattened into form data so the same FlaskForm/validator
machinery validates API payloads. CSRF is off for these
forms: the API authenticates with the SameSite=Lax session cookie.
"""
from flask import request
from flask_wtf import FlaskForm
from werkzeug.datastructures import MultiDict
from wtforms import BooleanField, DateTimeField, StringField, TextAreaField
from wtforms.validators import AnyOf, DataRequired, Length, Optional, Regexp

from faithsite.exceptions import ValidationFailedError
from faithsite.models import LeadStatus, UserRole

EMAIL_PATTERN = r'^[^@\s]+@[^@\s]+\.[^@\s]+$'
ISO_DATETIME_FORMATS = ['%Y-%m-%dT%H:%M:%S', '%Y-%m-%dT%H:%M', '%Y-%m-%d %H:%M:%S', '%Y-%m-%d']


class ApiForm(FlaskForm):
    """Base form for JSON endpoints."""

    class Meta:
        csrf = False


class LoginForm(ApiForm):
    email = StringField('Email', validators=[
        DataRequired(message='Email is required'),
        Length(max=255),
    ])
    password = StringField('Password', validators=[DataRequired(message='Password is required')])
    return_to = StringField('Return to', validators=[Optional(), Length(max=500)])


class SwitchChurchForm(ApiForm):
    church_id = StringField('Church', validators=[DataRequired(message='church_id is required')])


class AnnouncementForm(ApiForm):
    title = StringField('Title', validators=[
        DataRequired(message='Title is required'),
        Length(max=200, message='Title must be 200 characters or less'),
    ])
    body = TextAreaField('Body', validators=[Optional(), Length(max=10000)])
    expires_at = DateTimeField('Expires at', validators=[Optional()], format=ISO_DATETIME_FORMATS)


class AnnouncementStatusForm(ApiForm):
    action = StringField('Action', validators=[
        DataRequired(message='action is required'),
        AnyOf(['publish', 'unpublish'], message='action must be publish or unpublish'),
    ])


class MembershipRoleForm(ApiForm):
    role = StringField('Role', validators=[
        DataRequired(message='role is required'),
        AnyOf([role.value for role in UserRole], message='Unknown role'),
    ])
    is_primary = BooleanField('Primary', validators=[Optional()])


class InviteForm(ApiForm):
    email = StringField('Email', validators=[
        DataRequired(message='Email is required'),
        Regexp(EMAIL_PATTERN, message='Enter a valid email address'),
        Length(max=255),
    ])
    role = StringField('Role', validators=[
        DataRequired(message='role is required'),
        AnyOf([role.value for role in UserRole], message='Unknown role'),
    ])


class AcceptInviteForm(ApiForm):
    token = StringField('Token', validators=[DataRequired(message='token is required'), Length(max=64)])
    name = StringField('Name', validators=[DataRequired(message='Name is required'), Length(max=100)])
    password = StringField('Password', validators=[
        DataRequired(message='Password is required'),
        Length(min=8, max=100, message='Password must be between 8 and 100 characters'),
    ])


class ContactForm(ApiForm):
    name = StringField('Name', validators=[DataRequired(message='Name is required'), Length(max=200)])
    email = StringField('Email', validators=[
        DataRequired(message='Email is required'),
        Regexp(EMAIL_PATTERN, message='Enter a valid email address'),
        Length(max=255),
    ])
    message = TextAreaField('Message', validators=[
        DataRequired(message='Message is required'),
        Length(max=5000),
    ])
    website = StringField('Website', validators=[Optional()])  # Honeypot: humans leave it empty


class ConsultationForm(ApiForm):
    name = StringField('Name', validators=[DataRequired(message='Name is required'), Length(max=200)])
    email = StringField('Email', validators=[
        DataRequired(message='Email is required'),
        Regexp(EMAIL_PATTERN, message='Enter a valid email address'),
        Length(max=255),
    ])
    church_name = StringField('Church name', validators=[Optional(), Length(max=200)])
    message = TextAreaField('Message', validators=[Optional(), Length(max=5000)])
    website = StringField('Website', validators=[Optional()])  # Honeypot


class ChurchForm(ApiForm):
    slug = StringField('Slug', validators=[DataRequired(message='Slug is required'), Length(max=63)])
    name = StringField('Name', validators=[DataRequired(message='Name is required'), Length(max=200)])
    primary_contact_email = StringField('Contact email', validators=[
        Optional(),
        Regexp(EMAIL_PATTERN, message='Enter a valid email address'),
    ])


class LeadForm(ApiForm):
    church_name = StringField('Church name', validators=[DataRequired(message='Church name is required'), Length(max=200)])
    contact_name = StringField('Contact name', validators=[Optional(), Length(max=200)])
    email = StringField('Email', validators=[Optional(), Regexp(EMAIL_PATTERN, message='Enter a valid email address')])
    notes = TextAreaField('Notes', validators=[Optional()])
    status = StringField('Status', validators=[
        Optional(),
        AnyOf([status.value for status in LeadStatus], message='Unknown status'),
    ])
    owner_user_id = StringField('Owner', validators=[Optional()])


class LeadUpdateForm(LeadForm):
    church_name = StringField('Church name', validators=[Optional(), Length(max=200)])


def _as_formdata(payload):
    """Flatten a JSON object into form data (null -> '', booleans -> 'true'/'false')."""
    formdata = MultiDict()
    for key, value in payload.items():
        if value is None:
            formdata.add(key, '')
        elif isinstance(value, bool):
            formdata.add(key, 'true' if value else 'false')
        elif isinstance(value, str):
            formdata.add(key, value)
        else:
            formdata.add(key, str(value))
    return formdata


def validate_json_form(form_cls):
    """
    Build ``form_cls`` from the JSON body and validate it.

    Raises:
        ValidationFailedError: body is not a JSON object, or a field fails validation
    """
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise ValidationFailedError({'body': ['Expected a JSON object']})

    form = form_cls(formdata=_as_formdata(payload))
    if not form.validate():
        raise ValidationFailedError(form.errors)
    return form


def submitted_data(form):
    """Only the fields present in the payload (for partial updates)."""
    return {name: field.data for name, field in form._fields.items() if field.raw_data}
