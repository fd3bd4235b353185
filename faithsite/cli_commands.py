"""
Flask CLI commands for operations.

Commands:
- flask init-db: Create database tables
- flask create-platform-admin: Create a vendor platform user
- flask cleanup-sessions: Delete expired sessions
- flask cleanup-login-attempts: Delete old login attempts
"""

import click
import re
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from faithsite import database
from faithsite.models import PlatformRole, User
from faithsite.services import lockout_service, session_service

EMAIL_PATTERN = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'


def init_cli_commands(app):
    """Register CLI commands with Flask app."""

    @app.cli.command('init-db')
    def init_db_command():
        """Create all tables (development and tests; production uses migrations)."""
        database.create_all()
        click.echo(click.style('Database tables created.', fg='green'))

    @app.cli.command('create-platform-admin')
    @click.option('--email', prompt=True, help='Email address')
    @click.option('--name', default='', help='Display name')
    @click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
    @click.option('--role', type=click.Choice([r.value for r in PlatformRole]),
                  default=PlatformRole.PLATFORM_ADMIN.value, show_default=True)
    def create_platform_admin(email, name, password, role):
        """Create a platform user (vendor staff)."""
        email = email.strip().lower()
        if not re.match(EMAIL_PATTERN, email):
            click.echo(click.style('Invalid email. Use format: user@example.com', fg='red'))
            raise SystemExit(1)

        if len(password) < 8:
            click.echo(click.style('Password must be at least 8 characters.', fg='red'))
            raise SystemExit(1)

        db_session = database.get_session()
        existing = db_session.query(User).filter(func.lower(User.email) == email).first()
        if existing:
            click.echo(click.style(f'A user with email {email} already exists.', fg='red'))
            raise SystemExit(1)

        try:
            user = User(email=email, name=name or None, platform_role=role, is_active=True)
            user.set_password(password)
            db_session.add(user)
            db_session.commit()
        except SQLAlchemyError as e:
            db_session.rollback()
            click.echo(click.style(f'Error creating user: {e}', fg='red'))
            raise SystemExit(1)

        click.echo(click.style(f'Platform user created ({role})', fg='green', bold=True))
        click.echo(f'   Email: {email}')
        click.echo(f'   ID: {user.id}')

    @app.cli.command('cleanup-sessions')
    def cleanup_sessions():
        """Delete expired sessions."""
        deleted = session_service.cleanup_expired_sessions(database.get_session())
        click.echo(f'Deleted {deleted} expired sessions.')

    @app.cli.command('cleanup-login-attempts')
    @click.option('--days', default=30, show_default=True, help='Keep attempts newer than this')
    def cleanup_login_attempts(days):
        """Delete login attempts older than --days."""
        deleted = lockout_service.cleanup_old_attempts(database.get_session(), days=days)
        click.echo(f'Deleted {deleted} login attempts.')
