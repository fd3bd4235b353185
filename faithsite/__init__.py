"""Flask application factory."""
from flask import Flask, g, jsonify, request
from werkzeug.exceptions import HTTPException
from faithsite.database import init_db
from faithsite.logging_config import configure_logging
import os
import time


def create_app(config_object='config.Config'):
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_object)

    configure_logging(app)

    # Sentry error tracking in production
    if os.getenv('SENTRY_DSN') and app.config.get('ENV') == 'production':
        import sentry_sdk
        from sentry_sdk.integrations.flask import FlaskIntegration

        sentry_sdk.init(
            dsn=os.getenv('SENTRY_DSN'),
            integrations=[FlaskIntegration()],
            traces_sample_rate=0.1,  # 10% of transactions for performance monitoring
            environment=app.config.get('ENV'),
            release=os.getenv('GIT_COMMIT', 'unknown'),
            send_default_pii=False,
        )

    # Prometheus metrics instrumentation
    from faithsite.blueprints.metrics import setup_metrics_instrumentation, record_rejection
    setup_metrics_instrumentation(app)

    # Production: Enable ProxyFix for HTTPS behind Nginx reverse proxy
    if app.config.get('ENV') == 'production':
        from werkzeug.middleware.proxy_fix import ProxyFix
        app.wsgi_app = ProxyFix(
            app.wsgi_app,
            x_for=1,      # Trust X-Forwarded-For with 1 proxy
            x_proto=1,    # Trust X-Forwarded-Proto
            x_host=1,     # Trust X-Forwarded-Host (surface routing depends on it)
            x_port=1,     # Trust X-Forwarded-Port
            x_prefix=0    # No prefix (not behind a URL prefix)
        )

    # Initialize database
    init_db(app)

    # Rate limiter (memory or Redis counters)
    from faithsite.services.rate_limit_service import init_rate_limiter, get_rate_limit_headers
    init_rate_limiter(app)

    # Request context: request id, surface, public church and auth context
    from faithsite.middleware import load_request_context
    from faithsite.utils.http import REQUEST_ID_HEADER

    @app.before_request
    def before_request_handler():
        """Resolve surface and auth context for each request."""
        load_request_context()

    @app.after_request
    def add_request_id_header(response):
        request_id = g.get('request_id')
        if request_id:
            response.headers[REQUEST_ID_HEADER] = request_id
        return response

    # Error Handlers
    from faithsite.exceptions import AppError, RateLimitedError

    @app.errorhandler(AppError)
    def handle_app_error(error):
        """Translate application errors to JSON with the error's status."""
        if error.status_code >= 500:
            app.logger.error(f"AppError [{error.status_code}]: {error.message}")
        else:
            app.logger.info(f"AppError [{error.status_code}] {request.method} {request.path}: {error.message}")

        record_rejection(error.status_code, g.get('rate_limit_route'))
        response = jsonify(error.to_dict())
        response.status_code = error.status_code

        if isinstance(error, RateLimitedError):
            response.headers.update(get_rate_limit_headers(error.result))
            response.headers['Retry-After'] = str(
                max(0, error.result.reset_at - int(time.time()))
            )
        return response

    @app.errorhandler(HTTPException)
    def handle_http_exception(error):
        return jsonify({'status': 'error', 'message': error.name}), error.code

    @app.errorhandler(Exception)
    def internal_error(error):
        import traceback
        from faithsite.logging_config import describe_error, redact_text
        app.logger.error(f"Unhandled Exception: {describe_error(error)}")
        app.logger.error(f"Traceback: {redact_text(traceback.format_exc())}")
        return jsonify({'status': 'error', 'message': 'Internal Server Error'}), 500

    # Register blueprints
    from faithsite.blueprints.auth import auth_bp
    from faithsite.blueprints.announcements import announcements_bp
    from faithsite.blueprints.team import team_bp
    from faithsite.blueprints.platform import platform_bp
    from faithsite.blueprints.public import public_bp
    from faithsite.blueprints.pages import pages_bp
    from faithsite.blueprints.metrics import metrics_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(announcements_bp)
    app.register_blueprint(team_bp)
    app.register_blueprint(platform_bp)
    app.register_blueprint(public_bp)
    app.register_blueprint(pages_bp)
    app.register_blueprint(metrics_bp)

    # Register CLI commands
    from faithsite.cli_commands import init_cli_commands
    init_cli_commands(app)

    app.logger.info(f"App created (ENV={app.config.get('ENV')}, rate limit backend={app.config.get('RATE_LIMIT_BACKEND')})")

    return app
