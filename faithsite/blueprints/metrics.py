"""
Prometheus metrics blueprint.

Exposes /metrics with HTTP request metrics labelled by surface, plus counters
for policy-layer rejections (rate limits, auth failures).
This endpoint should be restricted to internal network or monitoring systems only.
"""
from flask import Blueprint, Response, request, g
from prometheus_client import Counter, Histogram, Gauge, generate_latest, CollectorRegistry, CONTENT_TYPE_LATEST
from prometheus_client import multiprocess, REGISTRY
import logging
import time
import os

logger = logging.getLogger(__name__)

metrics_bp = Blueprint('metrics', __name__)

# Check if running in multi-process mode (Gunicorn)
MULTIPROCESS_MODE = os.environ.get('PROMETHEUS_MULTIPROC_DIR') is not None

if MULTIPROCESS_MODE:
    registry = CollectorRegistry()
    multiprocess.MultiProcessCollector(registry)
else:
    registry = REGISTRY

_metric_registry = registry if not MULTIPROCESS_MODE else None

http_requests_total = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'surface', 'http_status'],
    registry=_metric_registry
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request latency in seconds',
    ['method', 'endpoint'],
    registry=_metric_registry,
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)
)

http_requests_in_flight = Gauge(
    'http_requests_in_flight',
    'Number of HTTP requests currently being processed',
    registry=_metric_registry
)

rate_limit_rejections_total = Counter(
    'rate_limit_rejections_total',
    'Requests rejected with 429 by the rate limiter',
    ['route'],
    registry=_metric_registry
)

auth_rejections_total = Counter(
    'auth_rejections_total',
    'Requests rejected by the policy layer',
    ['status'],
    registry=_metric_registry
)


def record_rejection(status_code, route=None):
    """Count a 401/403/429 produced by the policy layer."""
    try:
        if status_code == 429:
            rate_limit_rejections_total.labels(route=route or 'unknown').inc()
        elif status_code in (401, 403):
            auth_rejections_total.labels(status=str(status_code)).inc()
    except ValueError as e:
        logger.warning(f"Failed to record rejection metric: {e}")


def setup_metrics_instrumentation(app):
    """
    Register before/after request hooks for automatic metrics collection.

    Called from the app factory.
    """

    @app.before_request
    def before_request_metrics():
        g._prometheus_metrics_start_time = time.time()
        http_requests_in_flight.inc()

    @app.after_request
    def after_request_metrics(response):
        if not hasattr(g, '_prometheus_metrics_start_time'):
            return response

        duration = time.time() - g._prometheus_metrics_start_time
        endpoint = request.endpoint or 'unknown'
        parsed = g.get('surface')
        surface = parsed.surface.value if parsed is not None else 'unknown'

        http_request_duration_seconds.labels(method=request.method, endpoint=endpoint).observe(duration)
        http_requests_total.labels(
            method=request.method,
            endpoint=endpoint,
            surface=surface,
            http_status=response.status_code
        ).inc()
        http_requests_in_flight.dec()
        return response


@metrics_bp.route('/metrics')
def metrics():
    """
    Prometheus metrics endpoint.

    SECURITY NOTE: not authenticated; restrict by network/firewall rules in production.
    """
    data = generate_latest(registry)
    return Response(data, mimetype=CONTENT_TYPE_LATEST)
