"""
observability.py: Logging, tracing and error tracking
=======================================================
Covers: stdlib logging setup, JSON event lines, OpenTelemetry tracing,
        Sentry error tracking, request timing headers.

Setup in app.py:
    from observability import init_observability
    init_observability(app)
"""

import json
import logging
import time
import uuid
from datetime import datetime, timezone
from functools import wraps
from typing import Any, Dict, Optional

from flask import g, request

# ── OpenTelemetry: distributed tracing ──
from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

# ── Sentry: error tracking ──
import sentry_sdk
from sentry_sdk.integrations.flask import FlaskIntegration

SERVICE_NAME = "news-digest-gateway"
SERVICE_VERSION = "news-digest-v1.0"
SLOW_REQUEST_MS = 1000

log = logging.getLogger("observability")

# ── Tracer ──
_tracer = None


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO),
                        format="%(asctime)s %(message)s")


def init_observability(app):
    """Initialize logging, tracing and error tracking. Call once per app."""
    global _tracer

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    # ── 1. OpenTelemetry tracing (provider is process-wide, set once) ──
    if _tracer is None:
        resource = Resource.create({"service.name": SERVICE_NAME, "service.version": SERVICE_VERSION})
        provider = TracerProvider(resource=resource)

        otlp_endpoint = app.config.get("OTLP_ENDPOINT")
        if otlp_endpoint:
            from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
            provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint)))

        trace.set_tracer_provider(provider)
        _tracer = trace.get_tracer(SERVICE_NAME)

    # ── 2. Sentry error tracking ──
    sentry_dsn = app.config.get("SENTRY_DSN")
    if sentry_dsn:
        sentry_sdk.init(
            dsn=sentry_dsn,
            integrations=[FlaskIntegration()],
            traces_sample_rate=app.config.get("SENTRY_TRACES_RATE", 0.1),
            environment=app.config.get("ENVIRONMENT", "development"),
            release=SERVICE_VERSION,
        )
        log.info("[OBS] Sentry initialized")

    # ── 3. Request timing middleware ──
    @app.before_request
    def _start_timer():
        g.start_time = time.time()
        g.trace_id = request.headers.get("X-Trace-Id", str(uuid.uuid4())[:16])

    @app.after_request
    def _record_timing(response):
        if hasattr(g, "start_time"):
            latency = (time.time() - g.start_time) * 1000
            response.headers["X-Response-Time-Ms"] = str(int(latency))
            response.headers["X-Trace-Id"] = getattr(g, "trace_id", "")

            if latency > SLOW_REQUEST_MS:
                _log_apm_event("slow_request", {
                    "path": request.path,
                    "method": request.method,
                    "latency_ms": int(latency),
                    "status": response.status_code,
                })
        return response

    log.info("[OBS] Observability initialized (logging, tracing, error-tracking)")


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def log_json_line(event: str, payload: Dict[str, Any]) -> None:
    record = {"event": event, "ts": utc_now_iso(), **payload}
    print(json.dumps(record, ensure_ascii=False))


def _log_apm_event(event_type: str, data: dict):
    """Log an APM event (slow request, error, etc.)."""
    print(json.dumps({"apm_event": event_type, "ts": utc_now_iso(), **data}))


# ══════════════════════════════════════════════
# TRACING HELPERS
# ══════════════════════════════════════════════
def traced(name: Optional[str] = None):
    """Decorator: add OpenTelemetry span to a function."""
    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            span_name = name or f.__name__
            if _tracer:
                with _tracer.start_as_current_span(span_name) as span:
                    span.set_attribute("function", f.__name__)
                    try:
                        result = f(*args, **kwargs)
                        span.set_attribute("status", "ok")
                        return result
                    except Exception as e:
                        span.set_attribute("status", "error")
                        span.record_exception(e)
                        raise
            return f(*args, **kwargs)
        return wrapper
    return decorator
