"""Observability setup for OpenTelemetry, metrics, and structured logging."""

import logging

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest
import structlog

from .config import settings

SERVICE_NAME = "vip-transfer-api"

# Prometheus metrics
REGISTRY = CollectorRegistry()

REQUEST_DURATION = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint'],
    registry=REGISTRY
)

# Business metrics
RESERVATIONS_CREATED = Counter(
    'reservations_created_total',
    'Total reservations created',
    ['source'],
    registry=REGISTRY
)

RESERVATION_STATUS_CHANGES = Counter(
    'reservation_status_changes_total',
    'Total reservation status transitions',
    ['status'],
    registry=REGISTRY
)

NOTIFICATIONS = Counter(
    'notifications_total',
    'Notification attempts by channel and outcome',
    ['channel', 'outcome'],
    registry=REGISTRY
)

CACHE_LOOKUPS = Counter(
    'cache_lookups_total',
    'Cache lookups by cache and result',
    ['cache', 'result'],
    registry=REGISTRY
)

CACHE_INVALIDATIONS = Counter(
    'cache_invalidations_total',
    'Cache invalidations by category',
    ['category'],
    registry=REGISTRY
)


def setup_structured_logging():
    """Configure structured logging with structlog."""

    def add_trace_context(logger, method_name, event_dict):
        """Add trace context to log events."""
        span = trace.get_current_span()
        if span and span.is_recording():
            ctx = span.get_span_context()
            event_dict['trace_id'] = format(ctx.trace_id, '032x')
            event_dict['span_id'] = format(ctx.span_id, '016x')
        return event_dict

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            add_trace_context,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.ConsoleRenderer() if settings.debug else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, settings.log_level)
        ),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def setup_tracing(app_name: str = SERVICE_NAME):
    """Setup OpenTelemetry tracing; spans are exported only when an OTLP endpoint is set."""
    resource = Resource.create({
        "service.name": app_name,
        "service.version": "1.0.0",
        "environment": settings.environment,
    })

    provider = TracerProvider(resource=resource)
    if settings.otlp_endpoint:
        provider.add_span_processor(
            BatchSpanProcessor(OTLPSpanExporter(endpoint=settings.otlp_endpoint))
        )
    trace.set_tracer_provider(provider)

    return trace.get_tracer(__name__)


def instrument_fastapi(app):
    """Instrument FastAPI with OpenTelemetry."""
    FastAPIInstrumentor.instrument_app(app)


def instrument_sqlalchemy(engine):
    """Instrument the async engine's sync core with OpenTelemetry."""
    SQLAlchemyInstrumentor().instrument(engine=engine.sync_engine)


class MetricsCollector:
    """Collector for business metrics."""

    @staticmethod
    def record_reservation_created(source: str):
        RESERVATIONS_CREATED.labels(source=source).inc()

    @staticmethod
    def record_status_change(status: str):
        RESERVATION_STATUS_CHANGES.labels(status=status).inc()

    @staticmethod
    def record_notification(channel: str, outcome: str):
        """Record a notification outcome (sent, skipped, failed)."""
        NOTIFICATIONS.labels(channel=channel, outcome=outcome).inc()

    @staticmethod
    def record_cache_lookup(cache: str, hit: bool):
        CACHE_LOOKUPS.labels(cache=cache, result="hit" if hit else "miss").inc()

    @staticmethod
    def record_invalidation(category: str):
        CACHE_INVALIDATIONS.labels(category=category).inc()

    @staticmethod
    def observe_request(method: str, endpoint: str, seconds: float):
        REQUEST_DURATION.labels(method=method, endpoint=endpoint).observe(seconds)


def get_prometheus_metrics():
    """Get Prometheus metrics for the /metrics endpoint."""
    return generate_latest(REGISTRY)


# Global metrics collector instance
metrics_collector = MetricsCollector()


def get_logger(name: str):
    """Get a structlog logger bound to a component name."""
    return structlog.get_logger(name)
