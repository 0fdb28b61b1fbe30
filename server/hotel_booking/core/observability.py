"""Observability setup: structured logging, Prometheus metrics and OpenTelemetry tracing."""

import logging

import structlog
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest

from .config import settings

SERVICE_NAME = "hotel-booking-api"
SERVICE_VERSION = "1.0.0"

REGISTRY = CollectorRegistry()

# Request metrics
REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
    registry=REGISTRY,
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    registry=REGISTRY,
)

# Business metrics
BOOKINGS_CREATED = Counter(
    "bookings_created_total",
    "Total room bookings created",
    registry=REGISTRY,
)

BOOKINGS_UPDATED = Counter(
    "bookings_updated_total",
    "Total bookings moved to another room",
    registry=REGISTRY,
)

BOOKING_REJECTIONS = Counter(
    "booking_rejections_total",
    "Booking requests refused by an eligibility gate",
    ["reason"],
    registry=REGISTRY,
)


def setup_structured_logging() -> None:
    """Configure structlog for business event logging."""

    def add_trace_context(logger, method_name, event_dict):
        """Attach the active span's identifiers to log events."""
        span = trace.get_current_span()
        if span and span.is_recording():
            ctx = span.get_span_context()
            event_dict["trace_id"] = format(ctx.trace_id, "032x")
            event_dict["span_id"] = format(ctx.span_id, "016x")
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
    """Install a tracer provider, exporting over OTLP when an endpoint is configured."""
    resource = Resource.create({
        "service.name": app_name,
        "service.version": SERVICE_VERSION,
        "environment": settings.environment,
    })
    provider = TracerProvider(resource=resource)

    if settings.otlp_endpoint:
        provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=settings.otlp_endpoint)))

    trace.set_tracer_provider(provider)
    return trace.get_tracer(__name__)


def instrument_fastapi(app) -> None:
    """Instrument a FastAPI application with OpenTelemetry."""
    FastAPIInstrumentor.instrument_app(app)


def instrument_sqlalchemy(engine) -> None:
    """Instrument an async SQLAlchemy engine with OpenTelemetry."""
    SQLAlchemyInstrumentor().instrument(engine=engine.sync_engine)


class MetricsCollector:
    """Collector for business metrics."""

    @staticmethod
    def record_booking_created():
        """Record a new booking."""
        BOOKINGS_CREATED.inc()

    @staticmethod
    def record_booking_updated():
        """Record a booking moved to another room."""
        BOOKINGS_UPDATED.inc()

    @staticmethod
    def record_rejection(reason: str):
        """Record a request refused by an eligibility gate."""
        BOOKING_REJECTIONS.labels(reason=reason).inc()

    @staticmethod
    def observe_request(method: str, endpoint: str, status_code: int, duration_seconds: float):
        """Record one served HTTP request."""
        REQUEST_COUNT.labels(method=method, endpoint=endpoint, status_code=str(status_code)).inc()
        REQUEST_DURATION.labels(method=method, endpoint=endpoint).observe(duration_seconds)


def get_prometheus_metrics() -> bytes:
    """Get Prometheus metrics for the /metrics endpoint."""
    return generate_latest(REGISTRY)


metrics_collector = MetricsCollector()
