import logging
import structlog
from fastapi import FastAPI
from prometheus_fastapi_instrumentator import Instrumentator

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource, SERVICE_NAME
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

from shared.config.settings import Settings


def add_otel_ids(logger, log_method, event_dict):
    """Tag log lines emitted inside a recording span with its trace/span ids."""
    span = trace.get_current_span()
    if span.is_recording():
        ctx = span.get_span_context()
        event_dict["trace_id"] = trace.format_trace_id(ctx.trace_id)
        event_dict["span_id"] = trace.format_span_id(ctx.span_id)
    return event_dict


def configure_logging(level: str = "INFO"):
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            add_otel_ids,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level.upper())
        ),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_tracing(app: FastAPI, service_name: str, otlp_endpoint: str):
    resource = Resource.create({SERVICE_NAME: service_name})
    provider = TracerProvider(resource=resource)
    trace.set_tracer_provider(provider)

    # Spans are batched to any OTLP/gRPC collector
    exporter = OTLPSpanExporter(endpoint=otlp_endpoint, insecure=True)
    provider.add_span_processor(BatchSpanProcessor(exporter))

    # One server span per request
    FastAPIInstrumentor.instrument_app(app)


def configure_metrics(app: FastAPI):
    # Per-route request counts and latencies, scraped from /metrics
    Instrumentator().instrument(app).expose(app)


def setup_observability(app: FastAPI, service_name: str, settings: Settings):
    """
    Wire JSON logs, and optionally OTLP tracing and /metrics, into ``app``.
    Called once per app by ``main.create_app``.
    """
    configure_logging(settings.LOG_LEVEL)
    if settings.TRACING_ENABLED:
        configure_tracing(app, service_name, settings.OTLP_ENDPOINT)
    if settings.METRICS_ENABLED:
        configure_metrics(app)
