"""Logging, tracing and metrics bootstrap for the storefront app."""
import os
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
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor


def add_otel_ids(logger, log_method, event_dict):
    """Tags each log line with the active trace and span ids."""
    span = trace.get_current_span()
    if span.is_recording():
        ctx = span.get_span_context()
        event_dict["trace_id"] = trace.format_trace_id(ctx.trace_id)
        event_dict["span_id"] = trace.format_span_id(ctx.span_id)
    return event_dict


def configure_logging(level_name: str | None = None):
    level_name = (level_name or os.getenv("LOG_LEVEL", "INFO")).upper()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            add_otel_ids,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level_name, logging.INFO)),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_tracing(app: FastAPI, service_name: str):
    provider = TracerProvider(resource=Resource.create({SERVICE_NAME: service_name}))
    trace.set_tracer_provider(provider)

    # Empty OTLP_ENDPOINT: spans stay in-process
    endpoint = os.getenv("OTLP_ENDPOINT", "http://localhost:4317")
    if endpoint:
        provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint, insecure=True)))

    FastAPIInstrumentor.instrument_app(app)
    # HOT Pay lookups go out through httpx
    HTTPXClientInstrumentor().instrument()


def setup_observability(app: FastAPI, service_name: str):
    """
    Configures structlog, OpenTelemetry tracing and the Prometheus /metrics
    endpoint. Call once per app, before it starts serving.
    """
    configure_logging()
    configure_tracing(app, service_name)
    Instrumentator().instrument(app).expose(app)
