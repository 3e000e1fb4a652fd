# Observability utilities – Prometheus exposition, OpenTelemetry tracing and
# JSON log files.
#
# Called from main.py during application start-up. Every integration is best
# effort: a missing endpoint or a failing exporter is logged as a warning and
# the application keeps serving requests.

from __future__ import annotations

import logging
import pathlib
import time
from logging.handlers import RotatingFileHandler

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.trace.sampling import TraceIdRatioBased
from prometheus_fastapi_instrumentator import Instrumentator
from pythonjsonlogger import jsonlogger

from videohost.core.config import settings
from videohost.utils.db_instrumentation import instrument_astra_collection

_logger = logging.getLogger(__name__)

_prometheus_instrumented = False
_otel_instrumented = False
_file_handler_added = False


def get_json_formatter() -> logging.Formatter:  # noqa: D401
    """Return a JSON formatter with OTEL trace/span correlation keys."""

    fmt_keys = ["asctime", "levelname", "name", "message", "otelTraceID", "otelSpanID"]
    return jsonlogger.JsonFormatter(" ".join(f"%({k})s" for k in fmt_keys))


def configure_observability(app: FastAPI) -> None:  # noqa: D401
    """Initialise the enabled observability integrations exactly once."""

    if not settings.OBSERVABILITY_ENABLED:
        _logger.info("Observability explicitly disabled via settings")
        return

    _setup_prometheus(app)
    _setup_opentelemetry(app)
    _setup_file_logging()

    try:
        instrument_astra_collection()
    except Exception as exc:  # pragma: no cover – log, continue
        _logger.warning("Failed to patch AstraDB collection for metrics: %s", exc)


def _setup_prometheus(app: FastAPI) -> None:
    global _prometheus_instrumented
    if _prometheus_instrumented:
        return

    try:
        start_time = time.perf_counter()
        Instrumentator().instrument(app).expose(
            app, include_in_schema=False, should_gzip=True
        )
        _prometheus_instrumented = True
        _logger.info(
            "Prometheus instrumentation initialised in %.2f ms",
            (time.perf_counter() - start_time) * 1000,
        )
    except Exception as exc:  # pragma: no cover
        _logger.warning("Failed to initialise Prometheus instrumentation: %s", exc)


def _setup_opentelemetry(app: FastAPI) -> None:
    global _otel_instrumented
    if _otel_instrumented or not settings.OTEL_TRACES_ENABLED:
        return

    if not settings.OTEL_EXPORTER_OTLP_ENDPOINT:
        _logger.info(
            "OTEL_TRACES_ENABLED but no OTEL_EXPORTER_OTLP_ENDPOINT set – skipping"
        )
        return

    proto = (settings.OTEL_EXPORTER_OTLP_PROTOCOL or "grpc").lower()
    try:
        if proto == "http":
            from opentelemetry.exporter.otlp.proto.http.trace_exporter import (
                OTLPSpanExporter,
            )

            exporter = OTLPSpanExporter(endpoint=settings.OTEL_EXPORTER_OTLP_ENDPOINT)
        elif proto == "grpc":
            from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import (
                OTLPSpanExporter,
            )

            exporter = OTLPSpanExporter(
                endpoint=settings.OTEL_EXPORTER_OTLP_ENDPOINT, insecure=True
            )
        else:
            _logger.warning(
                "Unsupported OTLP protocol '%s' – skipping tracing setup", proto
            )
            return

        resource = Resource.create(
            {
                "service.name": settings.PROJECT_NAME,
                "service.version": settings.APP_VERSION,
                "deployment.environment": settings.ENVIRONMENT,
            }
        )
        provider = TracerProvider(
            resource=resource,
            sampler=TraceIdRatioBased(settings.OTEL_TRACES_SAMPLER_RATIO),
        )
        provider.add_span_processor(BatchSpanProcessor(exporter))
        trace.set_tracer_provider(provider)

        FastAPIInstrumentor().instrument_app(app, tracer_provider=provider)
        _otel_instrumented = True
        _logger.info("OpenTelemetry tracing exporting to %s (%s)",
                     settings.OTEL_EXPORTER_OTLP_ENDPOINT, proto)
    except Exception as exc:  # pragma: no cover
        _logger.warning("Failed to initialise OpenTelemetry tracing: %s", exc)


def _setup_file_logging() -> None:
    global _file_handler_added
    if _file_handler_added or not settings.LOG_FILE_ENABLED:
        return

    try:
        log_dir = pathlib.Path("logs")
        log_dir.mkdir(exist_ok=True)
        file_path = log_dir / "app.log"

        handler = RotatingFileHandler(file_path, maxBytes=5 * 1024 * 1024, backupCount=5)
        handler.setFormatter(get_json_formatter())
        logging.getLogger().addHandler(handler)
        _file_handler_added = True
        _logger.info("File logging handler attached (%s)", file_path)
    except OSError as exc:  # pragma: no cover
        _logger.warning("Failed to attach logging handler: %s", exc)
