"""
Tracing and log setup for Mentor Assistant.

configure_telemetry() is called once by the app factory with the loaded
Settings. Spans go to an OTLP collector when OTEL_EXPORTER_OTLP_ENDPOINT is
set, to the console when OTEL_CONSOLE_EXPORT is on, and nowhere otherwise.
Log records are emitted one JSON object per line; the summary pipeline's
``{"event":...}`` messages are embedded as-is.
"""

from __future__ import annotations

import logging
import uuid

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SpanExporter,
)

from mentor_assistant import __version__
from mentor_assistant.config import Settings

SERVICE_NAME = "mentor-assistant"
LOG_FORMAT = '{"time":"%(asctime)s","level":"%(levelname)s","logger":"%(name)s","message":%(message)s}'

logger = logging.getLogger("mentor-assistant.telemetry")

_configured = False


class EventFormatter(logging.Formatter):
    """Formats records as JSON lines.

    Messages that already are JSON objects (the ``{"event":...}`` lines) are
    nested verbatim; any other message is quoted as a JSON string.
    """

    def __init__(self) -> None:
        super().__init__(fmt=LOG_FORMAT, datefmt="%Y-%m-%dT%H:%M:%SZ")

    def formatMessage(self, record: logging.LogRecord) -> str:
        message = record.message
        if not (message.startswith("{") and message.endswith("}")):
            message = _quote(message)
        return self._style._fmt % {**record.__dict__, "message": message}


def _quote(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
    return f'"{escaped}"'


def build_span_exporter(settings: Settings) -> SpanExporter | None:
    """Pick the span exporter for ``settings``; None disables export."""
    if settings.otel_exporter_otlp_endpoint:
        try:
            from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import (
                OTLPSpanExporter,
            )
        except ImportError:
            logger.warning(
                '{"event":"otlp_exporter_missing","endpoint":"%s"}',
                settings.otel_exporter_otlp_endpoint,
            )
            return ConsoleSpanExporter()
        return OTLPSpanExporter(endpoint=settings.otel_exporter_otlp_endpoint)
    if settings.otel_console_export:
        return ConsoleSpanExporter()
    return None


def configure_logging(level: str) -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(EventFormatter())
    logging.basicConfig(level=level, handlers=[handler])


def configure_telemetry(settings: Settings, service_name: str = SERVICE_NAME) -> bool:
    """Install the tracer provider and JSON logging.

    Only the first call in a process has any effect; returns whether this
    call did the configuring.
    """
    global _configured
    if _configured:
        return False

    provider = TracerProvider(
        resource=Resource.create({"service.name": service_name, "service.version": __version__})
    )
    exporter = build_span_exporter(settings)
    if exporter is not None:
        provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)

    configure_logging(settings.log_level)

    _configured = True
    return True


def get_tracer() -> trace.Tracer:
    return trace.get_tracer(SERVICE_NAME, __version__)


def new_correlation_id() -> str:
    return str(uuid.uuid4())
