import logging
from typing import Dict, Optional

from flask import Flask

try:
    from opentelemetry import trace
    from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
    from opentelemetry.instrumentation.flask import FlaskInstrumentor
    from opentelemetry.sdk.resources import Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor
except Exception:  # pragma: no cover - optional dependency
    FlaskInstrumentor = None  # type: ignore

logger = logging.getLogger(__name__)

# Health checks and Prometheus scrapes poll these constantly
UNTRACED_URLS = "healthz,metrics"


def parse_otlp_headers(raw: Optional[str]) -> Dict[str, str]:
    """``"key=value,key2=value2"`` (the OTEL_EXPORTER_OTLP_HEADERS format) to a dict."""
    headers: Dict[str, str] = {}
    for pair in (raw or "").split(","):
        key, sep, value = pair.partition("=")
        if sep and key.strip():
            headers[key.strip()] = value.strip()
    return headers


def init_tracing(app: Flask) -> bool:
    """Export HTTP request spans over OTLP when ``OTEL_EXPORTER_OTLP_ENDPOINT`` is set.

    Returns True when instrumentation was installed.
    """
    endpoint = app.config.get("OTEL_EXPORTER_OTLP_ENDPOINT")
    if not endpoint:
        return False
    if FlaskInstrumentor is None:  # pragma: no cover - optional dependency
        logger.warning("OTLP endpoint %s configured but OpenTelemetry is not installed", endpoint)
        return False

    provider = TracerProvider(
        resource=Resource.create({"service.name": app.config.get("OTEL_SERVICE_NAME", "requestdeck")})
    )
    exporter = OTLPSpanExporter(
        endpoint=endpoint,
        headers=parse_otlp_headers(app.config.get("OTEL_EXPORTER_OTLP_HEADERS")) or None,
        insecure=app.config.get("OTEL_EXPORTER_OTLP_INSECURE", True),
    )
    provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)

    FlaskInstrumentor().instrument_app(app, excluded_urls=UNTRACED_URLS)
    logger.info("Tracing enabled; exporting spans to %s", endpoint)
    return True
