"""
OpenTelemetry tracing configuration.

Provides:
- Auto-instrumentation for FastAPI and the SQLAlchemy engine (server)
- Trace context propagation from check-in devices to the server over HTTP headers
- OTLP export when OTEL_EXPORTER_OTLP_ENDPOINT is set
"""

import os
from typing import Any

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.propagate import inject
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.sdk.trace.sampling import ALWAYS_ON


class TracingConfig:
    """
    Usage:
        tracing = TracingConfig(service_name='redemption-service')
        tracing.setup()
        ...
        tracing.shutdown()
    """

    def __init__(
        self,
        *,
        service_name: str,
        otlp_endpoint: str | None = None,
        enable_console: bool = False,
    ) -> None:
        self.service_name = service_name
        self.otlp_endpoint = otlp_endpoint or os.getenv('OTEL_EXPORTER_OTLP_ENDPOINT')
        self.enable_console = (
            enable_console or os.getenv('OTEL_CONSOLE_EXPORT', 'false').lower() == 'true'
        )
        self._provider: TracerProvider | None = None

    def setup(self) -> None:
        resource = Resource(attributes={SERVICE_NAME: self.service_name})

        # Keep every span at the SDK; sample in the collector
        self._provider = TracerProvider(resource=resource, sampler=ALWAYS_ON)

        if self.otlp_endpoint:
            self._provider.add_span_processor(
                BatchSpanProcessor(OTLPSpanExporter(endpoint=self.otlp_endpoint))
            )

        if self.enable_console:
            self._provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

        trace.set_tracer_provider(self._provider)

    def instrument_fastapi(self, *, app: Any, excluded_urls: str = 'health,metrics') -> None:
        FastAPIInstrumentor.instrument_app(app, excluded_urls=excluded_urls)

    def instrument_sqlalchemy(self, *, engine: Any) -> None:
        if hasattr(engine, 'sync_engine'):
            SQLAlchemyInstrumentor().instrument(engine=engine.sync_engine)
        else:
            SQLAlchemyInstrumentor().instrument(engine=engine)

    def shutdown(self) -> None:
        if self._provider:
            self._provider.shutdown()


def inject_trace_context(*, headers: dict[str, str] | None = None) -> dict[str, str]:
    """
    Add the current trace context (`traceparent`) to outgoing HTTP headers so a
    replayed check-in shows up in the same trace as the device's sync drain.
    """
    headers = dict(headers or {})
    inject(headers)
    return headers
