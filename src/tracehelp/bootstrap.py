"""
Process-wide tracing bootstrap

Builds a TracerProvider with a batching span processor and the requested
exporter, installs it together with the W3C trace-context and baggage
propagators, and returns a shutdown function.

Usage:
    from tracehelp import Config, init

    shutdown = init(Config(service_name="my-service", exporter="stdout"))
    try:
        run()
    finally:
        shutdown()
"""

import logging
from typing import Callable

from opentelemetry import propagate, trace
from opentelemetry.baggage.propagation import W3CBaggagePropagator
from opentelemetry.propagators.composite import CompositePropagator
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SpanExporter,
)
from opentelemetry.trace.propagation.tracecontext import TraceContextTextMapPropagator

from .config import Config, EXPORTER_OTLP, EXPORTER_STDOUT
from .errors import ConfigurationError, ExporterError, ResourceError

logger = logging.getLogger(__name__)

ShutdownFunc = Callable[[], None]


def create_resource(config: Config) -> Resource:
    attrs = {"service.name": config.service_name}
    if config.service_version:
        attrs["service.version"] = config.service_version
    if config.environment:
        attrs["deployment.environment"] = config.environment
    attrs.update(config.resource_attributes)
    return Resource.create(attrs)


def create_exporter(config: Config) -> SpanExporter:
    kind = config.exporter_kind
    if kind == EXPORTER_STDOUT:
        return ConsoleSpanExporter()
    if kind == EXPORTER_OTLP:
        # imported lazily so the stdout path does not load grpc
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter

        endpoint = config.resolved_endpoint
        logger.debug("otlp_exporter_configure endpoint=%s insecure=%s", endpoint, config.insecure)
        return OTLPSpanExporter(endpoint=endpoint, insecure=config.insecure)
    raise ExporterError(
        f'unsupported exporter: {kind!r} (use "{EXPORTER_OTLP}" or "{EXPORTER_STDOUT}")'
    )


def build_tracer_provider(config: Config) -> TracerProvider:
    """
    Build a TracerProvider for ``config`` without touching global state

    Raises:
        ConfigurationError: service_name is empty
        ResourceError: the resource could not be created
        ExporterError: the exporter could not be created
    """
    if not config.service_name:
        raise ConfigurationError("tracehelp: service_name is required")

    try:
        resource = create_resource(config)
    except Exception as e:
        raise ResourceError(f"tracehelp: failed to create resource: {e}") from e

    try:
        exporter = create_exporter(config)
    except Exception as e:
        raise ExporterError(f"tracehelp: failed to create exporter: {e}") from e

    provider = TracerProvider(resource=resource)
    provider.add_span_processor(BatchSpanProcessor(exporter))
    logger.debug(
        "tracer_provider_built service_name=%s exporter=%s",
        config.service_name, config.exporter_kind,
    )
    return provider


def install_propagator() -> None:
    propagate.set_global_textmap(
        CompositePropagator([TraceContextTextMapPropagator(), W3CBaggagePropagator()])
    )


def make_shutdown(provider: TracerProvider) -> ShutdownFunc:
    done = False

    def shutdown() -> None:
        nonlocal done
        if done:
            return
        done = True
        provider.shutdown()
        logger.info("tracer_provider_shutdown")

    return shutdown


def init(config: Config, set_global: bool = True) -> ShutdownFunc:
    """
    Initialize tracing for the process

    The returned function flushes pending spans and stops the provider; run
    it once at teardown. With ``set_global=False`` nothing is installed
    globally, which is mostly useful in tests.
    """
    provider = build_tracer_provider(config)

    if set_global:
        trace.set_tracer_provider(provider)
        install_propagator()

    logger.info(
        "init_complete service_name=%s exporter=%s endpoint=%s",
        config.service_name, config.exporter_kind, config.resolved_endpoint,
    )
    return make_shutdown(provider)
