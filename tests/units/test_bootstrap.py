"""
Unit tests for tracing bootstrap and configuration
"""

import pytest
from unittest.mock import patch
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import ConsoleSpanExporter

from tracehelp import (
    Config,
    ConfigurationError,
    ExporterError,
    ResourceError,
    build_tracer_provider,
    init,
    new_tracer_with_provider,
)
from tracehelp.bootstrap import create_exporter, create_resource


class TestConfig:
    """Defaults and environment lookup"""

    def test_defaults(self):
        config = Config(service_name="svc")
        assert config.exporter == "otlp"
        assert config.endpoint == "localhost:4317"
        assert config.insecure is False

    def test_empty_values_fall_back(self):
        config = Config(service_name="svc", exporter="", endpoint="")
        assert config.exporter_kind == "otlp"
        assert config.resolved_endpoint == "localhost:4317"

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("OTEL_SERVICE_NAME", "env-svc")
        monkeypatch.setenv("TRACEHELP_EXPORTER", "stdout")
        monkeypatch.setenv("OTEL_EXPORTER_OTLP_ENDPOINT", "collector:4317")
        monkeypatch.setenv("OTEL_EXPORTER_OTLP_INSECURE", "TRUE")

        config = Config.from_env()
        assert config.service_name == "env-svc"
        assert config.exporter == "stdout"
        assert config.endpoint == "collector:4317"
        assert config.insecure is True

    def test_from_env_overrides(self, monkeypatch):
        monkeypatch.delenv("OTEL_SERVICE_NAME", raising=False)
        config = Config.from_env(service_name="override")
        assert config.service_name == "override"

    def test_from_env_rejects_unknown_override(self):
        with pytest.raises(TypeError):
            Config.from_env(servce_name="typo")

    def test_from_env_rejects_derived_property(self):
        with pytest.raises(TypeError):
            Config.from_env(exporter_kind="stdout")


class TestResource:
    def test_service_attributes(self):
        resource = create_resource(Config(
            service_name="svc",
            service_version="2.0.0",
            environment="staging",
            resource_attributes={"team": "core"},
        ))
        assert resource.attributes["service.name"] == "svc"
        assert resource.attributes["service.version"] == "2.0.0"
        assert resource.attributes["deployment.environment"] == "staging"
        assert resource.attributes["team"] == "core"


class TestExporterSelection:
    """create_exporter picks the transport by kind"""

    def test_stdout(self):
        assert isinstance(create_exporter(Config(service_name="svc", exporter="stdout")), ConsoleSpanExporter)

    def test_otlp_default(self):
        with patch(
            "opentelemetry.exporter.otlp.proto.grpc.trace_exporter.OTLPSpanExporter"
        ) as mock_exporter:
            create_exporter(Config(service_name="svc", exporter="", insecure=True))
        mock_exporter.assert_called_once_with(endpoint="localhost:4317", insecure=True)

    def test_otlp_custom_endpoint(self):
        with patch(
            "opentelemetry.exporter.otlp.proto.grpc.trace_exporter.OTLPSpanExporter"
        ) as mock_exporter:
            create_exporter(Config(service_name="svc", endpoint="collector:4317"))
        mock_exporter.assert_called_once_with(endpoint="collector:4317", insecure=False)

    def test_unknown_kind(self):
        with pytest.raises(ExporterError, match="zipkin"):
            create_exporter(Config(service_name="svc", exporter="zipkin"))


class TestBuildTracerProvider:
    """Provider construction without global state"""

    def test_empty_service_name_fails_first(self):
        with patch("tracehelp.bootstrap.create_resource") as mock_resource, \
             patch("tracehelp.bootstrap.create_exporter") as mock_exporter, \
             patch("tracehelp.bootstrap.TracerProvider") as mock_provider:
            with pytest.raises(ConfigurationError, match="service_name is required"):
                build_tracer_provider(Config(service_name=""))

        mock_resource.assert_not_called()
        mock_exporter.assert_not_called()
        mock_provider.assert_not_called()

    def test_unknown_exporter_names_value(self):
        with pytest.raises(ExporterError) as exc_info:
            build_tracer_provider(Config(service_name="svc", exporter="jaeger"))
        message = str(exc_info.value)
        assert message.startswith("tracehelp: failed to create exporter")
        assert "'jaeger'" in message

    def test_resource_failure(self):
        with patch("tracehelp.bootstrap.Resource.create", side_effect=ValueError("bad attrs")):
            with pytest.raises(ResourceError, match="failed to create resource: bad attrs"):
                build_tracer_provider(Config(service_name="svc"))

    def test_exporter_failure_is_chained(self):
        cause = RuntimeError("no grpc")
        with patch("tracehelp.bootstrap.create_exporter", side_effect=cause):
            with pytest.raises(ExporterError) as exc_info:
                build_tracer_provider(Config(service_name="svc"))
        assert exc_info.value.__cause__ is cause

    def test_stdout_provider_exports_on_flush(self):
        with patch("tracehelp.bootstrap.ConsoleSpanExporter") as mock_console:
            provider = build_tracer_provider(Config(service_name="svc", exporter="stdout"))
        assert isinstance(provider, TracerProvider)
        assert provider.resource.attributes["service.name"] == "svc"

        tracer = new_tracer_with_provider("test", provider)
        _, end = tracer.start(None, "batched-span")
        end()
        provider.force_flush()
        provider.shutdown()

        exported = [s for c in mock_console.return_value.export.call_args_list for s in c[0][0]]
        assert [s.name for s in exported] == ["batched-span"]
        mock_console.return_value.shutdown.assert_called_once()


class TestInit:
    """init installs global state and returns shutdown"""

    def test_empty_service_name(self):
        with patch("tracehelp.bootstrap.trace.set_tracer_provider") as mock_set:
            with pytest.raises(ConfigurationError):
                init(Config())
        mock_set.assert_not_called()

    def test_unknown_exporter(self):
        with patch("tracehelp.bootstrap.trace.set_tracer_provider") as mock_set:
            with pytest.raises(ExporterError, match="kafka"):
                init(Config(service_name="svc", exporter="kafka"))
        mock_set.assert_not_called()

    def test_installs_provider_and_propagator(self):
        with patch("tracehelp.bootstrap.trace.set_tracer_provider") as mock_set, \
             patch("tracehelp.bootstrap.propagate.set_global_textmap") as mock_textmap:
            shutdown = init(Config(service_name="svc", exporter="stdout"))
            shutdown()

        provider = mock_set.call_args[0][0]
        assert isinstance(provider, TracerProvider)
        propagator = mock_textmap.call_args[0][0]
        assert set(propagator.fields) >= {"traceparent", "tracestate", "baggage"}

    def test_set_global_false(self):
        with patch("tracehelp.bootstrap.trace.set_tracer_provider") as mock_set, \
             patch("tracehelp.bootstrap.propagate.set_global_textmap") as mock_textmap:
            shutdown = init(Config(service_name="svc", exporter="stdout"), set_global=False)
            shutdown()
        mock_set.assert_not_called()
        mock_textmap.assert_not_called()

    def test_shutdown_runs_once(self):
        with patch("tracehelp.bootstrap.TracerProvider") as mock_provider:
            shutdown = init(Config(service_name="svc", exporter="stdout"), set_global=False)
            shutdown()
            shutdown()
        mock_provider.return_value.shutdown.assert_called_once()

    def test_shutdown_flushes_batched_spans(self):
        """Shutdown alone exports spans still queued in the batch processor"""
        with patch("tracehelp.bootstrap.ConsoleSpanExporter") as mock_console, \
             patch("tracehelp.bootstrap.trace.set_tracer_provider") as mock_set, \
             patch("tracehelp.bootstrap.propagate.set_global_textmap"):
            shutdown = init(Config(service_name="svc", exporter="stdout"))
            provider = mock_set.call_args[0][0]
            _, end = new_tracer_with_provider("test", provider).start(None, "queued-span")
            end()
            shutdown()

        exported = [s for c in mock_console.return_value.export.call_args_list for s in c[0][0]]
        assert [s.name for s in exported] == ["queued-span"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
