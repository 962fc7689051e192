import os
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional

EXPORTER_OTLP = "otlp"
EXPORTER_STDOUT = "stdout"
SUPPORTED_EXPORTERS = (EXPORTER_OTLP, EXPORTER_STDOUT)

DEFAULT_EXPORTER = EXPORTER_OTLP
DEFAULT_ENDPOINT = "localhost:4317"


@dataclass
class Config:
    """
    Tracing bootstrap configuration

    Args:
        service_name: Name of the service (required)
        exporter: "otlp" (default) or "stdout"
        endpoint: OTLP collector endpoint, default "localhost:4317"
        insecure: Disable TLS for the OTLP exporter
        service_version: Optional service.version resource attribute
        environment: Optional deployment.environment resource attribute
        resource_attributes: Additional resource attributes
    """

    service_name: str = ""
    exporter: str = DEFAULT_EXPORTER
    endpoint: str = DEFAULT_ENDPOINT
    insecure: bool = False
    service_version: Optional[str] = None
    environment: Optional[str] = None
    resource_attributes: Dict[str, Any] = field(default_factory=dict)

    @property
    def exporter_kind(self) -> str:
        return self.exporter or DEFAULT_EXPORTER

    @property
    def resolved_endpoint(self) -> str:
        return self.endpoint or DEFAULT_ENDPOINT

    @classmethod
    def from_env(cls, **overrides: Any) -> "Config":
        config = cls(
            service_name=os.getenv("OTEL_SERVICE_NAME", ""),
            exporter=os.getenv("TRACEHELP_EXPORTER", DEFAULT_EXPORTER),
            endpoint=os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", DEFAULT_ENDPOINT),
            insecure=os.getenv("OTEL_EXPORTER_OTLP_INSECURE", "false").lower() == "true",
            service_version=os.getenv("SERVICE_VERSION"),
            environment=os.getenv("ENVIRONMENT"),
        )
        return replace(config, **overrides)
