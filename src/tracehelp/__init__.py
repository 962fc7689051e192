# Thin helpers for OpenTelemetry span instrumentation
__version__ = "1.0.0"

from .attributes import (
    Attribute,
    AttributeType,
    str_attr,
    int_attr,
    int64_attr,
    float64_attr,
    bool_attr,
    str_slice_attr,
    int_slice_attr,
    to_otel_attributes,
)
from .bootstrap import ShutdownFunc, build_tracer_provider, init
from .config import Config
from .errors import ConfigurationError, ExporterError, ResourceError, TraceHelpError
from .finalizer import ErrorRef, Finalizer
from .tracer import (
    Tracer,
    default_tracer,
    new_tracer,
    new_tracer_with_provider,
    span,
    start,
    traced,
    with_span,
)

__all__ = [
    "Attribute",
    "AttributeType",
    "str_attr",
    "int_attr",
    "int64_attr",
    "float64_attr",
    "bool_attr",
    "str_slice_attr",
    "int_slice_attr",
    "to_otel_attributes",
    "Config",
    "ShutdownFunc",
    "build_tracer_provider",
    "init",
    "TraceHelpError",
    "ConfigurationError",
    "ResourceError",
    "ExporterError",
    "ErrorRef",
    "Finalizer",
    "Tracer",
    "default_tracer",
    "new_tracer",
    "new_tracer_with_provider",
    "start",
    "span",
    "with_span",
    "traced",
]
