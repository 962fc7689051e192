"""
Span start helpers

A Tracer wraps an OpenTelemetry tracer and hands out a (context, Finalizer)
pair for every span it starts. The scoped helpers (``span``, ``with_span``,
``traced``) guarantee the Finalizer runs once on every exit path.
"""

import functools
import inspect
import logging
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Optional, Tuple, TypeVar

from opentelemetry import context as otel_context
from opentelemetry import trace
from opentelemetry.context import Context
from opentelemetry.trace import Span, TracerProvider

from .attributes import Attribute, to_otel_attributes
from .finalizer import ErrorRef, Finalizer

logger = logging.getLogger(__name__)

DEFAULT_TRACER_NAME = "tracehelp"

T = TypeVar("T")


class Tracer:
    """Named span factory bound to a tracer provider."""

    def __init__(
        self,
        name: str,
        provider: Optional[TracerProvider] = None,
        version: Optional[str] = None,
        schema_url: Optional[str] = None,
    ):
        self.name = name
        if provider is None:
            self._tracer = trace.get_tracer(
                name, instrumenting_library_version=version, schema_url=schema_url
            )
        else:
            self._tracer = provider.get_tracer(name, version, schema_url)

    @property
    def otel_tracer(self) -> trace.Tracer:
        """Underlying OpenTelemetry tracer, for anything the helpers do not cover."""
        return self._tracer

    def start(
        self,
        context: Optional[Context],
        span_name: str,
        *attrs: Attribute,
    ) -> Tuple[Context, Finalizer]:
        """
        Start a child span of ``context`` (the current context when None)

        The new span is not made current; pass the returned context to
        nested operations that should appear as its children.

            ctx, end = tracer.start(ctx, "GetUser", str_attr("user.id", uid))
            try:
                ...
            finally:
                end(err)
        """
        span = self.otel_tracer.start_span(
            span_name,
            context=context,
            attributes=to_otel_attributes(attrs) or None,
        )
        logger.debug("span_started tracer=%s span_name=%s attrs=%d", self.name, span_name, len(attrs))
        return trace.set_span_in_context(span, context), Finalizer(span)

    @contextmanager
    def span(
        self,
        span_name: str,
        *attrs: Attribute,
        context: Optional[Context] = None,
    ) -> Iterator[Span]:
        """
        Run a block inside a new span that is current for its duration

        Anything raised out of the block, cancellation and interrupts
        included, is recorded on the span and re-raised; the span is ended
        exactly once either way.
        """
        ctx, end = self.start(context, span_name, *attrs)
        token = otel_context.attach(ctx)
        err = ErrorRef()
        try:
            yield end.span
        except BaseException as exc:
            err.set(exc)
            raise
        finally:
            otel_context.detach(token)
            end(err)

    def with_span(
        self,
        span_name: str,
        operation: Callable[[], T],
        *attrs: Attribute,
        context: Optional[Context] = None,
    ) -> T:
        with self.span(span_name, *attrs, context=context):
            return operation()

    def traced(self, span_name: Any = None, *attrs: Attribute) -> Callable:
        """
        Decorate a function or coroutine function so each call is traced

        Usable bare (``@tracer.traced``) or with a span name and attributes
        (``@tracer.traced("load", str_attr("source", "s3"))``). The span
        name defaults to the function's qualified name.
        """
        if callable(span_name):
            return self.traced()(span_name)

        def decorator(fn: Callable) -> Callable:
            name = span_name or fn.__qualname__

            if inspect.iscoroutinefunction(fn):
                @functools.wraps(fn)
                async def async_wrapper(*args, **kwargs):
                    with self.span(name, *attrs):
                        return await fn(*args, **kwargs)

                return async_wrapper

            @functools.wraps(fn)
            def wrapper(*args, **kwargs):
                with self.span(name, *attrs):
                    return fn(*args, **kwargs)

            return wrapper

        return decorator


class _GlobalTracer(Tracer):
    """Default-named tracer that looks up the global provider on every use."""

    def __init__(self, name: str = DEFAULT_TRACER_NAME):
        self.name = name

    @property
    def otel_tracer(self) -> trace.Tracer:
        return trace.get_tracer(self.name)


def new_tracer(
    name: str,
    version: Optional[str] = None,
    schema_url: Optional[str] = None,
) -> Tracer:
    """Create a Tracer bound to the process-wide tracer provider."""
    return Tracer(name, version=version, schema_url=schema_url)


def new_tracer_with_provider(
    name: str,
    provider: TracerProvider,
    version: Optional[str] = None,
    schema_url: Optional[str] = None,
) -> Tracer:
    """Create a Tracer bound to ``provider``, e.g. an isolated test provider."""
    return Tracer(name, provider=provider, version=version, schema_url=schema_url)


_default = _GlobalTracer()


def default_tracer() -> Tracer:
    return _default


def start(
    context: Optional[Context],
    span_name: str,
    *attrs: Attribute,
) -> Tuple[Context, Finalizer]:
    """Start a span with the default tracer. Prefer ``new_tracer`` for reuse."""
    return _default.start(context, span_name, *attrs)


def span(span_name: str, *attrs: Attribute, context: Optional[Context] = None):
    return _default.span(span_name, *attrs, context=context)


def with_span(
    span_name: str,
    operation: Callable[[], T],
    *attrs: Attribute,
    context: Optional[Context] = None,
) -> T:
    return _default.with_span(span_name, operation, *attrs, context=context)


def traced(span_name: Any = None, *attrs: Attribute) -> Callable:
    return _default.traced(span_name, *attrs)
