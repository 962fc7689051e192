"""
Span completion policy

A Finalizer is handed out together with every span started through
tracehelp. Invoking it once, on whatever path the traced operation exits
by, records the outcome on the span and ends it:

    ctx, end = tracer.start(ctx, "GetUser", str_attr("user.id", user_id))
    err = ErrorRef()
    try:
        ...
    except Exception as exc:
        err.set(exc)
        raise
    finally:
        end(err)
"""

import logging
from threading import Lock
from typing import Optional, Union

from opentelemetry.trace import Span, Status, StatusCode

logger = logging.getLogger(__name__)


class ErrorRef:
    """Mutable slot holding the eventual error of a traced operation."""

    __slots__ = ("error",)

    def __init__(self, error: Optional[BaseException] = None):
        self.error = error

    def set(self, error: Optional[BaseException]) -> None:
        self.error = error

    def clear(self) -> None:
        self.error = None

    def __bool__(self) -> bool:
        return self.error is not None

    def __repr__(self) -> str:
        return f"ErrorRef({self.error!r})"


ErrorInput = Union[ErrorRef, BaseException, None]


def _resolve_error(err: ErrorInput) -> Optional[BaseException]:
    if err is None:
        return None
    if isinstance(err, ErrorRef):
        return err.error
    return err


class Finalizer:
    """
    One-shot closure bound to a single span

    The first call sets the span status from the error slot and ends the
    span. Later calls do nothing.
    """

    def __init__(self, span: Span):
        self._span = span
        self._lock = Lock()
        self._ended = False

    @property
    def span(self) -> Span:
        return self._span

    @property
    def ended(self) -> bool:
        return self._ended

    def __call__(self, err: ErrorInput = None) -> None:
        with self._lock:
            if self._ended:
                logger.debug("finalizer_already_called span_name=%s", _span_name(self._span))
                return
            self._ended = True

        error = _resolve_error(err)
        if error is not None:
            self._span.record_exception(error)
            self._span.set_status(Status(StatusCode.ERROR, str(error)))
            logger.debug(
                "span_finalized status=error span_name=%s error=%s",
                _span_name(self._span), error,
            )
        else:
            self._span.set_status(Status(StatusCode.OK))
            logger.debug("span_finalized status=ok span_name=%s", _span_name(self._span))

        # status must land before end(); a synchronous processor exports on end
        self._span.end()


def _span_name(span: Span) -> str:
    return getattr(span, "name", "") or ""
