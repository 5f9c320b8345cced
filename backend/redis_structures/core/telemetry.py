"""
Command Tracing

Observability hook wrapped around every Redis structure operation.
The default tracer emits OpenTelemetry CLIENT spans; applications can plug
their own tracer into RedisSettings or disable tracing entirely.
"""

from contextlib import contextmanager
from typing import Any, ContextManager, Iterator, Optional, Protocol

from opentelemetry import trace
from opentelemetry.trace import SpanKind

CALL_TYPE_STRING = "RedisString"
CALL_TYPE_SET = "RedisSet"


class CommandTracer(Protocol):
    """Tracer interface called around each remote operation."""

    def start(
        self, call_type: str, key: str, operation: Optional[str] = None, db: int = 0
    ) -> ContextManager[Any]:
        """Start tracing an operation identified by call type and key."""
        ...


class OpenTelemetryCommandTracer:
    """
    Command tracer backed by OpenTelemetry.

    Span names follow ``{call_type}.{operation}``. Exceptions raised inside
    the span are recorded and mark the span as failed.
    """

    def __init__(self, tracer_provider: Optional[trace.TracerProvider] = None):
        self.tracer = trace.get_tracer(__name__, tracer_provider=tracer_provider)

    @contextmanager
    def start(
        self, call_type: str, key: str, operation: Optional[str] = None, db: int = 0
    ) -> Iterator[trace.Span]:
        span_name = f"{call_type}.{operation}" if operation else call_type
        with self.tracer.start_as_current_span(span_name, kind=SpanKind.CLIENT) as span:
            span.set_attribute("db.system", "redis")
            span.set_attribute("redis.call_type", call_type)
            span.set_attribute("redis.key", key)
            span.set_attribute("redis.db", db)
            if operation:
                span.set_attribute("redis.operation", operation)
            yield span


class NullCommandTracer:
    """Command tracer that records nothing."""

    @contextmanager
    def start(
        self, call_type: str, key: str, operation: Optional[str] = None, db: int = 0
    ) -> Iterator[None]:
        yield None


def add_span_attribute(key: str, value: Any) -> None:
    """
    Add attribute to current span.

    Args:
        key: Attribute key
        value: Attribute value
    """
    span = trace.get_current_span()
    if span and span.is_recording():
        span.set_attribute(key, value)
