"""
Main pytest configuration for all backend tests.

Fixtures for the in-memory Redis double, partition settings and span capture.
"""

import os

import pytest
import structlog
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

# Set test environment variables before importing library modules
os.environ.setdefault("REDIS_URL", "redis://localhost:6379")
os.environ.setdefault("VALUE_CODEC", "pydantic")

# Configure logging for tests
structlog.configure(
    processors=[
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=True,
)

from redis_structures import (  # noqa: E402
    NullCommandTracer,
    OpenTelemetryCommandTracer,
    RedisSettings,
)
from redis_structures.infrastructure.serialization import JsonCodec  # noqa: E402
from tests.fakes import FakeRedis  # noqa: E402


@pytest.fixture
def fake_redis():
    """Empty in-memory Redis."""
    return FakeRedis()


@pytest.fixture
def redis_settings(fake_redis):
    """Partition backed by the in-memory Redis with the default codec."""
    return RedisSettings(client=fake_redis, command_tracer=NullCommandTracer())


@pytest.fixture
def json_settings(fake_redis):
    """Partition backed by the in-memory Redis with the plain JSON codec."""
    return RedisSettings(
        client=fake_redis, codec=JsonCodec(), command_tracer=NullCommandTracer()
    )


@pytest.fixture
def span_exporter():
    """Capture finished spans in memory."""
    exporter = InMemorySpanExporter()
    yield exporter
    exporter.clear()


@pytest.fixture
def traced_settings(fake_redis, span_exporter):
    """Partition whose command tracer exports to ``span_exporter``."""
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(span_exporter))
    return RedisSettings(
        client=fake_redis,
        command_tracer=OpenTelemetryCommandTracer(tracer_provider=provider),
    )
