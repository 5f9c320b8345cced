"""
Redis Structures

Typed asynchronous Redis string and set structures with pluggable value
serialization, expiration handling, atomic clamped counters and
cache-aside filling.
"""

from .infrastructure.redis import (
    RedisSettings,
    RedisGroup,
    RedisExecutor,
    RedisConnectionFactory,
    redis_connection_factory,
    RedisException,
    RedisConnectionException,
    RedisOperationTimeoutException,
    RedisCommandException,
    RedisScriptExecutionException,
    RedisSerializationException,
    RedisConfigurationException,
)
from .infrastructure.serialization import (
    ValueCodec,
    PydanticCodec,
    JsonCodec,
    PickleCodec,
    get_codec,
)
from .core.telemetry import CommandTracer, OpenTelemetryCommandTracer, NullCommandTracer
from .domain import CacheKey
from .structures import RedisString, RedisSet

__version__ = "0.1.0"

__all__ = [
    "RedisString",
    "RedisSet",
    "RedisSettings",
    "RedisGroup",
    "RedisExecutor",
    "RedisConnectionFactory",
    "redis_connection_factory",
    "CacheKey",
    "ValueCodec",
    "PydanticCodec",
    "JsonCodec",
    "PickleCodec",
    "get_codec",
    "CommandTracer",
    "OpenTelemetryCommandTracer",
    "NullCommandTracer",
    "RedisException",
    "RedisConnectionException",
    "RedisOperationTimeoutException",
    "RedisCommandException",
    "RedisScriptExecutionException",
    "RedisSerializationException",
    "RedisConfigurationException",
]
