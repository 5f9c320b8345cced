"""
Redis Infrastructure Module

Connection pooling, partition resolution, command execution and
server-side scripts backing the typed Redis structures.

This module provides:
- RedisSettings / RedisGroup: partition handles and key-based resolution
- RedisExecutor: commands, pipelines, transactions and Lua scripts
- RedisConnectionFactory: shared connection pools
- Clamped increment scripts
- Exception taxonomy
"""

from .exceptions import (
    RedisException,
    RedisConnectionException,
    RedisOperationTimeoutException,
    RedisCommandException,
    RedisScriptExecutionException,
    RedisSerializationException,
    RedisConfigurationException,
)
from .scripts import (
    ClampScript,
    CLAMP_SCRIPTS,
    INCREMENT_LIMIT_BY_MAX,
    INCREMENT_LIMIT_BY_MIN,
    INCREMENT_FLOAT_LIMIT_BY_MAX,
    INCREMENT_FLOAT_LIMIT_BY_MIN,
    select_clamp_script,
)
from .connection_factory import RedisConnectionFactory, redis_connection_factory
from .executor import RedisExecutor
from .keyspace import RedisSettings, RedisGroup, md5_resolver

__all__ = [
    # Partitions
    "RedisSettings",
    "RedisGroup",
    "md5_resolver",
    # Execution
    "RedisExecutor",
    "RedisConnectionFactory",
    "redis_connection_factory",
    # Scripts
    "ClampScript",
    "CLAMP_SCRIPTS",
    "INCREMENT_LIMIT_BY_MAX",
    "INCREMENT_LIMIT_BY_MIN",
    "INCREMENT_FLOAT_LIMIT_BY_MAX",
    "INCREMENT_FLOAT_LIMIT_BY_MIN",
    "select_clamp_script",
    # Exceptions
    "RedisException",
    "RedisConnectionException",
    "RedisOperationTimeoutException",
    "RedisCommandException",
    "RedisScriptExecutionException",
    "RedisSerializationException",
    "RedisConfigurationException",
]
