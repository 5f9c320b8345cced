"""
Redis Infrastructure Exceptions

Domain-specific exceptions for Redis structure operations.
Remote failures are surfaced, never retried or swallowed.
"""

from typing import Optional, Any, Dict


class RedisException(Exception):
    """Base exception for Redis-related errors.

    All Redis structure operations raise this or its subclasses.
    Never swallow Redis exceptions - always preserve context.
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


def _error_details(
    details: Dict[str, Any], original_error: Optional[Exception]
) -> Dict[str, Any]:
    if original_error:
        details["original_error"] = str(original_error)
        details["original_error_type"] = type(original_error).__name__
    return details


class RedisConnectionException(RedisException):
    """Raised when the Redis server is unreachable or the connection is lost."""

    def __init__(
        self,
        message: str = "Redis connection failed",
        operation: Optional[str] = None,
        key: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        details: Dict[str, Any] = {}
        if operation:
            details["operation"] = operation
        if key:
            details["key"] = key

        super().__init__(
            message=message,
            error_code="REDIS_CONNECTION_ERROR",
            details=_error_details(details, original_error),
        )


class RedisOperationTimeoutException(RedisException):
    """Raised when a Redis operation times out."""

    def __init__(
        self,
        operation: str,
        key: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        details: Dict[str, Any] = {"operation": operation}
        if key:
            details["key"] = key

        super().__init__(
            message=f"Redis operation '{operation}' timed out",
            error_code="REDIS_TIMEOUT_ERROR",
            details=_error_details(details, original_error),
        )


class RedisCommandException(RedisException):
    """Raised when Redis rejects a command (e.g. WRONGTYPE, invalid expire time)."""

    def __init__(
        self,
        operation: str,
        key: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        details: Dict[str, Any] = {"operation": operation}
        if key:
            details["key"] = key

        super().__init__(
            message=f"Redis command '{operation}' failed: {original_error}",
            error_code="REDIS_COMMAND_ERROR",
            details=_error_details(details, original_error),
        )


class RedisScriptExecutionException(RedisException):
    """Raised when a server-side Lua script fails.

    A typical cause is a clamped increment against a key holding a
    non-numeric value. The stored value is left untouched by Redis.
    """

    def __init__(
        self,
        script_name: str,
        key: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        details: Dict[str, Any] = {"script": script_name}
        if key:
            details["key"] = key

        super().__init__(
            message=f"Redis script '{script_name}' failed: {original_error}",
            error_code="REDIS_SCRIPT_ERROR",
            details=_error_details(details, original_error),
        )


class RedisSerializationException(RedisException):
    """Raised when a value cannot be encoded to or decoded from Redis bytes."""

    def __init__(
        self,
        message: str,
        codec: Optional[str] = None,
        value_type: Optional[Any] = None,
        original_error: Optional[Exception] = None,
    ):
        details: Dict[str, Any] = {}
        if codec:
            details["codec"] = codec
        if value_type is not None:
            details["value_type"] = getattr(value_type, "__name__", str(value_type))

        super().__init__(
            message=message,
            error_code="REDIS_SERIALIZATION_ERROR",
            details=_error_details(details, original_error),
        )


class RedisConfigurationException(RedisException):
    """Raised when Redis configuration is invalid."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
        original_error: Optional[Exception] = None,
    ):
        details: Dict[str, Any] = {}
        if config_key:
            details["config_key"] = config_key
        if config_value is not None:
            details["config_value"] = str(config_value)

        super().__init__(
            message=message,
            error_code="REDIS_CONFIGURATION_ERROR",
            details=_error_details(details, original_error),
        )
