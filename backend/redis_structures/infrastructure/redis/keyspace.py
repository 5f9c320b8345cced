"""
Redis Key Space

Partition handles for Redis structures. RedisSettings pins a connection,
database index, value codec and command tracer; RedisGroup maps logical key
names onto one of several partitions.
"""

import hashlib
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence

from redis.asyncio import Redis

from ...core.config import Settings, get_settings
from ...core.telemetry import CommandTracer, NullCommandTracer, OpenTelemetryCommandTracer
from ..serialization.codecs import PydanticCodec, ValueCodec, get_codec
from .connection_factory import RedisConnectionFactory, redis_connection_factory
from .exceptions import RedisConfigurationException
from .executor import RedisExecutor


@dataclass(frozen=True)
class RedisSettings:
    """
    Immutable partition handle.

    Attributes:
        url: Redis connection URL
        db: Database index
        codec: Value codec shared by structures on this partition
        command_tracer: Observability hook called around each operation
        client: Pre-built client; bypasses the connection factory when set
        connection_factory: Pool registry used when no client is given
    """

    url: str = "redis://localhost:6379"
    db: int = 0
    codec: ValueCodec = field(default_factory=PydanticCodec)
    command_tracer: CommandTracer = field(default_factory=OpenTelemetryCommandTracer)
    client: Optional[Redis] = field(default=None, compare=False, repr=False)
    connection_factory: RedisConnectionFactory = field(
        default=redis_connection_factory, compare=False, repr=False
    )

    def __post_init__(self) -> None:
        if self.db < 0:
            raise RedisConfigurationException(
                message="Redis database index must be non-negative",
                config_key="db",
                config_value=self.db,
            )

    @classmethod
    def from_config(cls, config: Optional[Settings] = None, **overrides) -> "RedisSettings":
        """
        Build the default partition from environment settings.

        Args:
            config: Settings instance (cached environment settings by default)
            **overrides: Field values replacing the configured ones

        Returns:
            RedisSettings instance
        """
        config = config or get_settings()
        values = {
            "url": config.REDIS_URL,
            "db": config.REDIS_DB,
            "codec": get_codec(config.VALUE_CODEC),
            "command_tracer": (
                OpenTelemetryCommandTracer()
                if config.TRACING_ENABLED
                else NullCommandTracer()
            ),
        }
        values.update(overrides)
        return cls(**values)

    def get_connection(self) -> Redis:
        """Get a client bound to this partition."""
        if self.client is not None:
            return self.client
        return self.connection_factory.get_client(self.url, self.db)

    def get_executor(self) -> RedisExecutor:
        """Get a command executor bound to this partition."""
        return RedisExecutor(self.get_connection())


Resolver = Callable[[str, Sequence[RedisSettings]], RedisSettings]


def md5_resolver(key: str, partitions: Sequence[RedisSettings]) -> RedisSettings:
    """Pick a partition by MD5 hash of the key. Stable across processes."""
    digest = int(hashlib.md5(key.encode("utf-8")).hexdigest(), 16)
    return partitions[digest % len(partitions)]


class RedisGroup:
    """
    Group of partitions addressed by key.

    Example:
        group = RedisGroup([RedisSettings(db=0), RedisSettings(db=1)])
        counter = RedisString(group, "visits", int)
    """

    def __init__(
        self, partitions: Sequence[RedisSettings], resolver: Optional[Resolver] = None
    ):
        if not partitions:
            raise RedisConfigurationException(
                message="RedisGroup requires at least one partition"
            )
        self.partitions = tuple(partitions)
        self.resolver = resolver or md5_resolver

    def get_settings(self, key: str) -> RedisSettings:
        """
        Resolve the partition for a key.

        Args:
            key: Logical key name

        Returns:
            Partition settings
        """
        return self.resolver(key, self.partitions)
