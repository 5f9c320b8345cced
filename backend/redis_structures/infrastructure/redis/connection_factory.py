"""
Redis Connection Factory

Connection pool management for Redis partitions.
One pool is kept per (url, db) pair and shared by every structure bound to it.
"""

import asyncio
from typing import Any, Dict, Optional, Tuple

import structlog
from redis.asyncio import ConnectionPool, Redis

from ...core.config import Settings, get_settings
from .exceptions import RedisConfigurationException

logger = structlog.get_logger(__name__)

PoolKey = Tuple[str, int]


class RedisConnectionFactory:
    """
    Factory for creating and managing Redis connection pools.

    Pools are created lazily on first use. Clients never decode responses:
    value codecs work on raw bytes.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self._settings = settings
        self._pools: Dict[PoolKey, ConnectionPool] = {}
        self._lock = asyncio.Lock()

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    def _create_pool(self, url: str, db: int) -> ConnectionPool:
        """Create a connection pool for one partition."""
        connection_kwargs = {
            "db": db,
            "decode_responses": False,
            "socket_connect_timeout": self.settings.REDIS_CONNECTION_TIMEOUT,
            "socket_timeout": self.settings.REDIS_OPERATION_TIMEOUT,
            "health_check_interval": self.settings.REDIS_HEALTH_CHECK_INTERVAL,
            "max_connections": self.settings.REDIS_MAX_CONNECTIONS,
        }
        try:
            pool = ConnectionPool.from_url(url, **connection_kwargs)
        except ValueError as e:
            raise RedisConfigurationException(
                message=f"Invalid Redis URL: {e}",
                config_key="REDIS_URL",
                original_error=e,
            ) from e

        logger.debug(
            "Created Redis connection pool",
            db=db,
            max_connections=connection_kwargs["max_connections"],
        )
        return pool

    def get_client(self, url: str, db: int = 0) -> Redis:
        """
        Get a Redis client for a partition.

        Args:
            url: Redis connection URL
            db: Database index

        Returns:
            Redis client sharing the partition's pool
        """
        pool_key = (url, db)
        pool = self._pools.get(pool_key)
        if pool is None:
            pool = self._create_pool(url, db)
            self._pools[pool_key] = pool
        return Redis(connection_pool=pool)

    async def close(self) -> None:
        """Close all connection pools."""
        async with self._lock:
            pools, self._pools = self._pools, {}
            for (_, db), pool in pools.items():
                await pool.disconnect()
                logger.debug("Closed Redis connection pool", db=db)

            logger.info("Redis connection factory closed", pools_closed=len(pools))

    def get_metrics(self) -> Dict[str, Any]:
        """Get connection factory metrics."""
        return {
            "pools_count": len(self._pools),
            "pools": {
                f"db{db}": {
                    "max_connections": pool.max_connections,
                    "created_connections": getattr(pool, "_created_connections", 0),
                }
                for (_, db), pool in self._pools.items()
            },
        }


# Global connection factory instance
redis_connection_factory = RedisConnectionFactory()
