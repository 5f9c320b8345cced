"""
Redis Set Structure

Typed unordered collection over a Redis set key. Members are encoded with
the partition's codec, so membership relies on deterministic encoding.
"""

from typing import (
    Any,
    ContextManager,
    Generic,
    Iterable,
    List,
    Optional,
    Type,
    TypeVar,
    Union,
)

from ..core.telemetry import CALL_TYPE_SET
from ..domain.value_objects import CacheKey, Expiry, to_seconds
from ..infrastructure.redis.executor import RedisExecutor
from ..infrastructure.redis.keyspace import RedisGroup, RedisSettings

T = TypeVar("T")


class RedisSet(Generic[T]):
    """
    Typed set stored in one Redis set key.

    Each method maps to a single Redis command; per-command atomicity is
    all these operations need.
    """

    def __init__(
        self,
        settings: Union[RedisSettings, RedisGroup],
        key: str,
        value_type: Optional[Type[T]] = None,
    ):
        if isinstance(settings, RedisGroup):
            settings = settings.get_settings(key)
        self.cache_key = CacheKey(key, settings)
        self.value_type = value_type

    @property
    def key(self) -> str:
        return self.cache_key.name

    @property
    def settings(self) -> RedisSettings:
        return self.cache_key.settings

    def _trace(self, operation: str) -> ContextManager[Any]:
        return self.settings.command_tracer.start(
            CALL_TYPE_SET, self.key, operation, self.settings.db
        )

    def _executor(self) -> RedisExecutor:
        return self.settings.get_executor()

    def _serialize(self, value: T) -> bytes:
        return self.settings.codec.serialize(value)

    def _deserialize(self, data: Optional[bytes]) -> Optional[T]:
        if data is None:
            return None
        return self.settings.codec.deserialize(data, self.value_type)

    async def add(self, value: T) -> bool:
        """SADD one member. Returns True when it was not already present."""
        with self._trace("add"):
            data = self._serialize(value)
            return await self._executor().execute("sadd", self.key, data) > 0

    async def add_many(self, values: Iterable[T]) -> int:
        """SADD several members in one command. Returns the number added."""
        with self._trace("add_many"):
            encoded = [self._serialize(value) for value in values]
            if not encoded:
                return 0
            return await self._executor().execute("sadd", self.key, *encoded)

    async def remove(self, value: T) -> bool:
        """SREM one member. Returns True when it was present."""
        with self._trace("remove"):
            data = self._serialize(value)
            return await self._executor().execute("srem", self.key, data) > 0

    async def remove_many(self, values: Iterable[T]) -> int:
        """SREM several members in one command. Returns the number removed."""
        with self._trace("remove_many"):
            encoded = [self._serialize(value) for value in values]
            if not encoded:
                return 0
            return await self._executor().execute("srem", self.key, *encoded)

    async def contains(self, value: T) -> bool:
        """SISMEMBER."""
        with self._trace("contains"):
            return bool(
                await self._executor().execute(
                    "sismember", self.key, self._serialize(value)
                )
            )

    async def length(self) -> int:
        """SCARD. Zero for an absent key."""
        with self._trace("length"):
            return await self._executor().execute("scard", self.key)

    async def members(self) -> List[T]:
        """SMEMBERS. Order is unspecified."""
        with self._trace("members"):
            raw = await self._executor().execute("smembers", self.key)
            return [self._deserialize(data) for data in raw]

    async def random(self) -> Optional[T]:
        """SRANDMEMBER without count. None for an empty set."""
        with self._trace("random"):
            data = await self._executor().execute("srandmember", self.key)
            return self._deserialize(data)

    async def random_many(self, count: int) -> List[T]:
        """
        SRANDMEMBER with count.

        A positive count returns distinct members (at most the set size);
        a negative count may repeat members and always returns ``abs(count)``.
        """
        with self._trace("random_many"):
            raw = await self._executor().execute("srandmember", self.key, count)
            return [self._deserialize(data) for data in raw]

    async def pop(self) -> Optional[T]:
        """SPOP: remove and return a random member. None for an empty set."""
        with self._trace("pop"):
            return self._deserialize(await self._executor().execute("spop", self.key))

    async def expire(self, expiry: Expiry) -> bool:
        """Set the key's expiration. True when the key exists."""
        with self._trace("expire"):
            return bool(
                await self._executor().execute("expire", self.key, to_seconds(expiry))
            )

    async def exists(self) -> bool:
        """Check whether the key exists."""
        with self._trace("exists"):
            return await self._executor().execute("exists", self.key) > 0

    async def clear(self) -> bool:
        """Delete the whole set. True when it existed."""
        with self._trace("clear"):
            return await self._executor().execute("delete", self.key) > 0

    def __repr__(self) -> str:
        return f"RedisSet(key={self.key!r}, db={self.settings.db})"
