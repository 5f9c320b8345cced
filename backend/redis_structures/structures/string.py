"""
Redis String Structure

Typed single-value cache over a Redis string key: reads and writes through
the partition's codec, expiration handling, atomic get-and-replace,
counters with server-side clamping, and cache-aside filling.
"""

from typing import Any, ContextManager, Generic, Optional, Tuple, Type, TypeVar, Union

import structlog

from ..core.telemetry import CALL_TYPE_STRING, add_span_attribute
from ..domain.value_objects import CacheKey, Expiry, to_seconds
from ..infrastructure.redis.executor import RedisExecutor
from ..infrastructure.redis.keyspace import RedisGroup, RedisSettings
from ..infrastructure.redis.scripts import Number, select_clamp_script
from .cache_aside import Producer, get_or_compute

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class RedisString(Generic[T]):
    """
    Typed value stored in one Redis string key.

    Every method is a single round trip (or one atomic server-side unit);
    nothing is cached locally.

    Example:
        session = RedisString(RedisSettings(), "session:42", dict)
        data = await session.get_or_compute(load_session, expiry=60)
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
            CALL_TYPE_STRING, self.key, operation, self.settings.db
        )

    def _executor(self) -> RedisExecutor:
        return self.settings.get_executor()

    def _deserialize(self, data: Optional[bytes]) -> Optional[T]:
        if data is None:
            return None
        return self.settings.codec.deserialize(data, self.value_type)

    async def try_get(self) -> Tuple[bool, Optional[T]]:
        """
        Read the value.

        Returns:
            (True, value) when the key exists, (False, None) otherwise
        """
        with self._trace("try_get"):
            data = await self._executor().execute("get", self.key)
            add_span_attribute("redis.cache_hit", data is not None)
            if data is None:
                return False, None
            return True, self._deserialize(data)

    async def get_or_default(self, default: Optional[T] = None) -> Optional[T]:
        """Read the value, or return ``default`` when the key is absent."""
        found, value = await self.try_get()
        return value if found else default

    async def set(self, value: T, expiry: Optional[Expiry] = None) -> bool:
        """
        Store the value.

        Args:
            value: Value to store
            expiry: Optional expiration (seconds, timedelta or deadline)

        Returns:
            True when Redis acknowledged the write
        """
        with self._trace("set"):
            data = self.settings.codec.serialize(value)
            seconds = to_seconds(expiry)
            if seconds is None:
                result = await self._executor().execute("set", self.key, data)
            else:
                result = await self._executor().execute("set", self.key, data, ex=seconds)
            return bool(result)

    async def get_and_replace(
        self, value: T, expiry: Optional[Expiry] = None
    ) -> Optional[T]:
        """
        Store a new value and return the previous one.

        With an expiry, GETSET and EXPIRE run in one MULTI/EXEC transaction
        so the new value is never visible without its TTL.

        Args:
            value: New value
            expiry: Optional expiration applied together with the write

        Returns:
            Previous value, or None when the key was absent
        """
        with self._trace("get_and_replace"):
            data = self.settings.codec.serialize(value)
            seconds = to_seconds(expiry)
            executor = self._executor()
            if seconds is None:
                previous = await executor.execute("getset", self.key, data)
            else:
                previous, _ = await executor.transaction(
                    self.key, ("getset", (data,)), ("expire", (seconds,))
                )
            return self._deserialize(previous)

    async def get_or_compute(
        self,
        producer: Producer,
        expiry: Optional[Expiry] = None,
        *,
        keep_context: bool = True,
    ) -> T:
        """
        Return the cached value, or compute, store and return it.

        Args:
            producer: Sync or async value factory, called at most once
            expiry: Expiration for a freshly computed value
            keep_context: Run the producer in the caller's task and context
                (True) or on a neutral worker (False)

        Returns:
            Cached or computed value
        """
        return await get_or_compute(
            self.try_get, self.set, producer, expiry, keep_context=keep_context
        )

    async def delete(self) -> bool:
        """Delete the key. Returns True when something was removed."""
        with self._trace("delete"):
            return await self._executor().execute("delete", self.key) > 0

    async def exists(self) -> bool:
        """Check whether the key exists."""
        with self._trace("exists"):
            return await self._executor().execute("exists", self.key) > 0

    async def expire(self, expiry: Expiry) -> bool:
        """
        Set the key's expiration.

        Returns:
            True when the timeout was set (the key exists)
        """
        with self._trace("expire"):
            return bool(
                await self._executor().execute("expire", self.key, to_seconds(expiry))
            )

    async def time_to_live(self) -> Optional[int]:
        """Remaining TTL in seconds, or None when the key is absent or persistent."""
        with self._trace("time_to_live"):
            seconds = await self._executor().execute("ttl", self.key)
            return seconds if seconds >= 0 else None

    async def increment(self, delta: Number = 1) -> Number:
        """
        Atomically add ``delta``; absent keys count as zero.

        Uses INCRBYFLOAT for floats and INCRBY otherwise.
        """
        with self._trace("increment"):
            if isinstance(delta, float):
                return float(
                    await self._executor().execute("incrbyfloat", self.key, delta)
                )
            return await self._executor().execute("incrby", self.key, delta)

    async def decrement(self, delta: int = 1) -> int:
        """Atomically subtract an integer ``delta``; absent keys count as zero."""
        with self._trace("decrement"):
            return await self._executor().execute("decrby", self.key, delta)

    async def increment_limit_by_max(self, delta: Number, maximum: Number) -> Number:
        """
        Atomically add ``delta`` and cap the stored result at ``maximum``.

        The increment, comparison and capping write run as one Lua script,
        so concurrent callers never push the stored value above the bound.
        A first write to an absent key is capped as well.

        Args:
            delta: Amount to add (int or float)
            maximum: Upper bound; a float operand selects float arithmetic

        Returns:
            Stored value after the clamp

        Raises:
            RedisScriptExecutionException: If the stored value is not numeric
        """
        return await self._increment_clamped(delta, maximum, upper=True)

    async def increment_limit_by_min(self, delta: Number, minimum: Number) -> Number:
        """
        Atomically add ``delta`` and floor the stored result at ``minimum``.

        Mirror image of ``increment_limit_by_max``.
        """
        return await self._increment_clamped(delta, minimum, upper=False)

    async def _increment_clamped(self, delta: Number, bound: Number, upper: bool) -> Number:
        script = select_clamp_script(delta, bound, upper)
        with self._trace(script.name):
            result = await self._executor().run_script(
                script, self.key, script.encode_args(delta, bound)
            )
            value = script.parse_result(result)
            logger.debug(
                "Clamped increment applied",
                key=self.key,
                script=script.name,
                delta=delta,
                bound=bound,
                result=value,
            )
            return value

    def __repr__(self) -> str:
        return f"RedisString(key={self.key!r}, db={self.settings.db})"
