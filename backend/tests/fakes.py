"""
In-memory Redis double for unit tests.

Implements the redis.asyncio command subset used by the structures,
MULTI/EXEC pipelines and the clamped-increment scripts. Script bodies are
matched against the registered ClampScript descriptions and interpreted from
their fields. Every single command yields to the event loop once before it
runs, like a network round trip; scripts and transactions run without
yielding in between, like the real server. The Lua bodies themselves run
in tests/integration/redis.
"""

import asyncio
import random
from typing import Any, Dict, List, Optional, Set, Tuple

from redis.exceptions import ResponseError

from redis_structures.infrastructure.redis.scripts import CLAMP_SCRIPTS, ClampScript

WRONGTYPE = "WRONGTYPE Operation against a key holding the wrong kind of value"


def _format_float(value: float) -> bytes:
    if value.is_integer() and abs(value) < 1e17:
        return str(int(value)).encode()
    return repr(value).encode()


def _to_bytes(value: Any) -> bytes:
    if isinstance(value, bytes):
        return value
    if isinstance(value, float):
        return _format_float(value)
    return str(value).encode()


class FakeScript:
    """Stand-in for redis.commands.core.AsyncScript."""

    def __init__(self, redis: "FakeRedis", body: str):
        self.redis = redis
        self.body = body
        self.script = next(
            (script for script in CLAMP_SCRIPTS if script.body == body), None
        )

    async def __call__(self, keys=None, args=None, client=None):
        await asyncio.sleep(0)
        if self.script is None:
            raise ResponseError("NOSCRIPT unknown script body")
        self.redis.commands.append(("evalsha", self.script.name, tuple(keys)))
        return self.redis._run_clamp(self.script, keys[0], args)


class FakePipeline:
    """Stand-in for redis.asyncio.client.Pipeline."""

    def __init__(self, redis: "FakeRedis", transaction: bool):
        self.redis = redis
        self.transaction = transaction
        self.queue: List[Tuple[str, tuple, dict]] = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.queue.clear()

    def __getattr__(self, name):
        def queue_command(*args, **kwargs):
            self.queue.append((name, args, kwargs))
            return self

        return queue_command

    async def execute(self):
        await asyncio.sleep(0)
        label = "multi" if self.transaction else "pipeline"
        self.redis.commands.append((label, tuple(name for name, _, _ in self.queue)))
        results = []
        for name, args, kwargs in self.queue:
            try:
                results.append(getattr(self.redis, f"_{name}")(*args, **kwargs))
            except ResponseError as e:
                results.append(e)
        for result in results:
            if isinstance(result, ResponseError):
                raise result
        return results


class FakeRedis:
    """
    Minimal asyncio Redis.

    Attributes:
        data: key -> bytes (strings) or set of bytes (sets)
        ttls: key -> remaining seconds
        commands: log of executed commands
    """

    def __init__(self):
        self.data: Dict[str, Any] = {}
        self.ttls: Dict[str, int] = {}
        self.commands: List[tuple] = []

    # Infrastructure

    def register_script(self, body: str) -> FakeScript:
        return FakeScript(self, body)

    def pipeline(self, transaction: bool = True) -> FakePipeline:
        return FakePipeline(self, transaction)

    def __getattr__(self, name):
        sync = self.__class__.__dict__.get(f"_{name}")
        if sync is None:
            raise AttributeError(name)

        async def command(*args, **kwargs):
            await asyncio.sleep(0)
            self.commands.append((name,) + args)
            return sync(self, *args, **kwargs)

        return command

    def _string(self, key: str) -> Optional[bytes]:
        value = self.data.get(key)
        if value is not None and not isinstance(value, bytes):
            raise ResponseError(WRONGTYPE)
        return value

    def _set_of(self, key: str, create: bool = False) -> Set[bytes]:
        value = self.data.get(key)
        if value is None:
            value = set()
            if create:
                self.data[key] = value
        elif not isinstance(value, set):
            raise ResponseError(WRONGTYPE)
        return value

    def _drop_if_empty(self, key: str) -> None:
        if key in self.data and self.data[key] == set():
            del self.data[key]
            self.ttls.pop(key, None)

    def _run_clamp(self, script: ClampScript, key: str, args: list) -> Any:
        delta, bound = args
        if script.is_float:
            current = self._incrbyfloat(key, float(delta))
            bound_value = float(bound)
            crossed = (
                current > bound_value
                if script.comparison == ">"
                else current < bound_value
            )
            if crossed:
                self.data[key] = _to_bytes(bound)
                return _to_bytes(bound)
            return _format_float(current)

        current = self._incrby(key, int(delta))
        bound_value = int(bound)
        crossed = (
            current > bound_value if script.comparison == ">" else current < bound_value
        )
        if crossed:
            self.data[key] = _to_bytes(bound)
            return _to_bytes(bound)
        return str(current).encode()

    # Keys

    def _exists(self, *keys: str) -> int:
        return sum(1 for key in keys if key in self.data)

    def _delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                removed += 1
            self.ttls.pop(key, None)
        return removed

    def _expire(self, key: str, seconds: int) -> bool:
        if key not in self.data:
            return False
        if seconds <= 0:
            self._delete(key)
            return True
        self.ttls[key] = seconds
        return True

    def _ttl(self, key: str) -> int:
        if key not in self.data:
            return -2
        return self.ttls.get(key, -1)

    # Strings

    def _get(self, key: str) -> Optional[bytes]:
        return self._string(key)

    def _set(self, key: str, value: Any, ex: Optional[int] = None) -> bool:
        if ex is not None and ex <= 0:
            raise ResponseError("invalid expire time in 'set' command")
        self.data[key] = _to_bytes(value)
        self.ttls.pop(key, None)
        if ex is not None:
            self.ttls[key] = ex
        return True

    def _getset(self, key: str, value: Any) -> Optional[bytes]:
        previous = self._string(key)
        self.data[key] = _to_bytes(value)
        self.ttls.pop(key, None)
        return previous

    def _incrby(self, key: str, amount: int) -> int:
        raw = self._string(key)
        try:
            current = int(raw) if raw is not None else 0
        except ValueError:
            raise ResponseError("value is not an integer or out of range")
        current += amount
        self.data[key] = str(current).encode()
        return current

    def _decrby(self, key: str, amount: int) -> int:
        return self._incrby(key, -amount)

    def _incrbyfloat(self, key: str, amount: float) -> float:
        raw = self._string(key)
        try:
            current = float(raw) if raw is not None else 0.0
        except ValueError:
            raise ResponseError("value is not a valid float")
        current += float(amount)
        self.data[key] = _format_float(current)
        return current

    # Sets

    def _sadd(self, key: str, *values: Any) -> int:
        if not values:
            raise ResponseError("wrong number of arguments for 'sadd' command")
        members = self._set_of(key, create=True)
        before = len(members)
        members.update(_to_bytes(value) for value in values)
        return len(members) - before

    def _srem(self, key: str, *values: Any) -> int:
        if not values:
            raise ResponseError("wrong number of arguments for 'srem' command")
        members = self._set_of(key)
        removed = 0
        for value in values:
            encoded = _to_bytes(value)
            if encoded in members:
                members.discard(encoded)
                removed += 1
        self._drop_if_empty(key)
        return removed

    def _sismember(self, key: str, value: Any) -> int:
        return int(_to_bytes(value) in self._set_of(key))

    def _smembers(self, key: str) -> Set[bytes]:
        return set(self._set_of(key))

    def _scard(self, key: str) -> int:
        return len(self._set_of(key))

    def _srandmember(self, key: str, number: Optional[int] = None):
        members = sorted(self._set_of(key))
        if number is None:
            return random.choice(members) if members else None
        if not members:
            return []
        if number >= 0:
            return random.sample(members, min(number, len(members)))
        return [random.choice(members) for _ in range(-number)]

    def _spop(self, key: str) -> Optional[bytes]:
        members = self._set_of(key)
        if not members:
            return None
        member = random.choice(sorted(members))
        members.discard(member)
        self._drop_if_empty(key)
        return member
