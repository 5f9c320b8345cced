"""
Cache-Aside Orchestration

Get-or-compute-and-store over a primitive read and write. The producer runs
at most once per call; concurrent callers that all miss each run their own
producer (there is no single-flight deduplication).
"""

import asyncio
import contextvars
import inspect
from typing import Any, Awaitable, Callable, Optional, Tuple, TypeVar, Union

from ..domain.value_objects import Expiry

T = TypeVar("T")

Producer = Callable[[], Union[T, Awaitable[T]]]
Reader = Callable[[], Awaitable[Tuple[bool, Optional[T]]]]
Writer = Callable[[T, Optional[Expiry]], Awaitable[Any]]


async def _await_in_fresh_context(awaitable: Awaitable[T]) -> T:
    return await awaitable


async def run_producer(producer: Producer, keep_context: bool = True) -> T:
    """
    Invoke a sync or async producer once.

    Args:
        producer: Callable returning a value or an awaitable
        keep_context: Run inline in the caller's task and context. When False
            the producer runs on a neutral worker with an empty
            ``contextvars.Context``: a thread-pool executor for plain
            callables and a separate task for coroutine functions.

    Returns:
        Produced value
    """
    if keep_context:
        result = producer()
        if inspect.isawaitable(result):
            result = await result
        return result

    loop = asyncio.get_running_loop()
    if inspect.iscoroutinefunction(producer):
        result = producer()
    else:
        result = await loop.run_in_executor(None, contextvars.Context().run, producer)

    if inspect.isawaitable(result):
        task = loop.create_task(
            _await_in_fresh_context(result), context=contextvars.Context()
        )
        result = await task
    return result


async def get_or_compute(
    read: Reader,
    write: Writer,
    producer: Producer,
    expiry: Optional[Expiry] = None,
    keep_context: bool = True,
) -> T:
    """
    Return the cached value or compute, store and return it.

    The read completes before the producer starts. Producer exceptions
    propagate unchanged and nothing is written.

    Args:
        read: Returns (found, value)
        write: Persists (value, expiry)
        producer: Value factory, sync or async
        expiry: Expiration applied to a freshly computed value
        keep_context: See ``run_producer``

    Returns:
        Cached or freshly produced value
    """
    found, value = await read()
    if found:
        return value

    value = await run_producer(producer, keep_context)
    await write(value, expiry)
    return value
