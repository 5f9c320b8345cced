"""
Redis Command Executor

Issues single commands, pipelined batches, MULTI/EXEC transactions and Lua
scripts against one partition. Translates redis-py errors into the
library's exception taxonomy. No retries: retry policy belongs to the
connection layer.
"""

from typing import Any, List, Sequence, Tuple

import structlog
from redis.asyncio import Redis
from redis.exceptions import (
    ConnectionError as RedisConnectionError,
    RedisError,
    ResponseError,
    TimeoutError as RedisTimeoutError,
)

from .exceptions import (
    RedisCommandException,
    RedisConnectionException,
    RedisException,
    RedisOperationTimeoutException,
    RedisScriptExecutionException,
)
from .scripts import ClampScript

logger = structlog.get_logger(__name__)

# (redis-py command method name, positional args after the key)
QueuedCommand = Tuple[str, Sequence[Any]]


def translate_error(error: RedisError, operation: str, key: str) -> RedisException:
    """
    Map a redis-py error onto the library exception taxonomy.

    Args:
        error: Original redis-py error
        operation: Command or script name
        key: Key the operation targeted

    Returns:
        Exception to raise (chained by the caller)
    """
    if isinstance(error, RedisTimeoutError):
        return RedisOperationTimeoutException(
            operation=operation, key=key, original_error=error
        )
    if isinstance(error, RedisConnectionError):
        return RedisConnectionException(
            message=f"Redis connection failed during '{operation}'",
            operation=operation,
            key=key,
            original_error=error,
        )
    return RedisCommandException(operation=operation, key=key, original_error=error)


class RedisExecutor:
    """
    Executes commands for a single Redis partition.

    Command names are redis-py client method names (``get``, ``sadd``,
    ``incrbyfloat``...). The key is always the first argument.
    """

    def __init__(self, client: Redis):
        self.client = client

    async def execute(self, command: str, key: str, *args, **kwargs) -> Any:
        """
        Execute one command.

        Args:
            command: redis-py method name
            key: Target key
            *args: Command arguments following the key
            **kwargs: Command keyword options (e.g. ``ex``)

        Returns:
            redis-py reply

        Raises:
            RedisException: On any remote failure
        """
        method = getattr(self.client, command)
        try:
            return await method(key, *args, **kwargs)
        except RedisError as e:
            logger.warning("Redis command failed", command=command, key=key, error=str(e))
            raise translate_error(e, command, key) from e

    async def transaction(self, key: str, *commands: QueuedCommand) -> List[Any]:
        """
        Execute commands atomically in one MULTI/EXEC block.

        The whole block is sent as a single request and applied by the server
        as a unit: either every command runs or none does.

        Args:
            key: Target key shared by all commands
            *commands: (command, args) pairs

        Returns:
            Replies in command order
        """
        return await self._run_batch(key, commands, transaction=True)

    async def pipeline(self, key: str, *commands: QueuedCommand) -> List[Any]:
        """
        Execute commands in one round trip without atomicity.

        Args:
            key: Target key shared by all commands
            *commands: (command, args) pairs

        Returns:
            Replies in command order
        """
        return await self._run_batch(key, commands, transaction=False)

    async def _run_batch(
        self, key: str, commands: Sequence[QueuedCommand], transaction: bool
    ) -> List[Any]:
        operation = "multi" if transaction else "pipeline"
        try:
            async with self.client.pipeline(transaction=transaction) as pipe:
                for command, args in commands:
                    getattr(pipe, command)(key, *args)
                return await pipe.execute()
        except RedisError as e:
            logger.warning(
                "Redis batch failed",
                operation=operation,
                commands=[command for command, _ in commands],
                key=key,
                error=str(e),
            )
            raise translate_error(e, operation, key) from e

    async def run_script(self, script: ClampScript, key: str, args: Sequence[Any]) -> Any:
        """
        Run a Lua script against one key.

        Uses EVALSHA and falls back to EVAL when the server has not cached
        the script yet.

        Args:
            script: Script description
            key: The single KEYS[1] entry
            args: ARGV entries

        Returns:
            Raw script reply

        Raises:
            RedisScriptExecutionException: If the script raised an error
            RedisException: On connection failures
        """
        registered = self.client.register_script(script.body)
        try:
            return await registered(keys=[key], args=list(args))
        except ResponseError as e:
            logger.warning(
                "Redis script failed", script=script.name, key=key, error=str(e)
            )
            raise RedisScriptExecutionException(
                script_name=script.name, key=key, original_error=e
            ) from e
        except RedisError as e:
            logger.warning(
                "Redis script failed", script=script.name, key=key, error=str(e)
            )
            raise translate_error(e, script.name, key) from e
