"""
Cache Value Objects

Immutable value objects shared by the Redis structures: the partition-bound
cache key and expiration handling.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Optional, Union

if TYPE_CHECKING:
    from ..infrastructure.redis.keyspace import RedisSettings

# Relative seconds, a duration, or an absolute deadline
Expiry = Union[int, float, timedelta, datetime]


@dataclass(frozen=True)
class CacheKey:
    """
    Immutable cache key value object.

    Binds a logical key name to the partition that stores it. The binding
    never changes after construction.
    """

    name: str
    settings: "RedisSettings"

    def __post_init__(self) -> None:
        """Validate cache key name."""
        if not isinstance(self.name, str):
            raise ValueError(f"Cache key must be a string, got {type(self.name)}")
        if not self.name:
            raise ValueError("Cache key cannot be empty")

    @property
    def db(self) -> int:
        """Database index of the bound partition."""
        return self.settings.db

    def __str__(self) -> str:
        return self.name


def to_seconds(expiry: Optional[Expiry]) -> Optional[int]:
    """
    Convert an expiry to whole seconds.

    Durations are truncated toward zero. Absolute deadlines are measured
    against the current time in the deadline's own timezone (local time for
    naive datetimes). Negative results are returned as-is; Redis decides how
    to treat them.

    Args:
        expiry: Seconds, timedelta, datetime deadline or None

    Returns:
        Whole seconds, or None for no expiration
    """
    if expiry is None:
        return None
    if isinstance(expiry, datetime):
        expiry = expiry - datetime.now(expiry.tzinfo)
    if isinstance(expiry, timedelta):
        return int(expiry.total_seconds())
    if isinstance(expiry, bool) or not isinstance(expiry, (int, float)):
        raise TypeError(
            f"Expiry must be seconds, timedelta or datetime, got {type(expiry).__name__}"
        )
    return int(expiry)
