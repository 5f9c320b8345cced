"""
Typed Redis structures.
"""

from .string import RedisString
from .set import RedisSet
from .cache_aside import get_or_compute, run_producer

__all__ = ["RedisString", "RedisSet", "get_or_compute", "run_producer"]
