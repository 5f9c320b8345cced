"""
Domain value objects for Redis structures.
"""

from .value_objects import CacheKey, Expiry, to_seconds

__all__ = ["CacheKey", "Expiry", "to_seconds"]
