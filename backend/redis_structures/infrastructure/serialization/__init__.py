"""
Value serialization strategies for Redis structures.
"""

from .codecs import ValueCodec, PydanticCodec, JsonCodec, PickleCodec, get_codec

__all__ = ["ValueCodec", "PydanticCodec", "JsonCodec", "PickleCodec", "get_codec"]
