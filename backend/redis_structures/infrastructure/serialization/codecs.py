"""
Value Codecs

Pluggable serialization strategies converting typed values to and from the
bytes stored in Redis. A codec is chosen per RedisSettings, so every
structure bound to the same partition shares one encoding.
"""

import json
import pickle
from typing import Any, Dict, Optional, Protocol, Type, TypeVar, runtime_checkable

from pydantic import TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from ..redis.exceptions import (
    RedisConfigurationException,
    RedisSerializationException,
)

T = TypeVar("T")


@runtime_checkable
class ValueCodec(Protocol):
    """Strategy interface for value serialization."""

    name: str

    def serialize(self, value: Any) -> bytes:
        """Encode a value to bytes."""
        ...

    def deserialize(self, data: bytes, value_type: Optional[Type[T]] = None) -> T:
        """Decode bytes produced by ``serialize``."""
        ...


class PydanticCodec:
    """
    JSON codec driven by pydantic TypeAdapters.

    Validates decoded payloads against the declared value type, so dataclasses,
    pydantic models and parametrized containers round-trip as their own types.
    Numbers are written as bare JSON numbers, which keeps counters compatible
    with INCRBY / INCRBYFLOAT. Output is canonical (sorted keys, compact
    separators), so equal values encode to equal bytes.
    """

    name = "pydantic"

    def __init__(self) -> None:
        self._adapters: Dict[Any, TypeAdapter] = {}

    def _adapter(self, value_type: Any) -> TypeAdapter:
        adapter = self._adapters.get(value_type)
        if adapter is None:
            adapter = TypeAdapter(value_type)
            self._adapters[value_type] = adapter
        return adapter

    def serialize(self, value: Any) -> bytes:
        try:
            payload = self._adapter(type(value)).dump_python(value, mode="json")
            return json.dumps(
                payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False
            ).encode("utf-8")
        except (PydanticSerializationError, TypeError, ValueError) as e:
            raise RedisSerializationException(
                message=f"Cannot serialize value of type {type(value).__name__}",
                codec=self.name,
                value_type=type(value),
                original_error=e,
            ) from e

    def deserialize(self, data: bytes, value_type: Optional[Type[T]] = None) -> T:
        target = Any if value_type is None else value_type
        try:
            return self._adapter(target).validate_json(data)
        except ValidationError as e:
            raise RedisSerializationException(
                message="Malformed payload for declared value type",
                codec=self.name,
                value_type=target,
                original_error=e,
            ) from e


class JsonCodec:
    """
    Plain JSON codec.

    Keys are sorted and separators compact so equal values always produce
    equal bytes (required for set membership).
    """

    name = "json"

    def serialize(self, value: Any) -> bytes:
        try:
            return json.dumps(
                value, sort_keys=True, separators=(",", ":"), ensure_ascii=False
            ).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise RedisSerializationException(
                message=f"Cannot serialize value of type {type(value).__name__}",
                codec=self.name,
                value_type=type(value),
                original_error=e,
            ) from e

    def deserialize(self, data: bytes, value_type: Optional[Type[T]] = None) -> T:
        try:
            value = json.loads(data)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise RedisSerializationException(
                message="Malformed JSON payload",
                codec=self.name,
                value_type=value_type,
                original_error=e,
            ) from e

        if value_type is float and isinstance(value, int) and not isinstance(value, bool):
            # INCRBYFLOAT writes whole results without a fraction ("3")
            return float(value)
        if value_type in (int, float, str, bool, list, dict) and not isinstance(
            value, value_type
        ):
            raise RedisSerializationException(
                message=f"Expected {value_type.__name__}, got {type(value).__name__}",
                codec=self.name,
                value_type=value_type,
            )
        return value


class PickleCodec:
    """Pickle codec for arbitrary Python objects. Trusted data only."""

    name = "pickle"

    def serialize(self, value: Any) -> bytes:
        try:
            return pickle.dumps(value, protocol=pickle.HIGHEST_PROTOCOL)
        except (pickle.PicklingError, TypeError, AttributeError) as e:
            raise RedisSerializationException(
                message=f"Cannot pickle value of type {type(value).__name__}",
                codec=self.name,
                value_type=type(value),
                original_error=e,
            ) from e

    def deserialize(self, data: bytes, value_type: Optional[Type[T]] = None) -> T:
        try:
            value = pickle.loads(data)
        except (
            pickle.UnpicklingError,
            EOFError,
            ValueError,
            TypeError,
            KeyError,
            IndexError,
            AttributeError,
            ImportError,
        ) as e:
            raise RedisSerializationException(
                message="Malformed pickle payload",
                codec=self.name,
                value_type=value_type,
                original_error=e,
            ) from e

        if isinstance(value_type, type) and not isinstance(value, value_type):
            raise RedisSerializationException(
                message=f"Expected {value_type.__name__}, got {type(value).__name__}",
                codec=self.name,
                value_type=value_type,
            )
        return value


_CODECS = {
    PydanticCodec.name: PydanticCodec,
    JsonCodec.name: JsonCodec,
    PickleCodec.name: PickleCodec,
}


def get_codec(name: str) -> ValueCodec:
    """
    Create a codec by configuration name.

    Args:
        name: One of ``pydantic``, ``json`` or ``pickle``

    Returns:
        Codec instance

    Raises:
        RedisConfigurationException: If the name is unknown
    """
    codec_class = _CODECS.get(name.strip().lower())
    if codec_class is None:
        raise RedisConfigurationException(
            message=f"Unknown value codec: {name}",
            config_key="VALUE_CODEC",
            config_value=name,
        )
    return codec_class()
