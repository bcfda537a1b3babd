"""Value-level serialization collaborator.

Values are encoded to JSON text with pydantic and decoded against an
explicit type descriptor (any type a ``TypeAdapter`` accepts, e.g. ``int``,
``List[str]``, a ``BaseModel`` subclass or a dataclass).
"""

from __future__ import annotations

import copy
import logging
from functools import lru_cache
from typing import Any, Optional, TypeVar

from pydantic import PydanticUserError, TypeAdapter

from ntree.core.errors import SerializationError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@lru_cache(maxsize=128)
def _cached_adapter(type_descriptor: Any) -> TypeAdapter:
    return TypeAdapter(type_descriptor)


def type_adapter(type_descriptor: Any) -> TypeAdapter:
    """Return a (cached when hashable) TypeAdapter for ``type_descriptor``."""
    try:
        return _cached_adapter(type_descriptor)
    except TypeError:
        return TypeAdapter(type_descriptor)


def encode(value: Any) -> str:
    """Encode ``value`` as JSON text. ``None`` encodes to ``"null"``."""
    try:
        return type_adapter(Any).dump_json(value).decode("utf-8")
    except (PydanticUserError, ValueError, TypeError) as exc:
        raise SerializationError(f"Cannot encode value of type {type(value).__name__}", cause=exc) from exc


def decode(text: str, type_descriptor: Any = Any) -> Any:
    """Decode JSON ``text`` into an instance of ``type_descriptor``."""
    try:
        return type_adapter(type_descriptor).validate_json(text)
    except (PydanticUserError, ValueError) as exc:
        raise SerializationError(f"Cannot decode value as {_describe(type_descriptor)}", cause=exc) from exc


def deep_copy(value: Optional[T], type_descriptor: Any = None) -> Optional[T]:
    """Copy ``value`` by encoding and decoding it.

    With a descriptor the decoded value is returned as is. Without one the
    runtime type of ``value`` is used, and the copy falls back to
    ``copy.deepcopy`` when that type cannot be encoded (plain classes) or
    when the round trip does not reproduce an equal value (int dict keys,
    tuples, sets).
    """
    if value is None:
        return None
    if type_descriptor is not None:
        return decode(encode(value), type_descriptor)
    value_type = type(value)
    try:
        copied = decode(encode(value), value_type)
    except SerializationError as exc:
        logger.debug("Copying %s with deepcopy: %s", value_type.__name__, exc)
        return copy.deepcopy(value)
    if copied != value:
        logger.debug("Copying %s with deepcopy: JSON round trip is lossy", value_type.__name__)
        return copy.deepcopy(value)
    return copied


def deep_copy_via_copy_constructor(value: Optional[T]) -> Optional[T]:
    """Copy ``value`` through the ``copy`` protocol (``__deepcopy__``)."""
    if value is None:
        return None
    return copy.deepcopy(value)


def _describe(type_descriptor: Any) -> str:
    return getattr(type_descriptor, "__name__", None) or repr(type_descriptor)


__all__ = [
    "encode",
    "decode",
    "deep_copy",
    "deep_copy_via_copy_constructor",
    "type_adapter",
]
