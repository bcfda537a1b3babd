"""Tree-level value cloning configuration."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict

from ntree.core.constants import ValueCloningMode
from ntree.io.serialization import deep_copy, deep_copy_via_copy_constructor


class ValueCloning(BaseModel):
    """
    How node values are copied when nodes or trees are cloned.

    BY_SERIALIZATION round-trips the value through JSON, decoding it as
    ``value_type``. When unset, the value's runtime type is used and values
    JSON cannot reproduce are deep-copied instead.
    BY_COPY uses ``copy.deepcopy``.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    mode: ValueCloningMode = ValueCloningMode.BY_SERIALIZATION
    value_type: Optional[Any] = None

    def clone(self, value: Any) -> Any:
        if value is None:
            return None
        if self.mode is ValueCloningMode.BY_COPY:
            return deep_copy_via_copy_constructor(value)
        return deep_copy(value, self.value_type)


DEFAULT_VALUE_CLONING = ValueCloning()

__all__ = ["ValueCloning", "DEFAULT_VALUE_CLONING"]
