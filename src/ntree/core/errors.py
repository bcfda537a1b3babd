from __future__ import annotations

"""Exception types raised by the tree core.

Only programmer errors are raised. Structural mistakes made while editing a
tree (orphan targets, sibling id collisions, replacing a node with itself) are
reported through ``None``/``False``/empty return values instead.
"""

from typing import Iterable, Optional

from pydantic import ValidationError


class TreeError(Exception):
    """Base class for all ntree errors."""


class InvalidArgumentError(TreeError, ValueError):
    """A required argument was missing, or a collection argument held ``None``."""

    def __init__(self, where: str, message: str):
        self.where = where
        self.message = message
        super().__init__(f"{where}: {message}")


class InvalidLevelError(TreeError, ValueError):
    """Level queries are 1-based; anything below 1 is a caller bug."""

    def __init__(self, level: int):
        self.level = level
        super().__init__(f"Level must be >= 1 (got {level})")


class SerializationError(TreeError):
    """Wraps encode/decode failures from the serialization layer."""

    def __init__(self, message: str, *, cause: Optional[Exception] = None):
        self.message = message
        self.cause = cause
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        if isinstance(self.cause, ValidationError):
            return f"{self.message}: {format_validation_errors(self.cause.errors())}"
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message

    def __str__(self) -> str:
        return self._build_message()


def format_validation_errors(errors: Iterable[dict], limit: int = 3) -> str:
    """Condense pydantic error dicts into ``loc: msg; loc: msg; ... (N more)``."""
    error_list = list(errors)
    snippets = []
    for err in error_list[:limit]:
        loc = ".".join(str(entry) for entry in err.get("loc", [])) or "<root>"
        msg = err.get("msg") or err.get("type") or "validation error"
        snippets.append(f"{loc}: {msg}")
    remaining = len(error_list) - len(snippets)
    if remaining > 0:
        snippets.append(f"... ({remaining} more)")
    return "; ".join(snippets)


__all__ = [
    "TreeError",
    "InvalidArgumentError",
    "InvalidLevelError",
    "SerializationError",
    "format_validation_errors",
]
