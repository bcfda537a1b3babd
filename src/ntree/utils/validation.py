from __future__ import annotations

"""Eager argument validation for public entry points."""

import inspect
from collections.abc import Collection, Mapping
from typing import Any

from ntree.core.errors import InvalidArgumentError


def _caller_name(depth: int) -> str:
    frame = inspect.currentframe()
    try:
        for _ in range(depth):
            if frame is None:
                break
            frame = frame.f_back
        if frame is None:
            return "<unknown>"
        code = frame.f_code
        return getattr(code, "co_qualname", code.co_name)
    finally:
        del frame


def _holds_none(arg: Any) -> bool:
    if isinstance(arg, (str, bytes)) or not isinstance(arg, Collection):
        return False
    items = arg.values() if isinstance(arg, Mapping) else arg
    return any(item is None for item in items)


def args_not_none(*args: Any) -> None:
    """Raise InvalidArgumentError if any argument is None or holds None.

    Collections (lists, tuples, sets, dict values) are checked one level deep.
    Iterators are never consumed. The error names the function that called
    ``args_not_none`` and the 1-based position of the offending argument.
    """
    for position, arg in enumerate(args, start=1):
        if arg is None:
            raise InvalidArgumentError(_caller_name(2), f"argument {position} must not be None")
        if _holds_none(arg):
            raise InvalidArgumentError(_caller_name(2), f"argument {position} contains a None element")


__all__ = ["args_not_none"]
