"""Guards for caller-supplied callbacks.

Every predicate, function, consumer and comparator handed to the tree is
wrapped once at the boundary so that a failing callback degrades to a fixed
default instead of aborting a whole-tree walk or leaving an index half built:

    predicate  -> False
    function   -> None
    consumer   -> no-op
    comparator -> 0 (equal)
"""

from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

_GUARDED_ATTR = "__ntree_guarded__"


def _callback_name(func: Callable[..., Any]) -> str:
    return getattr(func, "__qualname__", None) or repr(func)


def guarded(func: Callable[..., T], default: Optional[T] = None) -> Callable[..., Optional[T]]:
    """Wrap ``func`` so any exception it raises yields ``default``.

    Wrapping an already guarded callable returns it unchanged.
    """
    if getattr(func, _GUARDED_ATTR, False):
        return func
    name = _callback_name(func)

    @wraps(func)
    def _wrapper(*args: Any, **kwargs: Any) -> Optional[T]:
        try:
            return func(*args, **kwargs)
        except Exception as exc:
            logger.debug("Callback %s failed, using %r: %s", name, default, exc)
            return default

    setattr(_wrapper, _GUARDED_ATTR, True)
    return _wrapper


def safe_predicate(predicate: Callable[..., Any]) -> Callable[..., bool]:
    guarded_predicate = guarded(predicate, False)

    @wraps(predicate)
    def _wrapper(*args: Any) -> bool:
        return bool(guarded_predicate(*args))

    setattr(_wrapper, _GUARDED_ATTR, True)
    return _wrapper


def safe_function(func: Callable[..., T]) -> Callable[..., Optional[T]]:
    return guarded(func, None)


def safe_consumer(consumer: Callable[..., Any]) -> Callable[..., None]:
    guarded_consumer = guarded(consumer, None)

    @wraps(consumer)
    def _wrapper(*args: Any) -> None:
        guarded_consumer(*args)

    setattr(_wrapper, _GUARDED_ATTR, True)
    return _wrapper


def safe_comparator(comparator: Callable[[Any, Any], int]) -> Callable[[Any, Any], int]:
    guarded_comparator = guarded(comparator, 0)

    @wraps(comparator)
    def _wrapper(left: Any, right: Any) -> int:
        result = guarded_comparator(left, right)
        try:
            return int(result)
        except (TypeError, ValueError):
            logger.debug("Comparator %s returned non-integer %r", _callback_name(comparator), result)
            return 0

    setattr(_wrapper, _GUARDED_ATTR, True)
    return _wrapper


__all__ = ["guarded", "safe_predicate", "safe_function", "safe_consumer", "safe_comparator"]
