from __future__ import annotations
import logging
import reprlib
from functools import wraps
from typing import Any, Callable

_short = reprlib.Repr()
_short.maxstring = 60
_short.maxother = 60
_short.maxlist = 4
_short.maxdict = 4


def log_calls(logger_name: str | None = None) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Decorator to log calls at DEBUG level and log-then-reraise failures.

    Arguments and results are shortened with ``reprlib`` so large trees or
    values do not flood the log.
    """

    def _decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        name = logger_name or func.__module__
        logger = logging.getLogger(name)

        @wraps(func)
        def _wrapper(*args: Any, **kwargs: Any) -> Any:
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug(
                    "Calling %s args=(%s) kwargs=%s",
                    func.__qualname__,
                    ", ".join(_short.repr(arg) for arg in args),
                    _short.repr(kwargs),
                )
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                logger.exception("Error in %s: %s", func.__qualname__, e)
                raise
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug("%s returned %s", func.__qualname__, _short.repr(result))
            return result

        return _wrapper

    return _decorator


__all__ = ["log_calls"]
