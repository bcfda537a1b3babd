"""Shared helpers: callback guards, argument validation and call logging."""

from ntree.utils.callbacks import (
    guarded,
    safe_comparator,
    safe_consumer,
    safe_function,
    safe_predicate,
)
from ntree.utils.logging import log_calls
from ntree.utils.validation import args_not_none

__all__ = [
    "guarded",
    "safe_predicate",
    "safe_function",
    "safe_consumer",
    "safe_comparator",
    "args_not_none",
    "log_calls",
]
