from __future__ import annotations

"""Loader error carrying the offending file path."""

import os

from pydantic import ValidationError

from ntree.core.errors import SerializationError, format_validation_errors


class TreeLoadError(RuntimeError):
    """Wraps tree-file failures with file path context."""

    def __init__(self, file_path: str, message: str, *, cause: Exception | None = None):
        self.file_path = file_path
        self.message = message
        self.cause = cause
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        path = self._relative_path(self.file_path)
        base = f"{self.message} ({path})"
        cause = self.cause
        if isinstance(cause, SerializationError) and cause.cause is not None:
            cause = cause.cause
        if isinstance(cause, ValidationError):
            return f"{base}: {format_validation_errors(cause.errors())}"
        if cause:
            return f"{base}: {cause}"
        return base

    @staticmethod
    def _relative_path(path: str) -> str:
        try:
            return os.path.relpath(path)
        except ValueError:  # pragma: no cover - different drive on Windows
            return path

    def __str__(self) -> str:
        return self._build_message()
