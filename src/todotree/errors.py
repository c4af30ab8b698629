"""Error types for todo-tree.

Configuration problems (bad tags, aliases, priorities or markers) are
raised as ``ConfigError`` and abort a run before any file is scanned.
Per-file problems are raised as ``FileReadError`` inside the scanner and
recorded on the affected ``FileResult`` instead of propagating.
"""
from __future__ import annotations


class TodoTreeError(Exception):
    """Base class for every error raised by todo-tree."""


class ConfigError(TodoTreeError, ValueError):
    """Raised when tags, priorities or matching options are invalid.

    Parameters
    ----------
    message:
        Human-readable description of the problem.
    source:
        Optional origin of the bad value, e.g. a config file path.
    """

    def __init__(self, message: str, source: str | None = None) -> None:
        self.config_message = message
        self.source = source
        if source:
            super().__init__(f"{source}: {message}")
        else:
            super().__init__(message)


class PatternCompileError(ConfigError):
    """Raised when a tag or alias cannot be embedded in the match pattern."""

    def __init__(self, token: str, reason: str) -> None:
        self.token = token
        self.reason = reason
        super().__init__(f"Cannot compile tag {token!r}: {reason}")


class FileReadError(TodoTreeError, OSError):
    """Raised when a single file cannot be read or decoded.

    Parameters
    ----------
    path:
        The file that failed.
    reason:
        Short description of the underlying failure.
    """

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read {path}: {reason}")

    def __str__(self) -> str:
        return f"Cannot read {self.path}: {self.reason}"
