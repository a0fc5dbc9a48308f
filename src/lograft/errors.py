"""Exception hierarchy for lograft.

Configuration and directory errors surface synchronously from the call that
caused them. I/O failures keep their built-in ``OSError`` types.
"""

from __future__ import annotations

from pathlib import Path


class LograftError(Exception):
    """Base class for every error raised by lograft itself."""


class ConfigurationError(LograftError, ValueError):
    """Invalid logger wiring: duplicate or unknown sink, bad level or name."""


class DirectoryError(LograftError, NotADirectoryError):
    """A sink base path exists but is not a directory."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        super().__init__(f"The path {str(self.path)!r} is not a directory.")


class LockError(LograftError, TimeoutError):
    """Exclusive lock could not be obtained within the retry budget."""

    def __init__(self, path: str | Path, attempts: int) -> None:
        self.path = Path(path)
        self.attempts = attempts
        super().__init__(
            f"Could not lock {str(self.path)!r} after {attempts} attempt(s)."
        )
