"""Severity levels, ordered least to most severe."""

from __future__ import annotations

from enum import IntEnum

from lograft.errors import ConfigurationError


class Severity(IntEnum):
    VERBOSE = 0
    DEBUG = 1
    INFORMATION = 2
    WARNING = 3
    ERROR = 4
    FATAL = 5

    @property
    def label(self) -> str:
        """Uppercased name used by every formatter."""
        return self.name.upper()

    @classmethod
    def parse(cls, value: Severity | str | int) -> Severity:
        """Resolve a level from an enum member, ordinal or (alias) name."""
        if isinstance(value, Severity):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            try:
                return cls(value)
            except ValueError:
                raise ConfigurationError(f"Unknown severity ordinal: {value!r}") from None
        if isinstance(value, str):
            key = value.strip().upper()
            key = _ALIASES.get(key, key)
            if key in cls.__members__:
                return cls[key]
        raise ConfigurationError(
            f"Unknown severity: {value!r}. "
            f"Available: {[m.name.lower() for m in cls]}."
        )


_ALIASES = {
    "TRACE": "VERBOSE",
    "INFO": "INFORMATION",
    "WARN": "WARNING",
    "CRITICAL": "FATAL",
}


def meets_threshold(level: Severity, minimum: Severity) -> bool:
    """True when ``level`` is at least as severe as ``minimum``."""
    return int(level) >= int(minimum)
