"""Immutable log event record and the detail payload it may carry.

A detail is a tagged union: a structured mapping, an error description, or
absent (``None``). Callers may pass raw mappings or exceptions; they are
coerced once, when the event is built.
"""

from __future__ import annotations

import traceback
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from types import MappingProxyType
from typing import Any

from lograft.levels import Severity


# Key types json.dumps accepts as object keys; default=str never sees keys.
_JSON_KEY_TYPES = (str, int, float, bool, type(None))


def _json_keys(value: Any) -> Any:
    """Copy ``value``, turning mapping keys json.dumps would reject into str."""
    if isinstance(value, Mapping):
        return {
            k if isinstance(k, _JSON_KEY_TYPES) else str(k): _json_keys(v)
            for k, v in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [_json_keys(v) for v in value]
    return value


# ---------------------------------------------------------------------------
# Detail variants
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StructuredDetail:
    """Arbitrary key/value context attached to an event.

    Keys JSON cannot carry, tuples for instance, are stored as ``str(key)``,
    nested mappings included, so every formatter can render the fields.
    """

    fields: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", MappingProxyType(_json_keys(self.fields)))

    def to_json(self) -> dict[str, Any]:
        return dict(self.fields)


@dataclass(frozen=True)
class ErrorDetail:
    """Message and stack trace captured from an exception.

    ``stackTrace`` is left out of the JSON shape when no trace was captured.
    """

    message: str
    stack_trace: str | None = None

    @classmethod
    def from_exception(cls, exc: BaseException) -> ErrorDetail:
        stack = "".join(traceback.format_exception(exc)).rstrip("\n")
        return cls(message=str(exc), stack_trace=stack)

    def to_json(self) -> dict[str, Any]:
        rendered: dict[str, Any] = {"message": self.message}
        if self.stack_trace is not None:
            rendered["stackTrace"] = self.stack_trace
        return rendered


Detail = StructuredDetail | ErrorDetail


def to_detail(value: Any) -> Detail | None:
    """Coerce caller-supplied detail into the tagged union."""
    if value is None:
        return None
    if isinstance(value, (StructuredDetail, ErrorDetail)):
        return value
    if isinstance(value, BaseException):
        return ErrorDetail.from_exception(value)
    if isinstance(value, Mapping):
        return StructuredDetail(value)
    raise TypeError(
        f"Unsupported detail type {type(value).__name__!r}: "
        f"expected a mapping, an exception or None"
    )


# ---------------------------------------------------------------------------
# Event
# ---------------------------------------------------------------------------


def iso_timestamp(moment: datetime | None = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a ``Z`` suffix."""
    moment = moment or datetime.now(UTC)
    moment = moment.astimezone(UTC)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class LogEvent:
    timestamp: str
    level: Severity
    message: str
    detail: Detail | None = None

    @classmethod
    def create(
        cls,
        level: Severity,
        message: str,
        detail: Any = None,
        clock: Callable[[], datetime] | None = None,
    ) -> LogEvent:
        """Build an event, stamping it with the current UTC instant."""
        moment = clock() if clock is not None else datetime.now(UTC)
        return cls(
            timestamp=iso_timestamp(moment),
            level=Severity.parse(level),
            message=message,
            detail=to_detail(detail),
        )
