"""Formatters: pure renderers from a LogEvent to a string.

Three built-ins, selectable by name through the registry:

    plain: ``[timestamp] [LEVEL] message`` plus an indented detail block
    json: one compact JSON object per event
    xml: a pretty-printed ``<log>`` document per event

Register your own:
    from lograft.formatters import register_formatter
    register_formatter("logfmt", MyLogfmtFormatter)
"""

from __future__ import annotations

import json
import xml.etree.ElementTree as ET
from typing import Any, Protocol, runtime_checkable

from lograft.errors import ConfigurationError
from lograft.events import ErrorDetail, LogEvent

# Rendered in place of an absent detail by the XML formatter.
ABSENT_DETAIL_MARKER = "undefined"


def _pretty(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False, default=str)


@runtime_checkable
class Formatter(Protocol):
    """Strategy: how an event is turned into text. Must not raise."""

    def format(self, event: LogEvent) -> str: ...


class PlainFormatter:
    """Human-readable single line, with detail appended on following lines."""

    def format(self, event: LogEvent) -> str:
        rendered = f"[{event.timestamp}] [{event.level.label}] {event.message}"

        if isinstance(event.detail, ErrorDetail):
            rendered += f"\nERROR: {_pretty(event.detail.to_json())}"
        elif event.detail is not None:
            rendered += f"\nDetails: {_pretty(event.detail.to_json())}"

        return rendered


class JsonFormatter:
    """Compact JSON, keys in fixed order; ``details`` is null when absent."""

    def format(self, event: LogEvent) -> str:
        record = {
            "timestamp": event.timestamp,
            "level": event.level.label,
            "message": event.message,
            "details": event.detail.to_json() if event.detail is not None else None,
        }
        return json.dumps(record, separators=(",", ":"), ensure_ascii=False, default=str)


class XmlFormatter:
    """Pretty-printed XML document with a ``log`` root element."""

    declaration = '<?xml version="1.0"?>'

    def format(self, event: LogEvent) -> str:
        root = ET.Element("log")
        ET.SubElement(root, "timestamp").text = event.timestamp
        ET.SubElement(root, "level").text = event.level.label
        ET.SubElement(root, "message").text = event.message
        ET.SubElement(root, "details").text = (
            _pretty(event.detail.to_json())
            if event.detail is not None
            else ABSENT_DETAIL_MARKER
        )
        ET.indent(root, space="  ")
        return f"{self.declaration}\n{ET.tostring(root, encoding='unicode')}"


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

_FORMATTERS: dict[str, type] = {
    "plain": PlainFormatter,
    "json": JsonFormatter,
    "xml": XmlFormatter,
}


def register_formatter(name: str, cls: type) -> None:
    """Register a custom formatter class under ``name``."""
    _FORMATTERS[name] = cls


def get_formatter(name: str) -> Formatter:
    """Instantiate the formatter registered under ``name``."""
    cls = _FORMATTERS.get(name)
    if cls is None:
        raise ConfigurationError(
            f"Unknown formatter: {name!r}. "
            f"Available: {list(_FORMATTERS)}. "
            f"Register custom formatters with register_formatter()."
        )
    return cls()
