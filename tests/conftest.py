"""Shared fixtures: fixed clocks, event factory, recording doubles."""

from __future__ import annotations

from datetime import datetime

import pytest

from lograft.events import LogEvent, to_detail
from lograft.formatters import PlainFormatter
from lograft.levels import Severity, meets_threshold

FIXED_TIMESTAMP = "2024-09-05T08:00:00.000Z"


@pytest.fixture(autouse=True)
def _reset_diagnostics():
    """Detach any diagnostics handler before and after each test."""
    from lograft.diagnostics import shutdown_diagnostics

    shutdown_diagnostics()
    yield
    shutdown_diagnostics()


class MutableClock:
    """Local wall clock the test can move."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture()
def clock() -> MutableClock:
    return MutableClock(datetime(2024, 9, 5, 8, 0, 0))


def make_event(
    level: Severity = Severity.INFORMATION,
    message: str = "some message",
    detail=None,
) -> LogEvent:
    return LogEvent(
        timestamp=FIXED_TIMESTAMP,
        level=level,
        message=message,
        detail=to_detail(detail),
    )


class RecordingSink:
    """Sink double: remembers every event offered and accepted."""

    def __init__(self, min_level: Severity = Severity.VERBOSE) -> None:
        self.min_level = min_level
        self.formatter = PlainFormatter()
        self.offered: list[LogEvent] = []
        self.accepted: list[LogEvent] = []
        self.closed = False

    def accept(self, event: LogEvent) -> None:
        self.offered.append(event)
        if meets_threshold(event.level, self.min_level):
            self.accepted.append(event)

    def close(self) -> None:
        self.closed = True


class RecordingStrategy:
    """Write strategy double: remembers persist/close calls."""

    def __init__(self) -> None:
        self.persisted: list[tuple[object, str]] = []
        self.closed_with: list[object] = []

    def persist(self, base_path, rendered: str) -> None:
        self.persisted.append((base_path, rendered))

    def close(self, base_path) -> None:
        self.closed_with.append(base_path)
