"""Sinks: a minimum level plus a formatter, bound to a destination."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import IO, Protocol, runtime_checkable

from lograft import fs
from lograft.events import LogEvent
from lograft.formatters import Formatter, PlainFormatter
from lograft.levels import Severity, meets_threshold
from lograft.strategies import WriteStrategy


@runtime_checkable
class Sink(Protocol):
    min_level: Severity
    formatter: Formatter

    def accept(self, event: LogEvent) -> None: ...

    def close(self) -> None: ...


class ConsoleSink:
    """Write accepted events to stdout, one rendered event per line."""

    def __init__(
        self,
        min_level: Severity | str = Severity.VERBOSE,
        formatter: Formatter | None = None,
        stream: IO[str] | None = None,
    ) -> None:
        self.min_level = Severity.parse(min_level)
        self.formatter = formatter or PlainFormatter()
        self._stream = stream

    def accept(self, event: LogEvent) -> None:
        if not meets_threshold(event.level, self.min_level):
            return
        # Resolved per call so a replaced sys.stdout is honoured.
        stream = self._stream or sys.stdout
        stream.write(self.formatter.format(event) + "\n")
        stream.flush()

    def close(self) -> None:
        pass


class FileSink:
    """Hand accepted events to a write strategy rooted at ``base_path``.

    The base path is created when missing; an existing non-directory raises
    DirectoryError.
    """

    def __init__(
        self,
        min_level: Severity | str,
        base_path: str | Path,
        strategy: WriteStrategy,
        formatter: Formatter | None = None,
    ) -> None:
        self.base_path = fs.ensure_is_directory(base_path)
        self.min_level = Severity.parse(min_level)
        self.strategy = strategy
        self.formatter = formatter or PlainFormatter()

    def accept(self, event: LogEvent) -> None:
        if not meets_threshold(event.level, self.min_level):
            return
        self.strategy.persist(self.base_path, self.formatter.format(event))

    def close(self) -> None:
        self.strategy.close(self.base_path)
