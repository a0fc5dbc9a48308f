"""The dispatcher: filters by its own minimum level and fans out to sinks."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from lograft.errors import ConfigurationError
from lograft.events import LogEvent
from lograft.levels import Severity, meets_threshold
from lograft.sinks import Sink


class Logger:
    """Named collection of sinks behind a minimum severity.

    Every accepted event is built once and offered to every registered sink,
    in registration order; each sink applies its own minimum level. Sink
    failures propagate to the caller.
    """

    def __init__(
        self,
        min_level: Severity | str = Severity.INFORMATION,
        sinks: Mapping[str, Sink] | None = None,
    ) -> None:
        self._min_level = Severity.parse(min_level)
        self._sinks: dict[str, Sink] = dict(sinks or {})

    # -- sink registry ------------------------------------------------------

    def add_sink(self, name: str, sink: Sink) -> None:
        """Register ``sink`` under ``name``.

        Raises:
            ConfigurationError: ``name`` is already registered.
        """
        if name in self._sinks:
            raise ConfigurationError(f"Sink with name {name!r} already exists.")
        self._sinks[name] = sink

    def remove_sink(self, name: str) -> Sink:
        """Unregister and return the sink under ``name``.

        Raises:
            ConfigurationError: no sink is registered under ``name``.
        """
        if name not in self._sinks:
            raise ConfigurationError(f"Sink with name {name!r} does not exist.")
        return self._sinks.pop(name)

    def get_sink(self, name: str) -> Sink:
        try:
            return self._sinks[name]
        except KeyError:
            raise ConfigurationError(f"Sink with name {name!r} does not exist.") from None

    @property
    def sinks(self) -> Mapping[str, Sink]:
        return MappingProxyType(self._sinks)

    def __contains__(self, name: object) -> bool:
        return name in self._sinks

    def __len__(self) -> int:
        return len(self._sinks)

    # -- level --------------------------------------------------------------

    @property
    def min_level(self) -> Severity:
        return self._min_level

    @min_level.setter
    def min_level(self, level: Severity | str) -> None:
        self._min_level = Severity.parse(level)

    def set_min_level(self, level: Severity | str) -> None:
        self.min_level = level

    def get_min_level(self) -> Severity:
        return self._min_level

    def is_enabled_for(self, level: Severity) -> bool:
        return meets_threshold(level, self._min_level)

    # -- emission -----------------------------------------------------------

    def log(self, level: Severity | str, message: str, detail: Any = None) -> None:
        """Build one event and offer it to every sink.

        ``detail`` may be a mapping, an exception, a Detail or None.
        """
        level = Severity.parse(level)
        if not meets_threshold(level, self._min_level):
            return

        event = LogEvent.create(level, message, detail)
        for sink in list(self._sinks.values()):
            sink.accept(event)

    def verbose(self, message: str, detail: Any = None) -> None:
        self.log(Severity.VERBOSE, message, detail)

    def debug(self, message: str, detail: Any = None) -> None:
        self.log(Severity.DEBUG, message, detail)

    def info(self, message: str, detail: Any = None) -> None:
        self.log(Severity.INFORMATION, message, detail)

    def warning(self, message: str, detail: Any = None) -> None:
        self.log(Severity.WARNING, message, detail)

    def error(self, message: str, detail: Any = None) -> None:
        self.log(Severity.ERROR, message, detail)

    def fatal(self, message: str, detail: Any = None) -> None:
        self.log(Severity.FATAL, message, detail)

    # -- lifecycle ----------------------------------------------------------

    def close(self) -> None:
        """Close every sink, draining buffered writes.

        All sinks are closed even if one fails; the first failure is re-raised.
        """
        first_error: BaseException | None = None
        for sink in list(self._sinks.values()):
            try:
                sink.close()
            except Exception as exc:
                if first_error is None:
                    first_error = exc
        if first_error is not None:
            raise first_error

    def __enter__(self) -> Logger:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
