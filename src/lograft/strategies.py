"""Write strategies: turn a rendered event into a file append.

    hourly: ``<base>/xml/YYYYMMDD_HH.xml``, one append per event
    daily: ``<base>/json/YYYYMMDD.json``, one append per event
    batched: ``<base>/json/YYYYMMDD.json``, buffered; one locked append
               per ``capacity`` events

Buckets follow the local wall clock at the time of the write, not the event
timestamp. Every rendered message is followed by a newline.

Batch lifecycle:
    1. persist() pushes onto the in-memory buffer
    2. reaching capacity triggers flush() inside the same call
    3. flush() takes the whole buffer, locks the daily file, appends once
    4. the taken batch is gone afterwards, even when the flush failed
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from lograft import fs
from lograft.diagnostics import get_logger
from lograft.errors import ConfigurationError
from lograft.locking import FileLockProvider, LockProvider, RetryPolicy, acquire

logger = get_logger(__name__)

Clock = Callable[[], datetime]


@runtime_checkable
class WriteStrategy(Protocol):
    def persist(self, base_path: str | Path, rendered: str) -> None: ...

    def close(self, base_path: str | Path) -> None: ...


class _ImmediateStrategy:
    """Open, append, close on every call. Stateless apart from the clock."""

    subdirectory: str = ""

    def __init__(self, clock: Clock | None = None) -> None:
        self._clock = clock or datetime.now

    def target(self, base_path: str | Path) -> Path:
        raise NotImplementedError

    def persist(self, base_path: str | Path, rendered: str) -> None:
        path = self.target(base_path)
        try:
            fs.ensure_directory(path.parent)
            fs.append_text(path, rendered + "\n")
        except OSError as exc:
            logger.error("strategy.append.failed", path=str(path), error=str(exc))
            raise

    def close(self, base_path: str | Path) -> None:
        pass


class HourlyXmlStrategy(_ImmediateStrategy):
    subdirectory = "xml"

    def target(self, base_path: str | Path) -> Path:
        return Path(base_path) / self.subdirectory / f"{fs.hour_bucket(self._clock())}.xml"


class DailyJsonStrategy(_ImmediateStrategy):
    subdirectory = "json"

    def target(self, base_path: str | Path) -> Path:
        return Path(base_path) / self.subdirectory / f"{fs.day_bucket(self._clock())}.json"


# ---------------------------------------------------------------------------
# Batched
# ---------------------------------------------------------------------------


class FlushState(Enum):
    IDLE = "idle"
    FLUSHING = "flushing"


@dataclass(frozen=True)
class FlushResult:
    """Outcome of a successful flush."""

    path: Path
    written: int
    remaining: int


class BatchedJsonStrategy:
    """Buffers rendered lines and appends them in batches under a file lock.

    The buffer is guarded by a mutex so concurrent pushes are safe; the
    IDLE/FLUSHING state keeps two flushes from overlapping on one instance.
    Lines pushed while a flush is running stay buffered for the next one.
    """

    subdirectory = "json"

    def __init__(
        self,
        capacity: int = 100,
        lock_provider: LockProvider | None = None,
        retry: RetryPolicy | None = None,
        clock: Clock | None = None,
        sleep: Callable[[float], None] | None = None,
    ) -> None:
        if capacity < 1:
            raise ConfigurationError(f"capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self._lock_provider = lock_provider or FileLockProvider()
        self._retry = retry or RetryPolicy()
        self._clock = clock or datetime.now
        self._sleep = sleep or time.sleep
        self._mutex = threading.Lock()
        self._buffer: list[str] = []
        self._state = FlushState.IDLE

        self._hooks: dict[str, list[Any]] = {
            "on_flush": [],  # Called with FlushResult after a successful flush
            "on_flush_failed": [],  # Called with the exception and dropped count
        }

    @property
    def pending(self) -> int:
        with self._mutex:
            return len(self._buffer)

    @property
    def state(self) -> FlushState:
        return self._state

    def add_hook(self, event: str, hook: Callable[..., Any]) -> None:
        if event not in self._hooks:
            raise ConfigurationError(
                f"Unknown hook event: {event!r}. Available: {list(self._hooks)}"
            )
        self._hooks[event].append(hook)

    def target(self, base_path: str | Path) -> Path:
        return Path(base_path) / self.subdirectory / f"{fs.day_bucket(self._clock())}.json"

    def persist(self, base_path: str | Path, rendered: str) -> None:
        with self._mutex:
            self._buffer.append(rendered)
            size = len(self._buffer)
        logger.debug("batch.buffered", size=size, capacity=self.capacity)

        if size >= self.capacity:
            self.flush(base_path)

    def flush(self, base_path: str | Path) -> FlushResult | None:
        """Append everything buffered as one locked write.

        Returns None when there was nothing to write or another flush on this
        instance is already running.
        """
        with self._mutex:
            if self._state is FlushState.FLUSHING:
                return None
            self._state = FlushState.FLUSHING
            batch, self._buffer = self._buffer, []

        try:
            if not batch:
                return None
            path = self.target(base_path)
            try:
                fs.ensure_directory(path.parent)
                fs.ensure_file(path)
                with acquire(self._lock_provider, path, self._retry, self._sleep):
                    fs.append_text(path, "\n".join(batch) + "\n")
            except Exception as exc:
                logger.error(
                    "batch.flush.failed",
                    path=str(path),
                    dropped=len(batch),
                    error=str(exc),
                )
                self._run_hooks("on_flush_failed", exc, len(batch))
                raise

            result = FlushResult(path=path, written=len(batch), remaining=self.pending)
            logger.info("batch.flushed", path=str(path), written=result.written)
            self._run_hooks("on_flush", result)
            return result
        finally:
            with self._mutex:
                self._state = FlushState.IDLE

    def close(self, base_path: str | Path) -> None:
        """Flush whatever is still buffered."""
        self.flush(base_path)

    def _run_hooks(self, event: str, *args: Any) -> None:
        for hook in self._hooks.get(event, []):
            try:
                hook(*args)
            except Exception:
                logger.debug("batch.hook.failed", hook_event=event)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

_STRATEGIES: dict[str, type] = {
    "hourly": HourlyXmlStrategy,
    "daily": DailyJsonStrategy,
    "batched": BatchedJsonStrategy,
}


def register_strategy(name: str, cls: type) -> None:
    """Register a custom write strategy class under ``name``."""
    _STRATEGIES[name] = cls


def get_strategy(name: str, **options: Any) -> WriteStrategy:
    """Instantiate the strategy registered under ``name`` with ``options``."""
    cls = _STRATEGIES.get(name)
    if cls is None:
        raise ConfigurationError(
            f"Unknown write strategy: {name!r}. "
            f"Available: {list(_STRATEGIES)}. "
            f"Register custom strategies with register_strategy()."
        )
    return cls(**options)
