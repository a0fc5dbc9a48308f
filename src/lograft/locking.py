"""Exclusive file locking with bounded retry and capped backoff.

A LockProvider knows how to *try* a lock once; acquire() owns the retry loop.
Swap FileLockProvider (cross-process, POSIX ``flock``) for
InProcessLockProvider when a single process owns the log files.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Any, Protocol, runtime_checkable

from lograft.diagnostics import get_logger
from lograft.errors import ConfigurationError, LockError

logger = get_logger(__name__)


@runtime_checkable
class LockProvider(Protocol):
    """Strategy: one non-blocking attempt at an exclusive lock on ``path``."""

    def try_acquire(self, path: Path) -> Any | None:
        """Return a handle on success, ``None`` when the lock is held elsewhere."""
        ...

    def release(self, handle: Any) -> None: ...


class FileLockProvider:
    """Advisory ``flock`` on the target file.

    Locks belong to the open file description, so two providers (or two
    processes) opening the same path exclude each other.

    POSIX only; ``fcntl`` is imported on first use so the rest of the package
    still loads on Windows.
    """

    def try_acquire(self, path: Path) -> IO[bytes] | None:
        import fcntl

        f = open(path, "ab")
        try:
            fcntl.flock(f.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError:
            f.close()
            return None
        except BaseException:
            f.close()
            raise
        return f

    def release(self, handle: IO[bytes]) -> None:
        import fcntl

        try:
            fcntl.flock(handle.fileno(), fcntl.LOCK_UN)
        finally:
            handle.close()


class InProcessLockProvider:
    """Per-path ``threading.Lock``; no protection against other processes."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[Path, threading.Lock] = {}

    def _lock_for(self, path: Path) -> threading.Lock:
        key = Path(path).resolve()
        with self._guard:
            return self._locks.setdefault(key, threading.Lock())

    def try_acquire(self, path: Path) -> threading.Lock | None:
        lock = self._lock_for(path)
        return lock if lock.acquire(blocking=False) else None

    def release(self, handle: threading.Lock) -> None:
        handle.release()


@dataclass(frozen=True)
class RetryPolicy:
    """Exponential backoff between lock attempts, capped at ``max_timeout``.

    ``retries`` counts the extra attempts after the first one.
    """

    retries: int = 10
    factor: float = 2.0
    min_timeout: float = 0.1  # seconds
    max_timeout: float = 1.0

    def __post_init__(self) -> None:
        if self.retries < 0:
            raise ConfigurationError("retries must be >= 0")
        if self.min_timeout < 0 or self.max_timeout < self.min_timeout:
            raise ConfigurationError("require 0 <= min_timeout <= max_timeout")

    def delays(self) -> Iterator[float]:
        for attempt in range(self.retries):
            yield min(self.max_timeout, self.min_timeout * self.factor**attempt)


@contextmanager
def acquire(
    provider: LockProvider,
    path: Path,
    policy: RetryPolicy | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> Iterator[Any]:
    """Hold an exclusive lock on ``path`` for the duration of the block.

    Raises:
        LockError: every attempt in the retry budget found the lock held.
    """
    policy = policy or RetryPolicy()
    delays = policy.delays()
    attempts = 0

    while True:
        attempts += 1
        handle = provider.try_acquire(path)
        if handle is not None:
            break
        delay = next(delays, None)
        if delay is None:
            raise LockError(path, attempts)
        logger.debug("lock.contended", path=str(path), attempt=attempts, retry_in=delay)
        sleep(delay)

    try:
        yield handle
    finally:
        provider.release(handle)
