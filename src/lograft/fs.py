"""Filesystem capabilities shared by sinks and write strategies."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from lograft.diagnostics import get_logger
from lograft.errors import DirectoryError

logger = get_logger(__name__)


def day_bucket(moment: datetime) -> str:
    """``YYYYMMDD`` of a local wall-clock instant."""
    return moment.strftime("%Y%m%d")


def hour_bucket(moment: datetime) -> str:
    """``YYYYMMDD_HH`` (24-hour) of a local wall-clock instant."""
    return moment.strftime("%Y%m%d_%H")


def ensure_directory(path: str | Path) -> Path:
    """Create ``path`` and its parents if missing. Idempotent."""
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def ensure_file(path: str | Path) -> Path:
    """Create an empty file at ``path`` if absent. Existing content is kept."""
    path = Path(path)
    path.touch(exist_ok=True)
    return path


def ensure_is_directory(path: str | Path) -> Path:
    """Require ``path`` to be a directory, creating it when it doesn't exist.

    Raises:
        DirectoryError: ``path`` exists but is not a directory.
    """
    path = Path(path)
    if path.exists():
        if not path.is_dir():
            raise DirectoryError(path)
        return path
    ensure_directory(path)
    logger.info("sink.directory.created", path=str(path))
    return path


def append_text(path: str | Path, data: str) -> None:
    """Append ``data`` to ``path`` as UTF-8 in one write."""
    with open(path, "a", encoding="utf-8") as f:
        f.write(data)
