"""Diagnostics channel: lograft's own error and lifecycle reporting.

Library modules log through ``get_logger(__name__)`` with structlog's
``logger.error("batch.flush.failed", dropped=3)`` call style. Events are
handed to the stdlib ``lograft`` logger as ordinary records (keyword context
rides along as ``extra``), so they propagate to whatever handlers the host
application already has.

setup_diagnostics() adds one handler of lograft's own to the ``lograft``
logger, rendering records through a structlog ProcessorFormatter:

    LOGRAFT_DIAG_DESTINATION=stderr   (default) | stdout | /path/to/file.log
    LOGRAFT_DIAG_FORMAT=json          (default) | console
    LOGRAFT_DIAG_LEVEL=WARNING

structlog's global configuration is never touched.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Any

import structlog

from lograft.errors import ConfigurationError

if TYPE_CHECKING:
    from lograft.config import DiagnosticsConfig

ROOT_LOGGER_NAME = "lograft"

# Bound-logger side: drop disabled levels early, then turn the event dict
# into logging.Logger.<level>(msg, extra=..., exc_info=...) kwargs.
_PROCESSORS: list[Any] = [
    structlog.stdlib.filter_by_level,
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.render_to_log_kwargs,
]

_active_handler: logging.Handler | None = None


def _renderer(fmt: str) -> Any:
    if fmt == "json":
        return structlog.processors.JSONRenderer()
    if fmt == "console":
        return structlog.dev.ConsoleRenderer(colors=False)
    raise ConfigurationError(
        f"Unknown diagnostics format: {fmt!r}. Available: ['json', 'console']."
    )


def _handler(destination: str) -> logging.Handler:
    if destination == "stderr":
        return logging.StreamHandler(sys.stderr)
    if destination == "stdout":
        return logging.StreamHandler(sys.stdout)
    if not destination:
        raise ConfigurationError("Diagnostics destination must not be empty")
    return logging.FileHandler(destination, encoding="utf-8", delay=True)


def setup_diagnostics(config: DiagnosticsConfig) -> None:
    """Attach a structlog-rendered handler to the ``lograft`` logger.

    Replaces any handler from an earlier call. The root logger is left alone.
    """
    global _active_handler

    level = logging.getLevelName(config.level.upper())
    if not isinstance(level, int):
        raise ConfigurationError(f"Unknown diagnostics level: {config.level!r}")
    renderer = _renderer(config.format)

    shutdown_diagnostics()

    handler = _handler(config.destination)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=[
                structlog.stdlib.add_log_level,
                structlog.stdlib.add_logger_name,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.stdlib.ExtraAdder(),
            ],
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.processors.format_exc_info,
                renderer,
            ],
        )
    )

    lib_logger = logging.getLogger(ROOT_LOGGER_NAME)
    lib_logger.addHandler(handler)
    lib_logger.setLevel(level)
    _active_handler = handler


def get_logger(name: str = ROOT_LOGGER_NAME, **initial_values: Any) -> Any:
    """Structlog bound logger over the stdlib logger ``name``.

    Handlers are looked up per record, so loggers created at import time
    follow a later setup_diagnostics().
    """
    return structlog.wrap_logger(
        logging.getLogger(name),
        processors=_PROCESSORS,
        wrapper_class=structlog.stdlib.BoundLogger,
        **initial_values,
    )


def shutdown_diagnostics() -> None:
    """Detach and close the handler installed by setup_diagnostics()."""
    global _active_handler

    if _active_handler is not None:
        lib_logger = logging.getLogger(ROOT_LOGGER_NAME)
        lib_logger.removeHandler(_active_handler)
        lib_logger.setLevel(logging.NOTSET)
        _active_handler.close()
    _active_handler = None
