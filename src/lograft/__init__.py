"""lograft: leveled events, fanned out to independently configured sinks.

Public API:
    Logger: the dispatcher, a minimum level plus named sinks
    ConsoleSink, FileSink: destinations
    PlainFormatter, JsonFormatter, XmlFormatter
    HourlyXmlStrategy, DailyJsonStrategy, BatchedJsonStrategy
    build_logger(config): compose everything from YAML/env config

Quick start:
    from lograft import Logger, ConsoleSink, FileSink, JsonFormatter, DailyJsonStrategy

    log = Logger("information")
    log.add_sink("console", ConsoleSink("verbose"))
    log.add_sink("file", FileSink("warning", "./logs", DailyJsonStrategy(), JsonFormatter()))
    log.warning("disk almost full", {"free_mb": 120})
"""

from lograft.config import DiagnosticsConfig, LoggerConfig, SinkConfig, build_logger
from lograft.errors import ConfigurationError, DirectoryError, LockError, LograftError
from lograft.events import ErrorDetail, LogEvent, StructuredDetail
from lograft.formatters import (
    Formatter,
    JsonFormatter,
    PlainFormatter,
    XmlFormatter,
    get_formatter,
    register_formatter,
)
from lograft.levels import Severity, meets_threshold
from lograft.locking import FileLockProvider, InProcessLockProvider, LockProvider, RetryPolicy
from lograft.logger import Logger
from lograft.sinks import ConsoleSink, FileSink, Sink
from lograft.strategies import (
    BatchedJsonStrategy,
    DailyJsonStrategy,
    FlushResult,
    FlushState,
    HourlyXmlStrategy,
    WriteStrategy,
    get_strategy,
    register_strategy,
)

__all__ = [
    # Dispatcher
    "Logger",
    "Severity",
    "meets_threshold",
    # Events
    "LogEvent",
    "StructuredDetail",
    "ErrorDetail",
    # Sinks
    "Sink",
    "ConsoleSink",
    "FileSink",
    # Formatters
    "Formatter",
    "PlainFormatter",
    "JsonFormatter",
    "XmlFormatter",
    "get_formatter",
    "register_formatter",
    # Write strategies
    "WriteStrategy",
    "HourlyXmlStrategy",
    "DailyJsonStrategy",
    "BatchedJsonStrategy",
    "FlushResult",
    "FlushState",
    "get_strategy",
    "register_strategy",
    # Locking
    "LockProvider",
    "FileLockProvider",
    "InProcessLockProvider",
    "RetryPolicy",
    # Config
    "LoggerConfig",
    "SinkConfig",
    "DiagnosticsConfig",
    "build_logger",
    # Errors
    "LograftError",
    "ConfigurationError",
    "DirectoryError",
    "LockError",
]
