"""Logger configuration: YAML file + env var overrides.

Priority: env var > YAML file > default.
YAML file default: $LOGRAFT_CONFIG, else ./lograft.yaml when present.

Example:

    level: information
    sinks:
      console:
        type: console
        level: verbose
        format: plain
      audit:
        type: file
        level: warning
        path: ./logs
        format: json
        strategy: batched
        capacity: 100
        lock: file
    diagnostics:
      level: WARNING
      format: json
"""

from __future__ import annotations

import os
from collections.abc import Callable
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from lograft.errors import ConfigurationError
from lograft.formatters import get_formatter
from lograft.levels import Severity
from lograft.locking import FileLockProvider, InProcessLockProvider, LockProvider, RetryPolicy
from lograft.logger import Logger
from lograft.sinks import ConsoleSink, FileSink, Sink
from lograft.strategies import get_strategy

_DEFAULT_PATH = Path("lograft.yaml")

# Every memory-locked sink in the process shares one mutex table, so sinks
# pointed at the same file exclude each other. File locks need no sharing.
_PROCESS_LOCKS = InProcessLockProvider()

_LOCK_PROVIDERS: dict[str, Callable[[], LockProvider]] = {
    "file": FileLockProvider,
    "memory": lambda: _PROCESS_LOCKS,
}


@dataclass
class DiagnosticsConfig:
    """Settings for lograft's own diagnostics channel, env-var driven."""

    destination: str = field(
        default_factory=lambda: os.environ.get("LOGRAFT_DIAG_DESTINATION", "stderr")
    )  # "stderr" | "stdout" | file path

    level: str = field(
        default_factory=lambda: os.environ.get("LOGRAFT_DIAG_LEVEL", "WARNING")
    )

    format: str = field(
        default_factory=lambda: os.environ.get("LOGRAFT_DIAG_FORMAT", "json")
    )  # "json" | "console"


@dataclass
class SinkConfig:
    type: str = "console"  # "console" | "file"
    level: str = "verbose"
    format: str = "plain"  # "plain" | "json" | "xml"
    # File sinks only
    path: str | None = None
    strategy: str = "daily"  # "hourly" | "daily" | "batched"
    capacity: int = 100
    lock: str = "file"  # "file" | "memory"
    lock_retries: int = 10

    @classmethod
    def from_dict(cls, name: str, raw: Any) -> SinkConfig:
        if not isinstance(raw, dict):
            raise ConfigurationError(f"Sink {name!r} must be a mapping, got {type(raw).__name__}")
        known = {f.name for f in fields(cls)}
        unknown = set(raw) - known
        if unknown:
            raise ConfigurationError(f"Sink {name!r} has unknown keys: {sorted(unknown)}")
        return cls(**raw)


@dataclass
class LoggerConfig:
    level: str = "information"
    sinks: dict[str, SinkConfig] = field(default_factory=dict)
    diagnostics: DiagnosticsConfig = field(default_factory=DiagnosticsConfig)

    @classmethod
    def load(cls, path: Path | None = None) -> LoggerConfig:
        """Load from a YAML file, then override with env vars."""
        env_path = os.environ.get("LOGRAFT_CONFIG")
        file_path = path or (Path(env_path) if env_path else _DEFAULT_PATH)

        raw: dict[str, Any] = {}
        if file_path.exists():
            loaded = yaml.safe_load(file_path.read_text(encoding="utf-8")) or {}
            if not isinstance(loaded, dict):
                raise ConfigurationError(f"{file_path} must contain a mapping")
            raw = loaded
        elif path is not None or env_path:
            raise ConfigurationError(f"Config file not found: {file_path}")

        sinks = {
            name: SinkConfig.from_dict(name, sink)
            for name, sink in (raw.get("sinks") or {}).items()
        }

        diagnostics = DiagnosticsConfig()
        for key, value in (raw.get("diagnostics") or {}).items():
            env_key = f"LOGRAFT_DIAG_{key.upper()}"
            if not hasattr(diagnostics, key):
                raise ConfigurationError(f"Unknown diagnostics key: {key!r}")
            if env_key not in os.environ:
                setattr(diagnostics, key, str(value))

        level = os.environ.get("LOGRAFT_LEVEL", raw.get("level", cls.level))
        return cls(level=str(level), sinks=sinks, diagnostics=diagnostics)


def _build_sink(name: str, cfg: SinkConfig) -> Sink:
    formatter = get_formatter(cfg.format)

    if cfg.type == "console":
        return ConsoleSink(cfg.level, formatter)

    if cfg.type == "file":
        if not cfg.path:
            raise ConfigurationError(f"File sink {name!r} requires a path")
        options: dict[str, Any] = {}
        if cfg.strategy == "batched":
            provider_factory = _LOCK_PROVIDERS.get(cfg.lock)
            if provider_factory is None:
                raise ConfigurationError(
                    f"Unknown lock provider: {cfg.lock!r}. Available: {list(_LOCK_PROVIDERS)}"
                )
            options = {
                "capacity": cfg.capacity,
                "lock_provider": provider_factory(),
                "retry": RetryPolicy(retries=cfg.lock_retries),
            }
        return FileSink(cfg.level, cfg.path, get_strategy(cfg.strategy, **options), formatter)

    raise ConfigurationError(f"Unknown sink type for {name!r}: {cfg.type!r}")


def build_logger(config: LoggerConfig | None = None) -> Logger:
    """Compose a Logger and its sinks from config.

    Without any configured sink a single plain console sink named
    ``console`` is attached.
    """
    cfg = config or LoggerConfig.load()

    from lograft.diagnostics import setup_diagnostics

    setup_diagnostics(cfg.diagnostics)

    logger = Logger(Severity.parse(cfg.level))
    sink_configs = cfg.sinks or {"console": SinkConfig()}
    for name, sink_cfg in sink_configs.items():
        logger.add_sink(name, _build_sink(name, sink_cfg))
    return logger
