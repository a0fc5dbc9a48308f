"""Tests for the diagnostics channel: structlog events over the lograft logger."""

from __future__ import annotations

import json
import logging

import pytest

from lograft.config import DiagnosticsConfig
from lograft.diagnostics import (
    ROOT_LOGGER_NAME,
    get_logger,
    setup_diagnostics,
    shutdown_diagnostics,
)
from lograft.errors import ConfigurationError


def _cfg(**kwargs):
    base = {"destination": "stderr", "level": "DEBUG", "format": "json"}
    base.update(kwargs)
    return DiagnosticsConfig(**base)


def _last_json_line(text: str) -> dict:
    lines = [line for line in text.splitlines() if line.strip()]
    return json.loads(lines[-1])


class TestBeforeSetup:
    def test_events_propagate_as_stdlib_records(self, caplog):
        with caplog.at_level(logging.WARNING, logger=ROOT_LOGGER_NAME):
            get_logger("lograft.test").warning("thing.happened", answer=42)

        [record] = caplog.records
        assert record.getMessage() == "thing.happened"
        assert record.answer == 42
        assert record.name == "lograft.test"

    def test_disabled_level_dropped(self, caplog):
        with caplog.at_level(logging.ERROR, logger=ROOT_LOGGER_NAME):
            get_logger("lograft.test").info("too.quiet")
        assert caplog.records == []


class TestChannel:
    def test_json_output(self, capsys):
        setup_diagnostics(_cfg())
        get_logger("lograft.test").error("batch.flush.failed", dropped=3)

        record = _last_json_line(capsys.readouterr().err)
        assert record["event"] == "batch.flush.failed"
        assert record["dropped"] == 3
        assert record["level"] == "error"
        assert record["logger"] == "lograft.test"
        assert "timestamp" in record

    def test_console_output(self, capsys):
        setup_diagnostics(_cfg(format="console"))
        get_logger("lograft.test").warning("lock.contended", attempt=2)

        err = capsys.readouterr().err
        assert "lock.contended" in err
        assert "attempt=2" in err

    def test_exception_rendered(self, capsys):
        setup_diagnostics(_cfg())
        try:
            raise OSError("disk gone")
        except OSError:
            get_logger("lograft.test").exception("strategy.append.failed")

        record = _last_json_line(capsys.readouterr().err)
        assert "OSError: disk gone" in record["exception"]

    def test_stdout_destination(self, capsys):
        setup_diagnostics(_cfg(destination="stdout"))
        get_logger("lograft.test").warning("to.stdout")
        assert _last_json_line(capsys.readouterr().out)["event"] == "to.stdout"

    def test_file_destination(self, tmp_path):
        path = tmp_path / "diag.log"
        setup_diagnostics(_cfg(destination=str(path)))
        get_logger("lograft.test").warning("to.file", n=1)
        shutdown_diagnostics()

        assert _last_json_line(path.read_text(encoding="utf-8"))["n"] == 1

    def test_level_filters(self, capsys):
        setup_diagnostics(_cfg(level="ERROR"))
        get_logger("lograft.test").info("too.quiet")
        assert "too.quiet" not in capsys.readouterr().err

    def test_module_logger_follows_later_setup(self, capsys):
        lg = get_logger("lograft.early")
        setup_diagnostics(_cfg())
        lg.warning("late.bound")
        assert _last_json_line(capsys.readouterr().err)["event"] == "late.bound"

    def test_setup_attaches_single_handler(self):
        lib_logger = logging.getLogger(ROOT_LOGGER_NAME)
        before = len(lib_logger.handlers)
        setup_diagnostics(_cfg())
        setup_diagnostics(_cfg())
        assert len(lib_logger.handlers) == before + 1
        shutdown_diagnostics()
        assert len(lib_logger.handlers) == before
        assert lib_logger.level == logging.NOTSET

    def test_root_logger_untouched(self):
        root = logging.getLogger()
        before = list(root.handlers)
        setup_diagnostics(_cfg())
        assert root.handlers == before

    def test_structlog_global_config_untouched(self):
        import structlog

        before = structlog.get_config()["processors"]
        setup_diagnostics(_cfg())
        get_logger("lograft.test").warning("quiet")
        assert structlog.get_config()["processors"] == before

    @pytest.mark.parametrize(
        "kwargs,match",
        [
            ({"format": "logfmt"}, "format"),
            ({"destination": ""}, "destination"),
            ({"level": "LOUD"}, "level"),
        ],
    )
    def test_invalid_config_raises(self, kwargs, match):
        with pytest.raises(ConfigurationError, match=match):
            setup_diagnostics(_cfg(**kwargs))
