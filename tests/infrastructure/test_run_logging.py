import io
import logging
import re
from datetime import datetime
from pathlib import Path

import pytest

from storeapps.infrastructure.observability import (
    LogConfig,
    RunLogFileHandler,
    configure_logging,
    get_logger,
    log_context,
)

LINE_RE = re.compile(r"^\d{2}/\d{2}/\d{4} \d{2}:\d{2}:\d{2}\|")
RUN_AT = datetime(2024, 3, 5, 14, 7, 9)


def test_log_config_inserts_timestamp_before_extension(tmp_path):
    config = LogConfig(base_path=tmp_path / "Add-AndroidApps.txt", run_timestamp=RUN_AT)
    assert config.path == tmp_path / "Add-AndroidApps_20240305-140709.txt"
    assert config.directory == tmp_path


def test_log_config_without_extension_appends_timestamp(tmp_path):
    config = LogConfig(base_path=tmp_path / "import-log", run_timestamp=RUN_AT)
    assert config.path.name == "import-log_20240305-140709"


def test_configure_logging_writes_file_and_console(tmp_path):
    console = io.StringIO()
    config = LogConfig(base_path=tmp_path / "logs" / "run.txt", run_timestamp=RUN_AT)

    path = configure_logging(config, console=console)
    assert path.exists()

    get_logger("storeapps.tests").info("Loaded module")

    lines = path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 1
    assert LINE_RE.match(lines[0])
    assert lines[0].endswith("|Loaded module")
    assert console.getvalue() == "Loaded module\n"


def test_configure_logging_twice_does_not_duplicate(tmp_path):
    console = io.StringIO()
    config = LogConfig(base_path=tmp_path / "run.txt", run_timestamp=RUN_AT)
    configure_logging(config, console=console)
    path = configure_logging(config, console=console)

    get_logger("storeapps.tests").info("once")

    assert path.read_text(encoding="utf-8").count("once") == 1
    assert console.getvalue().count("once") == 1


def test_log_context_is_appended_once_per_handler(tmp_path):
    console = io.StringIO()
    config = LogConfig(base_path=tmp_path / "run.txt", run_timestamp=RUN_AT)
    path = configure_logging(config, console=console)

    with log_context(row=2, app="App1"):
        get_logger("storeapps.tests").info("Creating")

    assert path.read_text(encoding="utf-8").rstrip().endswith("|Creating [row=2 app=App1]")
    assert console.getvalue() == "Creating [row=2 app=App1]\n"


class FlakyHandler(RunLogFileHandler):
    def __init__(self, path, failures, **kwargs):
        super().__init__(path, **kwargs)
        self.failures = failures
        self.attempts = 0

    def _write_line(self, line):
        self.attempts += 1
        if self.attempts <= self.failures:
            raise PermissionError("file is locked")
        super()._write_line(line)


def _record(message: str) -> logging.LogRecord:
    return logging.LogRecord("storeapps", logging.INFO, __file__, 1, message, None, None)


def test_handler_retries_once_after_delay(tmp_path):
    delays = []
    path = tmp_path / "run.txt"
    handler = FlakyHandler(path, failures=1, sleep=delays.append)

    handler.emit(_record("hello"))

    assert handler.attempts == 2
    assert delays == [pytest.approx(0.1)]
    assert path.read_text(encoding="utf-8") == "hello\n"


def test_handler_falls_back_to_stderr_after_bounded_attempts(tmp_path):
    fallback = io.StringIO()
    delays = []
    handler = FlakyHandler(
        tmp_path / "run.txt", failures=10, fallback=fallback, sleep=delays.append
    )

    handler.emit(_record("lost line"))

    assert handler.attempts == 2
    assert len(delays) == 1
    assert fallback.getvalue().startswith("lost line (log write to ")
    assert not Path(tmp_path / "run.txt").exists()


def test_handler_requires_at_least_one_attempt(tmp_path):
    with pytest.raises(ValueError):
        RunLogFileHandler(tmp_path / "run.txt", max_attempts=0)


def test_multiline_messages_become_one_log_line(tmp_path):
    console = io.StringIO()
    config = LogConfig(base_path=tmp_path / "run.txt", run_timestamp=RUN_AT)
    path = configure_logging(config, console=console)

    get_logger("storeapps.tests").error("record import failed: 2 errors\n  Name\n    missing")

    lines = path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 1
    assert lines[0].endswith("|record import failed: 2 errors Name missing")


def test_unusable_log_directory_is_reported_not_raised(tmp_path, capsys):
    blocker = tmp_path / "blocker"
    blocker.write_text("x", encoding="utf-8")
    config = LogConfig(base_path=blocker / "run.txt", run_timestamp=RUN_AT)

    path = configure_logging(config, console=io.StringIO())

    assert path.parent == blocker
    assert "Cannot create log file" in capsys.readouterr().err
