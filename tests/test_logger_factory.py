from __future__ import annotations

import logging
from pathlib import Path

from budspair.core.logging_utils import ConsoleFormatter, configure_logging


def test_configure_logging_writes_to_log_file(tmp_path: Path) -> None:
    log_path = tmp_path / "cache" / "budspair.log"
    logger = configure_logging(verbose=False, log_file=log_path, color=False)

    logging.getLogger("budspair.core.scanner").info("Scanning for AirPod devices")
    logging.getLogger("budspair.core.scanner").debug("hidden without verbose")
    for handler in logger.handlers:
        handler.flush()

    text = log_path.read_text(encoding="utf-8")
    assert "[INFO] budspair.core.scanner - Scanning for AirPod devices" in text
    assert "hidden without verbose" not in text


def test_verbose_enables_debug(tmp_path: Path) -> None:
    logger = configure_logging(verbose=True, log_file=None, color=False)
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1


def test_unwritable_log_file_falls_back_to_console(tmp_path: Path) -> None:
    blocker = tmp_path / "file"
    blocker.write_text("", encoding="utf-8")

    logger = configure_logging(log_file=blocker / "budspair.log", color=False)

    assert len(logger.handlers) == 1


def test_console_format_has_level_tag() -> None:
    record = logging.LogRecord("budspair", logging.ERROR, __file__, 1, "No AirPod devices found", None, None)
    assert ConsoleFormatter(color=False).format(record) == "[ERROR] No AirPod devices found"
