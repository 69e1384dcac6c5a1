"""Console and rotating-file logging for the `budspair` logger tree."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

import typer

ROOT_LOGGER = "budspair"


class ConsoleFormatter(logging.Formatter):
    """`[LEVEL] message` with the level tag colored per severity."""

    COLORS = {
        logging.DEBUG: typer.colors.BLUE,
        logging.INFO: typer.colors.YELLOW,
        logging.WARNING: typer.colors.MAGENTA,
        logging.ERROR: typer.colors.RED,
        logging.CRITICAL: typer.colors.BRIGHT_RED,
    }

    def __init__(self, *, color: bool = True) -> None:
        super().__init__("%(message)s")
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        tag = f"[{record.levelname}]"
        if self.color:
            tag = typer.style(tag, fg=self.COLORS.get(record.levelno), bold=record.levelno >= logging.ERROR)
        return f"{tag} {super().format(record)}"


def configure_logging(
    *,
    verbose: bool = False,
    log_file: Path | None = None,
    color: bool = True,
) -> logging.Logger:
    """Attach console and file handlers to the package logger.

    Calling it again replaces the previous handlers.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    level = logging.DEBUG if verbose else logging.INFO
    logger.setLevel(level)
    logger.propagate = False

    console = logging.StreamHandler()
    console.setFormatter(ConsoleFormatter(color=color))
    logger.addHandler(console)

    if log_file is not None:
        log_path = Path(log_file)
        try:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(log_path, maxBytes=1_000_000, backupCount=3, encoding="utf-8")
        except OSError as exc:
            logger.warning("Logging to console only, cannot open %s: %s", log_path, exc)
        else:
            file_handler.setFormatter(
                logging.Formatter("%(asctime)s [%(levelname)s] %(name)s - %(message)s")
            )
            logger.addHandler(file_handler)

    return logger
