from __future__ import annotations

import logging
import sys

"""Console logging for the roster import CLI.

Every line starts with a label (INFO|WARN|ERROR|SUMMARY) so CI jobs can grep
the output; the final run line is `SUMMARY files=... rows=...`. Module loggers
(`logging.getLogger(__name__)`) sit under the `roster_import` logger and use
its handler.
"""

__all__ = [
    "APP_LOGGER_NAME",
    "SUMMARY_LEVEL",
    "LabeledFormatter",
    "setup_logging",
    "get_logger",
    "log_summary",
    "reset_logging",
]

APP_LOGGER_NAME = "roster_import"

# between INFO (20) and WARNING (30)
SUMMARY_LEVEL = 25

_CONSOLE_HANDLER_NAME = "roster_import.console"


class LabeledFormatter(logging.Formatter):
    """`<LABEL> <message>`, traceback appended on the following lines."""

    LEVEL_LABELS = {
        logging.DEBUG: "DEBUG",
        logging.INFO: "INFO",
        SUMMARY_LEVEL: "SUMMARY",
        logging.WARNING: "WARN",
        logging.ERROR: "ERROR",
        logging.CRITICAL: "CRITICAL",
    }

    def format(self, record: logging.LogRecord) -> str:
        label = self.LEVEL_LABELS.get(record.levelno, record.levelname)
        lines = [f"{label} {record.getMessage()}"]
        if record.exc_info:
            lines.append(self.formatException(record.exc_info))
        return "\n".join(lines)


def _console_handler(logger: logging.Logger) -> logging.Handler | None:
    for h in logger.handlers:
        if h.get_name() == _CONSOLE_HANDLER_NAME:
            return h
    return None


def setup_logging(debug: bool = False) -> logging.Logger:
    """Attach the labeled stdout handler to the application logger.

    Calling it again keeps the existing handler; `debug=True` only lowers
    the level to DEBUG.
    """
    logger = logging.getLogger(APP_LOGGER_NAME)
    level = logging.DEBUG if debug else logging.INFO

    handler = _console_handler(logger)
    if handler is None:
        logging.addLevelName(SUMMARY_LEVEL, "SUMMARY")
        handler = logging.StreamHandler(sys.stdout)
        handler.set_name(_CONSOLE_HANDLER_NAME)
        handler.setFormatter(LabeledFormatter())
        logger.addHandler(handler)
        logger.propagate = False
    elif not debug:
        return logger

    logger.setLevel(level)
    handler.setLevel(level)
    return logger


def get_logger() -> logging.Logger:
    logger = logging.getLogger(APP_LOGGER_NAME)
    if _console_handler(logger) is None:
        return setup_logging()
    return logger


def log_summary(message: str) -> None:
    get_logger().log(SUMMARY_LEVEL, message)


def reset_logging() -> None:
    """Detach the console handler (tests rebind stdout between runs)."""
    logger = logging.getLogger(APP_LOGGER_NAME)
    handler = _console_handler(logger)
    if handler is not None:
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
