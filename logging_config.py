"""
Logging setup.

Human-readable lines on stderr; level comes from LOG_LEVEL.
"""

import logging
import sys
from datetime import datetime

import config


class ReadableFormatter(logging.Formatter):
    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, use_color: bool = True):
        super().__init__()
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, "") if self.use_color else ""
        reset = self.RESET if self.use_color else ""
        ts = datetime.now().strftime("%H:%M:%S")
        base = f"{color}{ts} {record.levelname:<8}{reset} {record.name}: {record.getMessage()}"
        if record.exc_info and record.exc_info[0] is not None:
            base += "\n" + self.formatException(record.exc_info)
        return base


def configure_logging(level: str | None = None) -> None:
    """Attach a single stderr handler to the root logger (idempotent)."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, level or config.LOG_LEVEL, logging.INFO))

    for h in root.handlers:
        if getattr(h, "_mpi_handler", False):
            return

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(ReadableFormatter(use_color=sys.stderr.isatty()))
    handler._mpi_handler = True
    root.addHandler(handler)

    # SQL echo is noisy; keep it for explicit debugging only
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
