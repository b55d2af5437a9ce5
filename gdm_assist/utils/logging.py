"""
Structured Logging Configuration

Consistent log output for the engine, the report exporter and the API.
Assessment context passed through `extra=` (guideline, report id, ...)
is appended to the line as key=value pairs.
"""
import logging
import sys
from typing import Optional
from datetime import datetime, timezone

# Record attributes rendered after the message when present
CONTEXT_FIELDS = ("guideline", "diagnostic", "score", "report_id", "path")


class StructuredFormatter(logging.Formatter):
    """Single-line formatter: UTC timestamp, level, logger name, message, context."""

    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
    }
    RESET = '\033[0m'

    def __init__(self, use_color: bool = True):
        super().__init__()
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, timezone.utc).isoformat()
        context = " ".join(
            f"{name}={getattr(record, name)}"
            for name in CONTEXT_FIELDS
            if getattr(record, name, None) is not None
        )

        line = f"[{timestamp}] {record.levelname:8} [{record.name}] {record.getMessage()}"
        if context:
            line += f" | {context}"
        if self.use_color and record.levelname in self.COLORS:
            line = f"{self.COLORS[record.levelname]}{line}{self.RESET}"

        if record.exc_info:
            line += f"\n{self.formatException(record.exc_info)}"
        return line


def setup_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """
    Configure application-wide logging.

    Args:
        level: Logging level name; defaults to config.LOG_LEVEL
        log_file: Extra plain-text log file; defaults to config.LOG_FILE
    """
    from gdm_assist import config

    level = level or config.LOG_LEVEL
    log_file = log_file or config.LOG_FILE or None

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        # release the log file of a previous call
        if isinstance(handler.formatter, StructuredFormatter):
            handler.close()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(StructuredFormatter(use_color=sys.stdout.isatty()))
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(StructuredFormatter(use_color=False))
        root_logger.addHandler(file_handler)

    # reportlab reports every font lookup at DEBUG
    logging.getLogger("reportlab").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: Module name (typically __name__)
    """
    return logging.getLogger(name)
