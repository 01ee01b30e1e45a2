"""
Logging configuration for feedwatch.

Console output goes through Rich when it is installed, plain text otherwise.
File output uses a parseable one-line format.
"""

import logging
import sys
import threading
from pathlib import Path
from typing import Any

try:
    import importlib.util

    RICH_AVAILABLE = importlib.util.find_spec("rich.logging") is not None
except Exception:
    RICH_AVAILABLE = False


class FileFormatter(logging.Formatter):
    """Formatter for file logs - clean and parseable."""

    def __init__(self) -> None:
        super().__init__(fmt="%(asctime)s [%(levelname)-8s] %(name)s: %(message)s", datefmt="%Y-%m-%d %H:%M:%S")


class ConsoleFormatter(logging.Formatter):
    """``LEVEL: time - msg``; errors also carry ``file:line``."""

    def __init__(self) -> None:
        super().__init__(datefmt="%Y-%m-%d %H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        base = f"{record.levelname}: {self.formatTime(record)} - {record.getMessage()}"
        if record.levelno >= logging.ERROR and record.pathname:
            base = f"{record.levelname}: {self.formatTime(record)} - {Path(record.pathname).name}:{record.lineno} - {record.getMessage()}"
        return base


LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def _parse_level(level: str | int) -> int:
    """Parse a logging level from a name or int, defaulting to INFO."""
    if isinstance(level, int):
        return level
    if isinstance(level, str) and level.upper() in LEVEL_MAP:
        return LEVEL_MAP[level.upper()]
    return logging.INFO


def setup_logging(
    level: str | int = logging.INFO,
    log_file: str | Path | None = None,
    format_string: str | None = None,
    file_mode: str = "a",
    console_enabled: bool = True,
    use_rich: bool = True,
) -> logging.Logger:
    """
    Setup logging for feedwatch.

    Args:
        level: Logging level as string (DEBUG, INFO, etc.) or int
        log_file: Optional file path to also write logs to
        format_string: Optional custom console format string
        file_mode: 'a' to append, 'w' to overwrite the log file
        console_enabled: Whether to log to the console at all
        use_rich: Use RichHandler for console output when rich is installed

    Returns:
        The ``feedwatch`` logger
    """
    global _logging_setup_done

    logger = logging.getLogger("feedwatch")
    logger.handlers.clear()

    level_int = _parse_level(level)
    logger.setLevel(level_int)

    if console_enabled:
        if use_rich and RICH_AVAILABLE and format_string is None:
            from rich.logging import RichHandler

            logger.addHandler(
                RichHandler(
                    level=level_int,
                    show_time=True,
                    show_path=True,
                    rich_tracebacks=True,
                    log_time_format="[%X]",
                    omit_repeated_times=False,
                )
            )
        else:
            formatter: logging.Formatter = (
                logging.Formatter(format_string) if format_string else ConsoleFormatter()
            )
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(level_int)
            console_handler.setFormatter(formatter)
            logger.addHandler(console_handler)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode=file_mode)
        # File captures everything the logger lets through
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(FileFormatter())
        logger.addHandler(file_handler)

    _logging_setup_done = True
    return logger


def setup_logging_from_config(config: dict[str, Any], project_dir: Path | None = None) -> logging.Logger:
    """
    Setup logging from the ``logging`` section of a feedwatch config.

    Config shape::

        logging:
          level: INFO
          file: logs/feedwatch.log   # relative to project dir
          file_enabled: true
          console_type: rich         # or "plain"
    """
    logging_config = config.get("logging") or {}

    level = logging_config.get("level", logging.INFO)
    log_file = None
    if logging_config.get("file_enabled", True):
        log_file = logging_config.get("file") or "logs/feedwatch.log"
        if project_dir and not Path(log_file).is_absolute():
            log_file = Path(project_dir) / log_file

    return setup_logging(
        level=level,
        log_file=log_file,
        format_string=logging_config.get("format"),
        file_mode=logging_config.get("file_mode", "a"),
        console_enabled=logging_config.get("console_enabled", True),
        use_rich=logging_config.get("console_type", "rich") == "rich",
    )


_logging_setup_done = False
_logging_setup_lock = threading.Lock()


def _auto_setup_logging() -> None:
    """Install a plain console handler once if nobody configured logging yet."""
    global _logging_setup_done

    if _logging_setup_done:
        return
    with _logging_setup_lock:
        if _logging_setup_done:
            return
        if not logging.getLogger("feedwatch").handlers:
            setup_logging(use_rich=False)
        _logging_setup_done = True


def get_logger(name: str = "feedwatch") -> logging.Logger:
    """
    Get a logger under the ``feedwatch`` namespace.

    Logging is set up with defaults on first use when the application has not
    called ``setup_logging`` itself.
    """
    _auto_setup_logging()
    logger = logging.getLogger(name)
    logger.propagate = True
    return logger
