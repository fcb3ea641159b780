"""
Logging configuration for the podstats package.

Console output goes through rich so log lines interleave cleanly with the
CLI's tables; an optional plain-text file handler keeps a durable record of
ingestion warnings.
"""

import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler


LOGGER_NAME = "podstats"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logger(
    name: str = LOGGER_NAME,
    level: str = "WARNING",
    log_file: Optional[Path] = None,
    console_output: bool = True,
) -> logging.Logger:
    """
    Set up a logger with a rich console handler and/or a file handler.

    Console logs are written to stderr so that command output on stdout
    stays machine-readable (e.g. ``podstats export --format json``).

    Args:
        name: Logger name (default: "podstats")
        level: Logging level as string ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
        log_file: Optional path to a log file; parent directories are created
        console_output: Whether to log to the console (default: True)

    Returns:
        Configured logger instance

    Example:
        >>> logger = setup_logger("podstats", level="DEBUG", log_file=Path("podstats.log"))
        >>> logger.info("Parsing started")
    """
    logger = logging.getLogger(name)

    # Reconfiguring must not stack handlers
    logger.handlers.clear()

    log_level = getattr(logging, level.upper(), logging.WARNING)
    logger.setLevel(log_level)

    if console_output:
        console_handler = RichHandler(
            console=Console(stderr=True),
            show_path=False,
            rich_tracebacks=False,
        )
        console_handler.setLevel(log_level)
        console_handler.setFormatter(logging.Formatter("%(message)s", datefmt=LOG_DATE_FORMAT))
        logger.addHandler(console_handler)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setLevel(log_level)
        file_handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
        logger.addHandler(file_handler)

    logger.propagate = False

    return logger


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    """Return a named logger (child loggers inherit the podstats handlers)."""
    return logging.getLogger(name)


_default_logger: Optional[logging.Logger] = None


def get_default_logger() -> logging.Logger:
    """
    Get or create the default podstats logger.

    Returns:
        Default logger instance with WARNING level and console output
    """
    global _default_logger
    if _default_logger is None:
        _default_logger = setup_logger()
    return _default_logger


def configure_logging(
    level: str = "WARNING",
    log_file: Optional[Path] = None,
    console_output: bool = True,
) -> None:
    """
    Configure the default podstats logger.

    Args:
        level: Logging level as string
        log_file: Optional path to log file
        console_output: Whether to output logs to console (default: True)

    Example:
        >>> configure_logging(level="DEBUG", log_file=Path("podstats.log"))
    """
    global _default_logger
    _default_logger = setup_logger(
        name=LOGGER_NAME,
        level=level,
        log_file=log_file,
        console_output=console_output,
    )
