"""Logging configuration for the housekeeping backend."""
import logging
import sys
from pathlib import Path
from typing import Optional


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    app_name: str = "hms",
) -> logging.Logger:
    """
    Set up logging for the application.

    Module loggers (``logging.getLogger(__name__)``) propagate to the root
    logger, so handlers are attached there; ``app_name`` only names the
    logger that is returned.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional path to log file
        app_name: Name for the returned logger

    Returns:
        Configured logger
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    # Replace only handlers installed by an earlier call
    for handler in [h for h in root.handlers if getattr(h, "_hms_handler", False)]:
        root.removeHandler(handler)
        handler.close()

    # Console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_format = logging.Formatter(
        "[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    console_handler.setFormatter(console_format)
    console_handler._hms_handler = True
    root.addHandler(console_handler)

    # File handler (if specified)
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path, mode="a")
        file_format = logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d | %(message)s"
        )
        file_handler.setFormatter(file_format)
        file_handler._hms_handler = True
        root.addHandler(file_handler)

    return logging.getLogger(app_name)
