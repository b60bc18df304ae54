"""Logging setup for the localip-pub service."""
from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "INFO", to_stdout: bool = True) -> logging.Logger:
    """Configure the root logger once and return it.

    Args:
        level: Name of the log level, e.g. ``"DEBUG"``.
        to_stdout: When False no console handler is attached, silencing output.

    Returns:
        The configured root logger.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level.upper())

    if to_stdout and not any(
        isinstance(handler, logging.StreamHandler) for handler in root_logger.handlers
    ):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        root_logger.addHandler(console_handler)

    # Keep third-party chatter out of the service log
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    return root_logger
