"""Logging configuration for wslreclaim."""

import logging
import os
from typing import Optional

logger = logging.getLogger("wslreclaim")

LOG_LEVEL_ENV = "WSLRECLAIM_LOG_LEVEL"


def setup_logging(level: str = "WARNING", log_file: Optional[str] = None) -> None:
    """
    Configure logging system.

    Args:
        level: Level name (DEBUG, INFO, WARNING, ...). The WSLRECLAIM_LOG_LEVEL
            environment variable takes precedence when set.
        log_file: Optional path to log file. If None, only console logging.
    """
    level_name = os.environ.get(LOG_LEVEL_ENV, level).upper()
    numeric = logging.getLevelName(level_name)
    if not isinstance(numeric, int):
        numeric = logging.WARNING

    handlers: list[logging.Handler] = []

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
    handlers.append(console_handler)

    file_error = None
    if log_file:
        try:
            file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
            file_handler.setFormatter(
                logging.Formatter("%(asctime)s - [%(levelname)s] - %(name)s - %(message)s")
            )
            handlers.append(file_handler)
        except OSError as e:
            file_error = e

    logging.basicConfig(level=numeric, handlers=handlers, force=True)
    logger.setLevel(numeric)

    if file_error is not None:
        logger.warning(f"Failed to create log file {log_file}: {file_error}")
    elif log_file:
        logger.info(f"Logging to file: {log_file}")
