"""Logging setup for energytop."""

import logging
import os

from textual.logging import TextualHandler

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: int = logging.WARNING, log_file: str | None = None) -> logging.Logger:
    """
    Configure the ``energytop`` logger.

    Records go to the Textual devtools console, so they never draw over the
    dashboard, and optionally to ``log_file``.

    Args:
        level: Logging level.
        log_file: Path of a log file to append to.

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger("energytop")
    logger.setLevel(level)

    # Avoid adding handlers multiple times
    if logger.handlers:
        return logger

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    textual_handler = TextualHandler()
    textual_handler.setFormatter(formatter)
    logger.addHandler(textual_handler)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
        logger.info("Logging to file: %s", log_file)

    return logger
