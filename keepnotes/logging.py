"""
Logging configuration for keepnotes.
"""
import logging
import os
import sys

ROOT = "keepnotes"


def setup_logging(level: str | None = None) -> logging.Logger:
    """
    Configure application logging.

    :param level: Level name; falls back to KEEPNOTES_LOG_LEVEL, then INFO
    :return: The package root logger
    """
    level = (level or os.getenv("KEEPNOTES_LOG_LEVEL") or "INFO").upper()
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stderr)]
    )
    root = logging.getLogger(ROOT)
    root.setLevel(level)
    return root


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger under the package root.

    :param name: Module name, e.g. "services"
    """
    return logging.getLogger(f'{ROOT}.{name}')
