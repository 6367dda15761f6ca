import logging
import sys
from typing import Optional

from staffquiz.config import settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def get_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """
    Returns a logger writing to stdout with the project format.

    Parameters:
        name (str): Logger name, usually the module's __name__.
        level (str, optional): Log level name. Defaults to settings.LOG_LEVEL.

    Returns:
        logging.Logger: The configured logger.
    """
    logger = logging.getLogger(name)
    logger.setLevel((level or settings.LOG_LEVEL).upper())
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False
    return logger
