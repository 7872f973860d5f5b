"""
Logging setup.

Every module gets its logger through ``get_logger(__name__)``. Records go to
the console and, when ``LOG_FILE`` is configured, to a rotating log file.
"""

import logging
import logging.handlers

from app.config import LOG_DATE_FORMAT, LOG_FILE, LOG_FORMAT, LOG_LEVEL


def get_logger(name: str) -> logging.Logger:
    """
    Return a configured logger for the given module name.

    A logger that already has handlers is returned as is, so calling this at
    import time in many modules never duplicates output.

    Args:
        name (str): Module name, usually ``__name__``.

    Returns:
        logging.Logger: Logger writing to console and optional file.
    """
    logger = logging.getLogger(name)
    logger.propagate = False

    if logger.handlers:
        return logger

    logger.setLevel(LOG_LEVEL)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if LOG_FILE:
        file_handler = logging.handlers.RotatingFileHandler(
            filename=LOG_FILE,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
