"""
Licence: MIT

Logger setup for cassandra-hostid.
"""
import logging
import sys
from pathlib import Path
from typing import Optional

LOGGER_NAME = "hostid"
LOG_FORMAT = "%(asctime)s %(levelname)s %(filename)s:%(lineno)d %(message)s"


def setup_logger(console_level: int = logging.INFO, log_file_level: int = logging.INFO, log_file: Optional[Path] = None) -> logging.Logger:
    """
    Configures the 'hostid' logger with a console handler and an optional file handler.

    The console handler writes to stderr, stdout only ever carries the fetched host ID.
    Calling this again replaces the handlers installed before.

    Args:
        console_level (int): Level of the stderr handler.
        log_file_level (int): Level of the file handler.
        log_file (Path): File to append log records to, no file logging if None.

    Returns:
        logging.Logger: The configured logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT)
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    levels = [console_level]
    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(log_file_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
        levels.append(log_file_level)

    logger.setLevel(min(levels))
    logger.propagate = False
    return logger
