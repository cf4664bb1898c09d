"""
logging_config.py - Handlers for the 'heatflow' logger tree

Library modules only create loggers (logging.getLogger(__name__)), so a
simulation embedded in another application stays silent. Scripts such as
main.py call setup_logging() once:

    console (stdout)  -> at the requested level
    log file          -> optional, always at file_level (full step detail)
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union

PACKAGE_LOGGER = "heatflow"
CONSOLE_FORMAT = '%(asctime)s %(levelname)-7s %(name)s: %(message)s'
FILE_FORMAT = '%(asctime)s %(levelname)-7s %(name)s [%(funcName)s:%(lineno)d] %(message)s'
DATE_FORMAT = '%H:%M:%S'


def setup_logging(level: int = logging.INFO,
                  log_file: Optional[Union[str, Path]] = None,
                  file_level: int = logging.DEBUG) -> logging.Logger:
    """
    Attaches console and file handlers to the package logger.

    Calling it again replaces the previous handlers.

    Args:
        level: Console level (logging.INFO, logging.DEBUG, ...)
        log_file: Optional log file, overwritten on each run
        file_level: Level of the log file

    Returns:
        The 'heatflow' logger
    """
    logger = logging.getLogger(PACKAGE_LOGGER)

    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(console)

    effective = level
    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(file_level)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(file_handler)
        effective = min(level, file_level)

    logger.setLevel(effective)
    logger.debug("Logging to console (%s)%s", logging.getLevelName(level),
                 f" and {log_file}" if log_file is not None else "")
    return logger
