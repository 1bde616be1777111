"""
logging_setup.py

Configure the root logger for the barometer service with a rotating log file
and a console handler.
"""

import logging
import os
from logging.handlers import RotatingFileHandler

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
MAX_BYTES = 1_000_000
BACKUP_COUNT = 5


def setup_logging(
    log_dir: str = "log",
    log_file_name: str = "barometer_service.log",
    log_level: str = "INFO",
) -> logging.Logger:
    """
    Configure and return the root logger.

    Creates log_dir if needed and attaches a RotatingFileHandler and a
    StreamHandler. Calling this again for the same log file only updates the
    level; handlers installed by other code do not count as a prior setup.

    Args:
        log_dir: Directory the log file is written to.
        log_file_name: Name of the log file inside log_dir.
        log_level: Logging level name, e.g. "DEBUG" or "INFO".

    Returns:
        logging.Logger: The configured root logger.
    """
    os.makedirs(log_dir, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(getattr(logging, str(log_level).upper(), logging.INFO))

    log_path = os.path.abspath(os.path.join(log_dir, log_file_name))
    for handler in root.handlers:
        if isinstance(handler, RotatingFileHandler) and handler.baseFilename == log_path:
            return root

    formatter = logging.Formatter(LOG_FORMAT)

    file_handler = RotatingFileHandler(
        log_path,
        maxBytes=MAX_BYTES,
        backupCount=BACKUP_COUNT,
    )
    file_handler.setFormatter(formatter)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)

    root.addHandler(file_handler)
    root.addHandler(console_handler)

    return root
