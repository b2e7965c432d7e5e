"""
Logging configuration for the detection job and the CLI.

Console output plus a size-rotated file per logger under config.logs_dir.
The detection job fans children out over worker threads, so the thread
name is part of every line.
"""

import logging
import logging.handlers
from typing import Optional

from .config import config

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(threadName)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    logger_name: str = "aac_insights",
    level: Optional[str] = None,
    log_to_file: bool = True,
) -> logging.Logger:
    """
    Configure and return a logger instance.

    Module loggers created with logging.getLogger(__name__) inside the
    package propagate to this one, so calling it once at startup is enough.

    Args:
        logger_name: Name of the logger (typically the package name)
        level: Overrides config.log_level
        log_to_file: Also write to <logs_dir>/<logger_name>.log

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(logger_name)
    level = (level or config.log_level).upper()
    logger.setLevel(level)

    # Only the level changes on repeat calls
    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(level)
        return logger

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_to_file:
        file_handler = logging.handlers.RotatingFileHandler(
            config.logs_dir / f"{logger_name}.log",
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    # SQL statements only when debugging
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if level == "DEBUG" else logging.WARNING
    )

    return logger
