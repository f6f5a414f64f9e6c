"""
Logging configuration for kmeans_study.

Every module obtains its logger with ``get_logger(__name__)``; applications
call ``setup_logging`` once to attach handlers to the package logger.

Usage:
    from kmeans_study.utils.logging_config import get_logger, setup_logging

    setup_logging("DEBUG")
    logger = get_logger(__name__)
"""

import logging
from pathlib import Path
from typing import Optional, Union

PACKAGE_LOGGER = "kmeans_study"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def get_logger(name: str) -> logging.Logger:
    """
    Return a logger that lives under the package logger hierarchy.

    Names outside the package (e.g. ``__main__`` in scripts) are nested under
    ``kmeans_study`` so ``setup_logging`` controls them as well.
    """
    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)


def setup_logging(
    level: Union[int, str] = "INFO",
    log_file: Optional[Union[str, Path]] = None,
) -> logging.Logger:
    """
    Configure the package logger.

    Existing handlers are replaced, so calling this twice does not duplicate
    output.

    Args:
        level: Logging level name or number
        log_file: Optional path; when given, records are also written there

    Returns:
        The configured package logger
    """
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: {level}")
        level = resolved

    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    if log_file is not None:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.setLevel(level)
    return logger
