"""Logging for SitePress.

All modules log through the ``SitePress`` logger exported here as
:data:`logger`. The CLI calls :func:`configure` once its options are parsed;
until then records go to stdout at INFO.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

LOGGER_NAME = "SitePress"
DEFAULT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# rotated log files: 5 MiB each, three backups kept
MAX_LOG_BYTES = 5 * 1024 * 1024
LOG_BACKUPS = 3


def configure(
    *,
    level: Union[int, str] = "INFO",
    log_file: Optional[Union[str, Path]] = None,
    log_format: str = DEFAULT_FORMAT,
) -> logging.Logger:
    """Install fresh handlers on the service logger and return it.

    Records always go to stdout; *log_file*, when given, also receives them
    through a rotating file handler. Calling this again replaces the
    previous handlers.
    """
    service_logger = logging.getLogger(LOGGER_NAME)
    service_logger.setLevel(level)
    for handler in list(service_logger.handlers):
        service_logger.removeHandler(handler)
        handler.close()

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        handlers.append(
            RotatingFileHandler(
                log_file, maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUPS, encoding="utf-8"
            )
        )
    formatter = logging.Formatter(log_format)
    for handler in handlers:
        handler.setFormatter(formatter)
        service_logger.addHandler(handler)

    service_logger.propagate = False
    return service_logger


logger = configure()

__all__ = ["logger", "configure"]
