from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

LOGGER_NAME = "ductbank"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_configured: Optional[logging.Logger] = None


def configure_logging(
    level: int = logging.INFO,
    log_path: Optional[Union[str, Path]] = None,
) -> logging.Logger:
    """
    Attach console (and optionally rotating file) handlers to the package logger.

    Library modules only call ``logging.getLogger(__name__)``; applications and
    scripts call this once. Repeated calls return the already configured logger.
    """
    global _configured
    if _configured is not None:
        return _configured

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    fmt = logging.Formatter(LOG_FORMAT)

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(fmt)
    logger.addHandler(console)

    if log_path is not None:
        path = Path(log_path).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(path, maxBytes=1_000_000, backupCount=3)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(fmt)
        logger.addHandler(file_handler)
        logger.debug("Logging to %s", path)

    _configured = logger
    return logger
