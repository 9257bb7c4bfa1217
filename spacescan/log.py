from __future__ import annotations
import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional, Union

PACKAGE_LOGGER = "spacescan"
LOG_FORMAT = "%(asctime)s %(levelname)-7s [%(threadName)s] %(name)s: %(message)s"

_CONFIGURED_ATTR = "_spacescan_configured"
_HANDLER_ATTR = "_spacescan_handler"


def _tag(handler: logging.Handler) -> logging.Handler:
    setattr(handler, _HANDLER_ATTR, True)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    return handler


def configure_logging(level: Union[int, str] = logging.INFO,
                      log_file: Optional[str] = None,
                      force: bool = False) -> logging.Logger:
    """Attach console (and optionally rotating file) handlers to the package logger.

    Calling it again is a no-op unless ``force`` is set, in which case the
    handlers installed here are replaced. Handlers added by the host
    application are left alone.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    if getattr(logger, _CONFIGURED_ATTR, False) and not force:
        return logger

    for h in list(logger.handlers):
        if getattr(h, _HANDLER_ATTR, False):
            logger.removeHandler(h)
            h.close()

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logger.setLevel(level)
    logger.addHandler(_tag(logging.StreamHandler()))

    if log_file:
        os.makedirs(os.path.dirname(os.path.abspath(log_file)), exist_ok=True)
        logger.addHandler(_tag(RotatingFileHandler(log_file, maxBytes=2 * 1024 * 1024,
                                                   backupCount=3, encoding="utf-8")))

    setattr(logger, _CONFIGURED_ATTR, True)
    return logger
