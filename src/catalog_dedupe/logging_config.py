from __future__ import annotations

import logging

from catalog_dedupe.errors import ConfigurationError

ROOT_LOGGER_NAME = "catalog_dedupe"
_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str | int = "INFO") -> logging.Logger:
    """Point the package logger at the current stderr; repeated calls replace the handler."""
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    try:
        logger.setLevel(level.upper() if isinstance(level, str) else level)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"invalid log level: {level!r}") from exc
    for handler in list(logger.handlers):
        if getattr(handler, "_catalog_dedupe", False):
            logger.removeHandler(handler)
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_FORMAT))
    handler._catalog_dedupe = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    return logger
