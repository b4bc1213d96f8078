"""Logging configuration helpers."""

import logging

_FORMAT = "%(asctime)s %(levelname)s: %(name)s: %(message)s"
_CHATTY_LOGGERS = ("httpx", "httpcore")


def configure_logging(level: str | int = logging.INFO) -> logging.Logger:
    """Attach a single stream handler to the fieldcam logger.

    Repeated calls only adjust the level.
    """
    logger = logging.getLogger("fieldcam")
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False
    return logger
