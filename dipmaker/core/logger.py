"""Logging setup shared by every dipmaker module."""

import logging
import sys
from logging.handlers import RotatingFileHandler

from dipmaker.config import env

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class CustomLogger(logging.Logger):
    """Logger with a helper for logging an error alongside its traceback."""

    def error_trace(self, msg, *args, **kwargs):
        """Log an error message with the active exception's traceback."""
        self.error(msg, *args, exc_info=True, **kwargs)


def setup_logger(name: str) -> CustomLogger:
    """Return the named logger, attaching handlers on first use."""
    logging.setLoggerClass(CustomLogger)
    logger = logging.getLogger(name)
    logging.setLoggerClass(logging.Logger)

    if logger.handlers:
        return logger  # type: ignore[return-value]

    level = logging.DEBUG if env.DEBUG else getattr(logging, env.LOG_LEVEL, logging.INFO)
    logger.setLevel(level)
    formatter = logging.Formatter(_FORMAT)

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    if env.ENABLE_LOGGING:
        env.LOG_DIR.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            env.LOG_DIR / "dipmaker.log",
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger  # type: ignore[return-value]
