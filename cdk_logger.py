import logging
import os
from typing import Dict, Optional

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


class CDKLogger:
    """Logging for synth-time code, shared by the app and its stacks."""

    _loggers: Dict[str, logging.Logger] = {}
    _global_level = LOG_LEVELS.get(
        os.environ.get("IMAGE_RESIZE_LOG_LEVEL", "INFO").upper(), logging.INFO
    )

    @classmethod
    def get_logger(cls, name: Optional[str] = None) -> logging.Logger:
        """Get or create a logger with the given name."""
        logger_name = name or "ImageResize"

        if logger_name in cls._loggers:
            return cls._loggers[logger_name]

        logger = logging.getLogger(logger_name)

        if not logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '{"timestamp":"%(asctime)s", "level":"%(levelname)s", "service":"%(name)s", "message":"%(message)s"}'
            )
            handler.setFormatter(formatter)
            logger.addHandler(handler)
            logger.setLevel(cls._global_level)

        cls._loggers[logger_name] = logger
        return logger

    @classmethod
    def set_level(cls, level: str) -> None:
        """Set log level for all loggers."""
        log_level = LOG_LEVELS.get(level.upper(), logging.INFO)
        cls._global_level = log_level

        for logger in cls._loggers.values():
            logger.setLevel(log_level)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a logger with the specified name."""
    return CDKLogger.get_logger(name)
