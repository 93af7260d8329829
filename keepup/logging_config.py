"""Logging for keepup: one stdout handler on the ``keepup`` logger, plain or JSON."""

import json
import logging
import sys
from datetime import datetime

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

PLAIN_FORMAT = "[%(asctime)s] %(levelname)s - %(name)s - %(message)s"


class StructuredFormatter(logging.Formatter):
    """One JSON object per record, for log shippers."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def setup_logging(level: str = "INFO", structured: bool = False) -> logging.Logger:
    """
    Configure the keepup logger, replacing any handler from an earlier call.

    Raises:
        ValueError: If level is not one of LOG_LEVELS
    """
    name = level.upper()
    if name not in LOG_LEVELS:
        raise ValueError(f"Unknown log level {level!r}, expected one of {', '.join(LOG_LEVELS)}")

    logger = logging.getLogger("keepup")
    logger.setLevel(name)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    if structured:
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(logging.Formatter(PLAIN_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(handler)
    return logger


logger = setup_logging()
