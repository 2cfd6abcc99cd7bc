"""Logging configuration for ATHENA"""

import logging
import json
import sys
from pathlib import Path
from datetime import datetime, timezone
from typing import Any, Dict


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging"""

    def format(self, record: logging.LogRecord) -> str:
        log_obj: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        if hasattr(record, "extra_fields"):
            log_obj.update(record.extra_fields)

        return json.dumps(log_obj, ensure_ascii=False)


def get_logger(name: str = "athena") -> logging.Logger:
    """
    Get configured logger instance

    Structured fields travel per record:
        logger.info("msg", extra={"extra_fields": {"entries": 10}})

    Args:
        name: Logger name

    Returns:
        Configured logger instance
    """
    from .config import config

    logger = logging.getLogger(name)

    # Only configure if not already configured
    if not logger.handlers:
        logger.setLevel(getattr(logging, config.LOG_LEVEL.upper(), logging.INFO))

        handlers = [logging.StreamHandler(sys.stdout)]

        # File logging is optional (empty ATHENA_LOG_FILE disables it)
        if config.LOG_FILE:
            log_file = Path(config.LOG_FILE)
            log_file.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

        if config.LOG_FORMAT == "json":
            formatter = JSONFormatter()
        else:
            formatter = logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            )

        for handler in handlers:
            handler.setFormatter(formatter)
            logger.addHandler(handler)

        # Prevent propagation to root logger
        logger.propagate = False

    return logger


# Create default logger
logger = get_logger()
