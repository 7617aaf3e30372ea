"""
Structured JSON logging configuration.

Usage:
    from config.logging_config import configure_logging

    configure_logging()                  # reads LOG_LEVEL / LOG_FORMAT / LOG_FILE
    configure_logging(log_format="text")
"""

import json
import os
import logging
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import Optional

ROOT_LOGGER = "automation"

# Extra record attributes copied into the JSON entry when present
_EXTRA_FIELDS = ('correlation_id', 'job_url', 'template_id', 'status')


class JSONFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record):
        log_entry = {
            'timestamp': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
        }

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        for attr in _EXTRA_FIELDS:
            if hasattr(record, attr):
                log_entry[attr] = getattr(record, attr)

        return json.dumps(log_entry, default=str)


def configure_logging(
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """Configure logging for the automation package.

    Arguments left as None fall back to LOG_LEVEL, LOG_FORMAT and LOG_FILE.

    Returns:
        Configured package logger.
    """
    log_level = (log_level or os.getenv('LOG_LEVEL', 'INFO')).upper()
    log_format = log_format or os.getenv('LOG_FORMAT', 'json')
    log_file = log_file if log_file is not None else os.getenv('LOG_FILE', '')

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(getattr(logging, log_level, logging.INFO))
    logger.handlers = []

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.DEBUG)

    if log_format == 'json':
        console_handler.setFormatter(JSONFormatter())
    else:
        console_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        ))

    logger.addHandler(console_handler)

    if log_file:
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(JSONFormatter())
        logger.addHandler(file_handler)

    return logger
