"""
Order Service Independent Logging Module
======================================
Self-contained JSON logging for Order Service. Structured context is passed
through ``extra={...}``.
"""

import json
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional

_STANDARD_RECORD_FIELDS = frozenset(
    [
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "exc_info",
        "exc_text",
        "stack_info",
    ]
)


class OrderJSONFormatter(logging.Formatter):
    """Custom JSON formatter for Order Service structured logging"""

    def __init__(self, exclude_fields: Optional[List[str]] = None):
        super().__init__()
        self.skipped = _STANDARD_RECORD_FIELDS | set(exclude_fields or [])

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "service": "order_service",
            "logger": record.name,
            "message": record.getMessage(),
        }
        log_entry.update(
            (key, value)
            for key, value in record.__dict__.items()
            if key not in self.skipped
        )

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str, ensure_ascii=False)


def setup_order_logging(
    service_name: str = "order_service",
    log_level: str = "INFO",
    enable_file_logging: Optional[bool] = None,
    log_dir: Optional[str] = None,
    max_file_size: int = 100 * 1024 * 1024,  # 100MB
    backup_count: int = 5,
    exclude_fields: Optional[List[str]] = None,
) -> logging.Logger:
    """
    Setup independent logging for Order Service

    Returns:
        Configured logger instance
    """
    if enable_file_logging is None:
        enable_file_logging = os.getenv("ENVIRONMENT", "development").lower() in (
            "production",
            "staging",
        )

    level = getattr(logging, log_level.upper(), logging.INFO)
    logger = logging.getLogger(service_name)
    logger.setLevel(level)

    # Clear existing handlers to avoid duplication
    logger.handlers.clear()

    json_formatter = OrderJSONFormatter(exclude_fields=exclude_fields)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(json_formatter)
    logger.addHandler(console_handler)

    if enable_file_logging:
        log_dir_path = Path(log_dir) if log_dir else Path(__file__).parent.parent / "logs"
        log_dir_path.mkdir(exist_ok=True)

        for suffix, handler_level in (("", level), ("_errors", logging.ERROR)):
            file_handler = RotatingFileHandler(
                log_dir_path / f"{service_name}{suffix}.log",
                maxBytes=max_file_size,
                backupCount=backup_count,
            )
            file_handler.setLevel(handler_level)
            file_handler.setFormatter(json_formatter)
            logger.addHandler(file_handler)

    return logger
