"""
tokenvault - Structured Logging Configuration

Configures structured JSON logging:
- JSON format for easy parsing and aggregation
- Log rotation to prevent disk space issues
- Console and file handlers

Usage:
    from tokenvault.core.logging_config import setup_logging

    logger = setup_logging(
        name="tokenvault",
        log_file="/var/log/tokenvault/vault.json",
        level="INFO"
    )

    logger.info("Deposit accepted", extra={"depositor": "0xabc", "amount": 1000})
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from datetime import datetime, timezone
from typing import Optional, Dict, Any
from pythonjsonlogger import jsonlogger


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """
    JSON formatter that adds timestamp, environment, service and source
    location to every record.
    """

    def __init__(
        self,
        fmt: str = "%(timestamp)s %(level)s %(name)s %(message)s",
        timestamp: bool = True,
        environment: Optional[str] = None,
        service_name: str = "tokenvault",
    ):
        super().__init__(fmt=fmt)
        self.timestamp = timestamp
        self.environment = environment or "development"
        self.service_name = service_name

    def add_fields(
        self,
        log_record: Dict[str, Any],
        record: logging.LogRecord,
        message_dict: Dict[str, Any],
    ) -> None:
        """Add custom fields to log record."""
        super().add_fields(log_record, record, message_dict)

        if self.timestamp and not log_record.get("timestamp"):
            log_record["timestamp"] = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")

        log_record["environment"] = self.environment
        log_record["service"] = self.service_name

        if not log_record.get("level"):
            log_record["level"] = record.levelname.lower()

        log_record["source"] = {
            "function": record.funcName,
            "module": record.module,
            "line": record.lineno,
        }


def setup_logging(
    name: str = "tokenvault",
    log_file: Optional[str] = None,
    level: str = "INFO",
    environment: str = "development",
    enable_console: bool = True,
    enable_file: bool = True,
    max_bytes: int = 50 * 1024 * 1024,  # 50MB
    backup_count: int = 5,
    stream=None,
) -> logging.Logger:
    """
    Setup structured JSON logging.

    Args:
        name: Logger name (typically the package name)
        log_file: Path to JSON log file (optional)
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        environment: Environment identifier (development, staging, production)
        enable_console: Whether to log to console
        enable_file: Whether to log to file
        max_bytes: Maximum log file size before rotation
        backup_count: Number of backup files to keep
        stream: Console stream (defaults to stdout)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper()))

    # Remove existing handlers to avoid duplicates
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = CustomJsonFormatter(
        fmt="%(timestamp)s %(level)s %(name)s %(message)s",
        timestamp=True,
        environment=environment,
        service_name=name.split(".")[0],
    )

    if enable_console:
        console_handler = logging.StreamHandler(stream or sys.stdout)
        console_handler.setLevel(getattr(logging, level.upper()))
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if enable_file and log_file:
        try:
            log_path = Path(log_file)
            log_path.parent.mkdir(parents=True, exist_ok=True)

            file_handler = logging.handlers.RotatingFileHandler(
                filename=log_file,
                maxBytes=max_bytes,
                backupCount=backup_count,
            )
            file_handler.setLevel(getattr(logging, level.upper()))
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)
        except OSError as e:
            logger.warning("Could not create file handler for %s: %s", log_file, e)

    return logger


def get_logger(
    name: str,
    log_file: Optional[str] = None,
    level: str = "INFO",
) -> logging.Logger:
    """
    Get or create a logger with standard configuration.

    Only configures handlers the first time a name is requested.
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        return setup_logging(name=name, log_file=log_file, level=level)

    return logger
