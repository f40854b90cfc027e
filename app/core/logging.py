import logging
import json
import sys
from datetime import datetime, timezone
from typing import Dict, Any, Optional

from celery import current_task


# Custom JSON formatter for structured logging
class JSONFormatter(logging.Formatter):
    """
    Formatter that outputs JSON strings after parsing the log record.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record as JSON."""
        log_record = self._format_record(record)
        return json.dumps(log_record)

    def _format_record(self, record: logging.LogRecord) -> Dict[str, Any]:
        """Create a dictionary from a log record."""
        # Start with basic record attributes
        log_record = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        # Add any custom attributes
        for key, value in record.__dict__.items():
            if key not in log_record and not key.startswith('_') and isinstance(value,
                                                                                (str, int, float, bool, type(None))):
                log_record[key] = value

        # Add traceback for exceptions
        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        return log_record


class TaskContextFilter(logging.Filter):
    """
    Filter that adds the id of the running Celery task as job_id.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, 'job_id'):
            task = current_task
            record.job_id = task.request.id if task and task.request else None
        return True


def setup_logging(logger_name: str = "app", log_level: str = "INFO") -> logging.Logger:
    """
    Set up structured logging with JSON formatting.

    Args:
        logger_name: Name for the logger
        log_level: Logging level to use

    Returns:
        Logger instance
    """
    logger = logging.getLogger(logger_name)

    level = getattr(logging, log_level.upper(), logging.INFO)
    logger.setLevel(level)

    # Clear any existing handlers
    logger.handlers = []

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(TaskContextFilter())

    logger.addHandler(handler)

    # Prevent propagation to root logger
    logger.propagate = False

    return logger


def get_logger(
        module_name: str,
        alert_id: Optional[int] = None,
) -> logging.Logger:
    """
    Get a logger for a specific module, optionally bound to an alert.

    Args:
        module_name: Name of the module (usually __name__)
        alert_id: Alert the caller is working on

    Returns:
        Logger with context
    """
    if not module_name.startswith("app"):
        module_name = f"app.{module_name}"
    logger = logging.getLogger(module_name)

    if alert_id is not None:
        return logging.LoggerAdapter(logger, {"alert_id": alert_id})

    return logger
