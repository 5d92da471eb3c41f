import functools
import inspect
import json
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from .exceptions import StorageError
from .metrics_config import record_operation_error
from .metrics_config import record_operation_start
from .metrics_config import record_operation_success

# --- Logging Setup ---
storage_logger = logging.getLogger("file_storage")
storage_call_logger = logging.getLogger("file_storage.calls")

HUMAN_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_configured = False


class StructuredLogFormatter(logging.Formatter):
    """JSON formatter: one object per line with timestamp, level, logger and message."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extra_fields = getattr(record, "extra_fields", None)
        if isinstance(extra_fields, dict):
            log_entry.update(extra_fields)

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


def setup_logging(level="INFO", structured=False, log_file=None):
    """Configure the ``file_storage`` logger once per process.

    Args:
        level: Logging level name or number
        structured: Emit JSON lines instead of the human-readable format
        log_file: Optional path; adds a rotating file handler (10MB x 5)
    """
    global _configured

    if _configured:
        return storage_logger

    storage_logger.setLevel(level if isinstance(level, int) else str(level).upper())
    formatter = StructuredLogFormatter() if structured else logging.Formatter(HUMAN_FORMAT)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)
    storage_logger.addHandler(handler)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(log_file, maxBytes=10 * 1024 * 1024, backupCount=5)
        file_handler.setFormatter(formatter)
        storage_logger.addHandler(file_handler)

    storage_logger.propagate = False
    _configured = True
    return storage_logger


def reset_logging():
    """Remove handlers installed by setup_logging (for testing)."""
    global _configured
    for handler in list(storage_logger.handlers):
        storage_logger.removeHandler(handler)
        handler.close()
    storage_logger.propagate = True
    _configured = False


def _describe_call(args, kwargs):
    # Payloads are logged by size only
    parts = []
    for arg in args:
        if isinstance(arg, (bytes, bytearray, memoryview)):
            parts.append(f"<{len(arg)} bytes>")
        elif isinstance(arg, str) and len(arg) > 200:
            parts.append(f"<{len(arg)} chars>")
        else:
            parts.append(repr(arg))
    parts.extend(f"{k}={v!r}" for k, v in kwargs.items() if v is not None)
    return ", ".join(parts)


def _log_failure(operation, driver, error):
    extra = {"extra_fields": {"operation": operation, "driver": driver}}
    if isinstance(error, StorageError):
        extra["extra_fields"]["error_code"] = error.error_code
        storage_call_logger.warning(
            f"Storage {operation} failed [{error.error_code}]: {error.message}", extra=extra
        )
    else:
        storage_call_logger.error(f"Storage {operation} raised {error!r}", exc_info=True, extra=extra)


# --- Decorator for Logging Storage Calls with Metrics ---
def log_storage_call(func):
    """Log a facade operation and record its outcome in metrics.

    Works for coroutine and plain methods. The first argument must expose
    ``driver_type``.
    """
    operation = func.__name__

    if inspect.iscoroutinefunction(func):

        @functools.wraps(func)
        async def async_wrapper(self, *args, **kwargs):
            driver = getattr(self, "driver_type", None) or "unconfigured"
            storage_call_logger.debug(f"Calling {operation}({_describe_call(args, kwargs)}) on {driver}")
            start_time = record_operation_start()
            try:
                result = await func(self, *args, **kwargs)
            except Exception as e:
                record_operation_error(operation, driver, start_time, e)
                _log_failure(operation, driver, e)
                raise
            record_operation_success(operation, driver, start_time)
            return result

        return async_wrapper

    @functools.wraps(func)
    def wrapper(self, *args, **kwargs):
        driver = getattr(self, "driver_type", None) or "unconfigured"
        try:
            return func(self, *args, **kwargs)
        except Exception as e:
            _log_failure(operation, driver, e)
            raise

    return wrapper
