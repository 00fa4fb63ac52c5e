"""
Structured Logging Infrastructure

One JSON object per line. Two context values are attached to every record
logged while a request is handled:

- ``correlation_id``: one per HTTP request (``X-Correlation-ID``)
- ``delivery_id``: the ``X-GitHub-Delivery`` being processed, once the
  webhook has read it

so a single GitHub delivery can be followed from the HTTP layer down to
every update pass.
"""
import logging
import json
import sys
import uuid
from datetime import datetime, timezone
from typing import Any
from contextvars import ContextVar
from functools import wraps

correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")
delivery_id_var: ContextVar[str] = ContextVar("delivery_id", default="")

_QUIET_LOGGERS = ("httpx", "httpcore", "sqlalchemy.engine")


def _context() -> dict[str, str]:
    context = {}
    if correlation_id_var.get():
        context["correlation_id"] = correlation_id_var.get()
    if delivery_id_var.get():
        context["delivery_id"] = delivery_id_var.get()
    return context


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging"""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "function": record.funcName,
            "line": record.lineno,
            **_context(),
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        extra_data = getattr(record, "extra_data", None)
        if extra_data:
            log_entry["extra"] = extra_data

        return json.dumps(log_entry, ensure_ascii=False, default=str)


class StructuredLogger(logging.Logger):
    """Logger whose level methods accept an ``extra_data`` dict"""

    def _log(self, level, msg, args, exc_info=None, extra=None, stack_info=False,
             stacklevel=1, extra_data: dict[str, Any] | None = None):
        if extra_data:
            extra = {**(extra or {}), "extra_data": extra_data}
        # One extra frame: this override sits between the level method and the stdlib
        super()._log(level, msg, args, exc_info=exc_info, extra=extra,
                     stack_info=stack_info, stacklevel=stacklevel + 1)


logging.setLoggerClass(StructuredLogger)


class ContextFilter(logging.Filter):
    """Exposes the context values to plain-text format strings"""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = correlation_id_var.get() or "-"
        record.delivery_id = delivery_id_var.get() or "-"
        return True


def setup_logging(level: str = "INFO", json_format: bool = True) -> None:
    """
    Configure the root logger.

    Args:
        level: Logging level name
        json_format: JSON lines for production, plain text for local runs
    """
    log_level = getattr(logging, level.upper())
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)

    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | [%(correlation_id)s %(delivery_id)s] | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        ))
        handler.addFilter(ContextFilter())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def set_correlation_id(correlation_id: str | None = None) -> str:
    """Bind the request's correlation ID, generating an 8-char one if none was sent"""
    cid = correlation_id or uuid.uuid4().hex[:8]
    correlation_id_var.set(cid)
    return cid


def get_correlation_id() -> str:
    return correlation_id_var.get()


def bind_delivery_id(delivery_id: str) -> None:
    """Tag every following record in this context with the GitHub delivery"""
    delivery_id_var.set(delivery_id)


def get_logger(name: str) -> StructuredLogger:
    return logging.getLogger(name)  # type: ignore


def log_async_operation(operation_name: str):
    """Log start, completion time and failure of an async service call"""
    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            logger = get_logger(func.__module__)
            start_time = datetime.now(timezone.utc)

            def elapsed() -> float:
                return (datetime.now(timezone.utc) - start_time).total_seconds()

            logger.debug(f"Starting {operation_name}", extra_data={"operation": operation_name})
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                logger.error(
                    f"Failed {operation_name}: {e}",
                    extra_data={"operation": operation_name, "duration_seconds": elapsed(), "error": str(e)},
                    exc_info=True
                )
                raise

            logger.info(
                f"Completed {operation_name}",
                extra_data={"operation": operation_name, "duration_seconds": elapsed(), "result": result},
            )
            return result

        return wrapper
    return decorator
