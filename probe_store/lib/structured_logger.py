"""Structured Logger with JSON Formatting.

Provides structured logging with JSON output for machine-readable logs.
"""

import json
import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from probe_store.lib.correlation import get_correlation_id

# Never written to logs, whatever the caller passes in
SENSITIVE_KEYS = frozenset({'password', 'connection_string', 'database_url', 'token'})

# stdlib loggers behind every StructuredLogger, so the level can be changed later
_loggers: Dict[str, logging.Logger] = {}


def _utc_timestamp() -> str:
  return datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z')


def _scrub(context: Dict[str, Any]) -> Dict[str, Any]:
  return {key: value for key, value in context.items() if key not in SENSITIVE_KEYS}


class JSONFormatter(logging.Formatter):
  """JSON formatter for structured logging."""

  def format(self, record: logging.LogRecord) -> str:
    """Format log record as JSON.

    Args:
        record: Log record to format

    Returns:
        JSON-formatted log string
    """
    log_data = {
      'timestamp': _utc_timestamp(),
      'level': record.levelname,
      'message': record.getMessage(),
      'module': record.module,
      'function': record.funcName,
      'correlation_id': get_correlation_id(),
    }

    context = getattr(record, 'context', None)
    if context:
      log_data.update(_scrub(context))

    if record.exc_info:
      log_data['exception'] = {
        'type': record.exc_info[0].__name__ if record.exc_info[0] else None,
        'message': str(record.exc_info[1]) if record.exc_info[1] else None,
      }

    return json.dumps(log_data, default=str)


class StructuredLogger:
  """Structured logger with JSON formatting.

  Usage:
      logger = StructuredLogger(__name__)
      logger.info('Query completed', operation='http_list_daily', rows=12, duration_ms=4.2)
      logger.error('Insert failed', exc_info=True, table='http_responses')
  """

  def __init__(self, name: str):
    """Initialize structured logger.

    Args:
        name: Logger name (typically module name)
    """
    self.logger = logging.getLogger(name)

    log_level = os.getenv('LOG_LEVEL', 'INFO').upper()
    self.logger.setLevel(getattr(logging, log_level, logging.INFO))

    # Re-instantiating for the same name must not stack handlers
    self.logger.handlers.clear()
    handler = logging.StreamHandler()
    handler.setFormatter(JSONFormatter())
    self.logger.addHandler(handler)
    self.logger.propagate = False
    _loggers[name] = self.logger

  def info(self, message: str, **context: Any) -> None:
    self.logger.info(message, extra={'context': context})

  def warning(self, message: str, exc_info: bool = False, **context: Any) -> None:
    self.logger.warning(message, exc_info=exc_info, extra={'context': context})

  def error(self, message: str, exc_info: bool = False, **context: Any) -> None:
    self.logger.error(message, exc_info=exc_info, extra={'context': context})

  def debug(self, message: str, **context: Any) -> None:
    self.logger.debug(message, extra={'context': context})


def set_log_level(level: str) -> None:
  """Apply a level name (e.g. 'DEBUG') to every structured logger created so far.

  Unknown names fall back to INFO, as at construction time.
  """
  resolved = getattr(logging, level.upper(), logging.INFO)
  for stdlib_logger in _loggers.values():
    stdlib_logger.setLevel(resolved)


def log_event(event: str, level: str = 'INFO', context: Optional[Dict[str, Any]] = None) -> None:
  """Log a structured event without creating a logger instance.

  Sensitive keys are dropped and the correlation ID is attached.

  Args:
      event: Event name (e.g., "pool.created", "pool.closed")
      level: Log level (INFO, WARNING, ERROR, DEBUG)
      context: Additional context dictionary

  Example:
      log_event('pool.created', context={'max_size': 20, 'connection_timeout': 2.0})
  """
  log_entry = {
    'timestamp': _utc_timestamp(),
    'level': level.upper(),
    'event': event,
    'correlation_id': get_correlation_id(),
    **_scrub(context or {}),
  }
  print(json.dumps(log_entry, default=str))
