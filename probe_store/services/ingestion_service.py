"""Ingestion Service

Appends validated probe results and audit events, one atomic row per call.
Each insert checks out one pooled connection, runs a single INSERT in its own
transaction and releases the connection on every exit path. Failures
propagate to the caller; this service never retries.
"""

import json
from typing import Any

from sqlalchemy import insert

from probe_store.lib.database import ConnectionPool
from probe_store.lib.errors import ProbeStoreError, ValidationError
from probe_store.lib.metrics import record_insert
from probe_store.lib.structured_logger import StructuredLogger
from probe_store.models.audit_log import AuditLog
from probe_store.models.constants import Trigger
from probe_store.models.probe_result import HttpResponse, TcpResponse
from probe_store.models.tables import AuditLogRecord, HttpResponseRecord, TcpResponseRecord

logger = StructuredLogger(__name__)


def _serialize(value: Any) -> str | None:
  """Serialize a structured sub-object for opaque storage."""
  if value is None:
    return None
  return json.dumps(value)


class IngestionService:
  """Service for appending rows to the probe result tables.

  Provides methods to:
  - Insert HTTP probe results into http_responses
  - Insert TCP probe results into tcp_responses
  - Insert audit events into audit_logs
  """

  def __init__(self, pool: ConnectionPool):
    """Initialize ingestion service.

    Args:
        pool: Shared connection pool
    """
    self.pool = pool

  def insert(self, result: HttpResponse | TcpResponse, timeout: float | None = None) -> None:
    """Insert a probe result into the table matching its protocol.

    Args:
        result: Validated HTTP or TCP probe result
        timeout: Connection acquisition timeout (pool default if None)

    Raises:
        ValidationError: If ``result`` is not a validated probe result
    """
    if isinstance(result, HttpResponse):
      self.insert_http_response(result, timeout)
    elif isinstance(result, TcpResponse):
      self.insert_tcp_response(result, timeout)
    else:
      raise ValidationError(
        f'Expected HttpResponse or TcpResponse, got {type(result).__name__}',
        [{'field': '__root__', 'constraint': 'model_type', 'message': 'unsupported result type'}],
      )

  def insert_http_response(self, result: HttpResponse, timeout: float | None = None) -> None:
    """Append one HTTP probe result.

    ``timing``, ``headers`` and ``assertions`` are stored as serialized JSON;
    ``trigger`` defaults to cron.
    """
    timing = result.timing.model_dump(by_alias=True) if result.timing is not None else None
    values = {
      'time': result.time,
      'monitor_id': result.monitor_id,
      'workspace_id': result.workspace_id,
      'region': result.region,
      'url': result.url,
      'latency': result.latency,
      'status_code': result.status_code,
      'error': result.error,
      'cron_timestamp': result.cron_timestamp,
      'message': result.message,
      'timing': _serialize(timing),
      'headers': _serialize(result.headers),
      'assertions': _serialize(result.assertions),
      'body': result.body,
      'trigger': result.trigger or Trigger.CRON.value,
    }
    self._insert('insert_http_response', HttpResponseRecord, values, timeout)

  def insert_tcp_response(self, result: TcpResponse, timeout: float | None = None) -> None:
    """Append one TCP probe result."""
    values = {
      'time': result.time,
      'monitor_id': result.monitor_id,
      'workspace_id': result.workspace_id,
      'region': result.region,
      'uri': result.uri,
      'latency': result.latency,
      'error': result.error,
      'cron_timestamp': result.cron_timestamp,
      'error_message': result.error_message,
      'trigger': result.trigger or Trigger.CRON.value,
    }
    self._insert('insert_tcp_response', TcpResponseRecord, values, timeout)

  def insert_audit_log(self, entry: AuditLog, timeout: float | None = None) -> None:
    """Append one audit event. ``metadata`` goes to a JSONB column."""
    values = {
      'time': entry.time,
      'id': entry.id,
      'action': entry.action,
      'actor': entry.actor,
      'targets': _serialize(entry.targets),
      'metadata': entry.metadata,
      'version': entry.version,
    }
    self._insert('insert_audit_log', AuditLogRecord, values, timeout)

  def _insert(self, operation: str, record: type, values: dict[str, Any], timeout: float | None) -> None:
    table = record.__tablename__
    try:
      with self.pool.acquire(operation, timeout) as conn:
        with conn.begin():
          conn.execute(insert(record.__table__).values(**values))
    except ProbeStoreError as e:
      record_insert(table, 'failure')
      logger.error(
        'Insert failed', operation=operation, table=table, error_type=type(e).__name__,
        error_message=str(e),
      )
      raise

    record_insert(table, 'success')
    logger.debug('Row inserted', operation=operation, table=table)
