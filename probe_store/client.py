"""TimescaleDB client facade.

Bundles the ingestion and query services around one shared connection pool
so callers deal with a single object.

Usage:
    with TimescaleClient.from_settings() as client:
        client.insert_http_response(validate_http_response(payload))
        stats = client.http_metrics_daily('mon_123', regions=['ams', 'fra'])
"""

from datetime import datetime
from typing import Callable, Sequence

from probe_store.lib.config import Settings
from probe_store.lib.database import ConnectionPool
from probe_store.models.audit_log import AuditLog
from probe_store.models.pipe_response import PipeResponse
from probe_store.models.probe_result import HttpResponse, TcpResponse
from probe_store.services.ingestion_service import IngestionService
from probe_store.services.query_service import QueryService


class TimescaleClient:
  """Single entry point for inserts and catalog queries."""

  def __init__(self, pool: ConnectionPool, clock: Callable[[], datetime] | None = None):
    self.pool = pool
    self.ingestion = IngestionService(pool)
    self.queries = QueryService(pool, clock=clock)

  @classmethod
  def from_settings(cls, settings: Settings | None = None, ping: bool = False) -> 'TimescaleClient':
    """Create the pool from configuration and wrap it.

    Args:
        settings: Pool settings (read from the environment if None)
        ping: Verify connectivity with one round-trip before returning

    Raises:
        ValueError: If no database URL is configured
        ConnectionTimeoutError, StorageError: If ``ping`` fails
    """
    pool = ConnectionPool.create(settings)
    if ping:
      try:
        pool.ping()
      except Exception:
        pool.close()
        raise
    return cls(pool)

  # Ingestion

  def insert(self, result: HttpResponse | TcpResponse, timeout: float | None = None) -> None:
    self.ingestion.insert(result, timeout)

  def insert_http_response(self, result: HttpResponse, timeout: float | None = None) -> None:
    self.ingestion.insert_http_response(result, timeout)

  def insert_tcp_response(self, result: TcpResponse, timeout: float | None = None) -> None:
    self.ingestion.insert_tcp_response(result, timeout)

  def insert_audit_log(self, entry: AuditLog, timeout: float | None = None) -> None:
    self.ingestion.insert_audit_log(entry, timeout)

  # Query catalog

  def home_stats(self, period: str | None = None, timeout: float | None = None) -> PipeResponse:
    return self.queries.home_stats(period, timeout)

  def http_list_daily(
    self,
    monitor_id: str,
    from_date: int | None = None,
    to_date: int | None = None,
    timeout: float | None = None,
  ) -> PipeResponse:
    return self.queries.http_list_daily(monitor_id, from_date, to_date, timeout)

  def http_metrics_daily(
    self, monitor_id: str, regions: Sequence[str] | None = None, timeout: float | None = None
  ) -> PipeResponse:
    return self.queries.http_metrics_daily(monitor_id, regions, timeout)

  def http_status_weekly(self, monitor_id: str, timeout: float | None = None) -> PipeResponse:
    return self.queries.http_status_weekly(monitor_id, timeout)

  def http_status_45d(self, monitor_id: str, timeout: float | None = None) -> PipeResponse:
    return self.queries.http_status_45d(monitor_id, timeout)

  def get_audit_log(
    self, monitor_id: str | None = None, interval: int | None = None, timeout: float | None = None
  ) -> PipeResponse:
    return self.queries.get_audit_log(monitor_id, interval, timeout)

  # Lifecycle

  def ping(self) -> bool:
    return self.pool.ping()

  def close(self) -> None:
    """Shut down the shared pool. Later operations raise PoolClosedError."""
    self.pool.close()

  def __enter__(self) -> 'TimescaleClient':
    return self

  def __exit__(self, exc_type, exc, tb) -> None:
    self.close()
