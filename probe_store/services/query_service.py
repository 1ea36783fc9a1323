"""Query service for the pre-aggregated analytical catalog.

Each catalog entry is a named, read-only method with a fixed signature that
returns a ``PipeResponse`` envelope. Inputs are validated before a connection
is acquired; time windows are computed from the service clock and every
filter value is a bound parameter.

Classification of a result (success / degraded / error) is derived at read
time from ``error`` and ``status_code`` and is never stored. Aggregate counts
use SQL filters that express the same partition as
``classify_request_status``.
"""

import time
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Sequence

from sqlalchemy import and_, func, literal_column, not_, or_, select, union_all
from sqlalchemy.engine import RowMapping

from probe_store.lib.database import ConnectionPool
from probe_store.lib.errors import ProbeStoreError
from probe_store.lib.metrics import record_query_duration
from probe_store.lib.structured_logger import StructuredLogger
from probe_store.lib.timing import calculate_timing_from_json
from probe_store.models.constants import Trigger, classify_request_status
from probe_store.models.pipe_response import PipeResponse
from probe_store.models.query_params import (
  AuditLogParams,
  HomeStatsParams,
  HttpListDailyParams,
  HttpMetricsDailyParams,
  MonitorParams,
)
from probe_store.models.query_rows import (
  AuditLogRow,
  HomeStatsRow,
  HttpListRow,
  HttpMetricsRow,
  HttpStatus45dRow,
  HttpStatusWeeklyRow,
)
from probe_store.models.tables import AuditLogRecord, HttpResponseRecord, TcpResponseRecord
from probe_store.models.validation import parse_model

logger = StructuredLogger(__name__)

HOME_STATS_WINDOWS = {
  '10m': timedelta(minutes=10),
  '1h': timedelta(hours=1),
  '1d': timedelta(days=1),
  '1w': timedelta(weeks=1),
  '1m': timedelta(days=30),
}

DAILY_WINDOW = timedelta(hours=24)
WEEKLY_WINDOW = timedelta(days=7)
STATUS_45D_WINDOW = timedelta(days=45)

PERCENTILES = {
  'p50_latency': 0.50,
  'p75_latency': 0.75,
  'p90_latency': 0.90,
  'p95_latency': 0.95,
  'p99_latency': 0.99,
}

http = HttpResponseRecord


def error_condition():
  """Rows classified as error: error flag set or status >= 400."""
  return or_(http.error, http.status_code >= 400)


def degraded_condition():
  """Rows classified as degraded: no error flag and 300 <= status < 400."""
  return and_(not_(http.error), http.status_code >= 300, http.status_code < 400)


def success_condition():
  """Rows classified as success: no error flag and status < 300 or missing."""
  return and_(not_(http.error), or_(http.status_code.is_(None), http.status_code < 300))


def ok_condition():
  """Rows not classified as error (success or degraded)."""
  return and_(not_(http.error), or_(http.status_code.is_(None), http.status_code < 400))


def _epoch_ms(value: datetime | None) -> int | None:
  if value is None:
    return None
  return int(value.timestamp() * 1000)


def _from_epoch_ms(value: int) -> datetime:
  return datetime.fromtimestamp(value / 1000, tz=timezone.utc)


def _utc_now() -> datetime:
  return datetime.now(timezone.utc)


class QueryService:
  """Service for the fixed analytical query catalog.

  Catalog:
  - home_stats: total result count over HTTP and TCP
  - http_list_daily: one monitor's HTTP results, newest first
  - http_metrics_daily: latency percentiles and status counts over 24 hours
  - http_status_weekly: per-day totals over 7 days
  - http_status_45d: per-second totals over 45 days
  - get_audit_log: audit events over a trailing window
  """

  def __init__(self, pool: ConnectionPool, clock: Callable[[], datetime] | None = None):
    """Initialize query service.

    Args:
        pool: Shared connection pool
        clock: Returns the current UTC time (injectable for tests)
    """
    self.pool = pool
    self.clock = clock or _utc_now

  def home_stats(self, period: str | None = None, timeout: float | None = None) -> PipeResponse[HomeStatsRow]:
    """Count probe results across HTTP and TCP.

    Args:
        period: Rolling window ('10m', '1h', '1d', '1w', '1m'); all-time if None
        timeout: Connection acquisition timeout (pool default if None)

    Returns:
        Envelope with a single ``{count}`` row
    """
    params = parse_model(HomeStatsParams, {'period': period})

    http_count = select(func.count().label('count')).select_from(HttpResponseRecord)
    tcp_count = select(func.count().label('count')).select_from(TcpResponseRecord)
    if params.period is not None:
      since = self.clock() - HOME_STATS_WINDOWS[params.period]
      http_count = http_count.where(HttpResponseRecord.time >= since)
      tcp_count = tcp_count.where(TcpResponseRecord.time >= since)

    rows, elapsed = self._fetch('home_stats', union_all(http_count, tcp_count), timeout)
    total = sum(int(row['count'] or 0) for row in rows)
    return PipeResponse[HomeStatsRow].build(
      [HomeStatsRow(count=total)], elapsed, rows_read=len(rows)
    )

  def http_list_daily(
    self,
    monitor_id: str,
    from_date: int | None = None,
    to_date: int | None = None,
    timeout: float | None = None,
  ) -> PipeResponse[HttpListRow]:
    """List one monitor's HTTP results, most recent first.

    Covers the trailing 24 hours unless an explicit inclusive range is
    given. Each row carries its read-time ``requestStatus`` and, when the
    stored timing parses, its decomposed latency phases.

    Args:
        monitor_id: Monitor to list
        from_date: Range start (epoch ms), requires ``to_date``
        to_date: Range end (epoch ms), requires ``from_date``
        timeout: Connection acquisition timeout (pool default if None)
    """
    params = parse_model(
      HttpListDailyParams,
      {'monitor_id': monitor_id, 'from_date': from_date, 'to_date': to_date},
    )

    if params.from_date is not None:
      window = and_(
        http.time >= _from_epoch_ms(params.from_date),
        http.time <= _from_epoch_ms(params.to_date),
      )
    else:
      window = http.time >= self.clock() - DAILY_WINDOW

    statement = (
      select(
        http.monitor_id,
        http.latency,
        http.status_code,
        http.region,
        http.cron_timestamp,
        http.time,
        http.timing,
        http.error,
        http.trigger,
      )
      .where(http.monitor_id == params.monitor_id, window)
      .order_by(http.time.desc())
    )

    rows, elapsed = self._fetch('http_list_daily', statement, timeout)
    data = [self._to_list_row(row) for row in rows]
    return PipeResponse[HttpListRow].build(data, elapsed)

  def _to_list_row(self, row: RowMapping) -> HttpListRow:
    return HttpListRow(
      monitor_id=row['monitor_id'],
      latency=row['latency'],
      status_code=row['status_code'],
      region=row['region'],
      cron_timestamp=row['cron_timestamp'],
      timestamp=_epoch_ms(row['time']),
      timing=calculate_timing_from_json(row['timing']),
      request_status=classify_request_status(row['error'], row['status_code']),
      trigger=row['trigger'] or Trigger.CRON.value,
    )

  def http_metrics_daily(
    self,
    monitor_id: str,
    regions: Sequence[str] | None = None,
    timeout: float | None = None,
  ) -> PipeResponse[HttpMetricsRow]:
    """Latency percentiles and status counts over the trailing 24 hours.

    All five percentiles use continuous interpolation and are 0 when no row
    matches; the envelope always holds exactly one row.

    Args:
        monitor_id: Monitor to aggregate
        regions: Restrict to these regions (all regions if None or empty)
        timeout: Connection acquisition timeout (pool default if None)
    """
    params = parse_model(
      HttpMetricsDailyParams,
      {'monitor_id': monitor_id, 'regions': list(regions) if regions is not None else None},
    )

    percentile_columns = [
      func.coalesce(func.percentile_cont(q).within_group(http.latency.asc()), 0).label(name)
      for name, q in PERCENTILES.items()
    ]
    statement = select(
      *percentile_columns,
      func.count().label('count'),
      func.count().filter(success_condition()).label('success'),
      func.count().filter(degraded_condition()).label('degraded'),
      func.count().filter(error_condition()).label('error'),
      func.max(http.time).label('last_time'),
    ).where(
      http.monitor_id == params.monitor_id,
      http.time >= self.clock() - DAILY_WINDOW,
    )
    if params.regions:
      statement = statement.where(http.region.in_(params.regions))

    rows, elapsed = self._fetch('http_metrics_daily', statement, timeout)
    return PipeResponse[HttpMetricsRow].build(
      [self._to_metrics_row(rows[0] if rows else None)], elapsed, rows_read=len(rows)
    )

  def _to_metrics_row(self, row: RowMapping | None) -> HttpMetricsRow:
    if row is None:
      return HttpMetricsRow()
    values: dict[str, Any] = {name: float(row[name] or 0) for name in PERCENTILES}
    for name in ('count', 'success', 'degraded', 'error'):
      values[name] = int(row[name] or 0)
    values['last_timestamp'] = _epoch_ms(row['last_time'])
    return HttpMetricsRow(**values)

  def http_status_weekly(self, monitor_id: str, timeout: float | None = None) -> PipeResponse[HttpStatusWeeklyRow]:
    """Per-day totals over the trailing 7 days.

    Days without rows are omitted rather than zero-filled.

    Args:
        monitor_id: Monitor to aggregate
    """
    params = parse_model(MonitorParams, {'monitor_id': monitor_id})

    day = func.date_trunc(literal_column("'day'"), http.time).label('day')
    statement = (
      select(
        day,
        func.count().label('count'),
        func.count().filter(ok_condition()).label('ok'),
      )
      .where(http.monitor_id == params.monitor_id, http.time >= self.clock() - WEEKLY_WINDOW)
      .group_by(day)
      .order_by(day)
    )

    rows, elapsed = self._fetch('http_status_weekly', statement, timeout)
    data = [
      HttpStatusWeeklyRow(day=row['day'], count=int(row['count']), ok=int(row['ok']))
      for row in rows
    ]
    return PipeResponse[HttpStatusWeeklyRow].build(data, elapsed)

  def http_status_45d(self, monitor_id: str, timeout: float | None = None) -> PipeResponse[HttpStatus45dRow]:
    """Per-second status counts over the trailing 45 days, oldest first.

    Args:
        monitor_id: Monitor to aggregate
    """
    params = parse_model(MonitorParams, {'monitor_id': monitor_id})

    bucket = func.date_trunc(literal_column("'second'"), http.time).label('bucket')
    statement = (
      select(
        bucket,
        func.count().label('count'),
        func.count().filter(ok_condition()).label('ok'),
        func.count().filter(error_condition()).label('error'),
        func.count().filter(degraded_condition()).label('degraded'),
      )
      .where(http.monitor_id == params.monitor_id, http.time >= self.clock() - STATUS_45D_WINDOW)
      .group_by(bucket)
      .order_by(bucket)
    )

    rows, elapsed = self._fetch('http_status_45d', statement, timeout)
    data = [
      HttpStatus45dRow(
        timestamp=row['bucket'],
        count=int(row['count']),
        ok=int(row['ok']),
        error=int(row['error']),
        degraded=int(row['degraded']),
      )
      for row in rows
    ]
    return PipeResponse[HttpStatus45dRow].build(data, elapsed)

  def get_audit_log(
    self,
    monitor_id: str | None = None,
    interval: int | None = None,
    timeout: float | None = None,
  ) -> PipeResponse[AuditLogRow]:
    """Audit events in a trailing window, most recent first.

    Args:
        monitor_id: Only events whose metadata carries this monitorId (all if None)
        interval: Window length in whole days, 1-365 (default 30)
        timeout: Connection acquisition timeout (pool default if None)
    """
    raw: dict[str, Any] = {'monitor_id': monitor_id}
    if interval is not None:
      raw['interval'] = interval
    params = parse_model(AuditLogParams, raw)

    audit = AuditLogRecord
    statement = (
      select(audit.action, audit.id, audit.event_metadata.label('metadata'), audit.time)
      .where(audit.time >= self.clock() - timedelta(days=params.interval))
      .order_by(audit.time.desc())
    )
    if params.monitor_id is not None:
      statement = statement.where(audit.event_metadata['monitorId'].astext == params.monitor_id)

    rows, elapsed = self._fetch('get_audit_log', statement, timeout)
    data = [
      AuditLogRow(
        action=row['action'],
        id=row['id'],
        metadata=row['metadata'] or {},
        timestamp=_epoch_ms(row['time']),
      )
      for row in rows
    ]
    return PipeResponse[AuditLogRow].build(data, elapsed)

  def _fetch(self, operation: str, statement, timeout: float | None = None) -> tuple[list[RowMapping], float]:
    """Run one statement on one scoped connection.

    Returns:
        Tuple of (rows as mappings, elapsed seconds)
    """
    started = time.perf_counter()
    try:
      with self.pool.acquire(operation, timeout) as conn:
        rows = list(conn.execute(statement).mappings().all())
    except ProbeStoreError as e:
      record_query_duration(operation, 'failure', time.perf_counter() - started)
      logger.error(
        'Query failed', operation=operation, error_type=type(e).__name__, error_message=str(e)
      )
      raise

    elapsed = time.perf_counter() - started
    record_query_duration(operation, 'success', elapsed)
    logger.debug(
      'Query completed', operation=operation, rows=len(rows), duration_ms=round(elapsed * 1000, 2)
    )
    return rows, elapsed
