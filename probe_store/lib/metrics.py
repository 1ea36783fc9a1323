"""Prometheus metrics for the ingestion path, query catalog and pool."""

from prometheus_client import Counter, Gauge, Histogram

query_duration_seconds = Histogram(
  'probe_store_query_duration_seconds',
  'Catalog query duration in seconds',
  ['operation', 'status'],
  buckets=[0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 10.0],
)

inserts_total = Counter(
  'probe_store_inserts_total',
  'Rows inserted, by table and outcome',
  ['table', 'status'],
)

pool_acquire_timeouts_total = Counter(
  'probe_store_pool_acquire_timeouts_total',
  'Connection acquisitions that exceeded their timeout',
  ['operation'],
)

pool_connections_in_use = Gauge(
  'probe_store_pool_connections_in_use',
  'Connections currently checked out of the pool',
)


def record_query_duration(operation: str, status: str, duration_seconds: float):
  """Record one catalog query.

  Args:
      operation: Catalog operation name ('http_list_daily', ...)
      status: 'success' or 'failure'
      duration_seconds: Wall-clock duration including connection wait
  """
  query_duration_seconds.labels(operation=operation, status=status).observe(duration_seconds)


def record_insert(table: str, status: str):
  """Record one insert attempt.

  Args:
      table: Target table name
      status: 'success' or 'failure'
  """
  inserts_total.labels(table=table, status=status).inc()


def record_acquire_timeout(operation: str):
  pool_acquire_timeouts_total.labels(operation=operation).inc()


def update_connections_in_use(count: int):
  pool_connections_in_use.set(count)
