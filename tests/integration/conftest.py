"""Integration test fixtures backed by a real PostgreSQL/TimescaleDB server.

Tests in this directory are skipped unless ``TIMESCALE_URL`` (or
``DATABASE_URL``) points at a reachable database. Tables are created from
the declarative models; rows written by a test are deleted afterwards.
"""

import uuid

import pytest
from sqlalchemy import delete

from probe_store.client import TimescaleClient
from probe_store.lib.config import Settings
from probe_store.lib.database import ConnectionPool
from probe_store.lib.errors import ConnectionTimeoutError, StorageError
from probe_store.models.tables import AuditLogRecord, Base, HttpResponseRecord, TcpResponseRecord

# every monitor and audit event created here carries this prefix
TEST_ID_PREFIX = 'it_'


@pytest.fixture(scope='session')
def integration_pool():
  """Pool against the configured database, with tables created.

  Raises:
      pytest.skip: If no database URL is configured or it cannot be reached
  """
  settings = Settings.from_env()
  if not settings.database_url:
    pytest.skip('TIMESCALE_URL environment variable not set')

  pool = ConnectionPool.create(settings)
  try:
    pool.ping()
  except (ConnectionTimeoutError, StorageError) as e:
    pool.close()
    pytest.skip(f'Database not reachable: {e}')

  Base.metadata.create_all(pool.engine)
  yield pool
  pool.close()


@pytest.fixture
def store(integration_pool):
  """Client on the shared pool; removes this test's rows afterwards."""
  yield TimescaleClient(integration_pool)

  with integration_pool.engine.begin() as conn:
    conn.execute(delete(HttpResponseRecord).where(HttpResponseRecord.monitor_id.startswith(TEST_ID_PREFIX)))
    conn.execute(delete(TcpResponseRecord).where(TcpResponseRecord.monitor_id.startswith(TEST_ID_PREFIX)))
    conn.execute(delete(AuditLogRecord).where(AuditLogRecord.id.startswith(TEST_ID_PREFIX)))


@pytest.fixture
def monitor_id() -> str:
  return f'{TEST_ID_PREFIX}{uuid.uuid4().hex}'
