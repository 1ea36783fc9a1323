"""Shared test fixtures for unit, contract and integration tests.

Unit and contract tests never touch storage: services receive a mocked
``ConnectionPool`` whose ``acquire`` yields a mocked connection (see ``tests/helpers.py``).
"""

from contextlib import contextmanager
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from probe_store.lib.database import ConnectionPool
from tests.helpers import set_rows

FIXED_NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


def pytest_configure(config):
  """Register custom markers."""
  config.addinivalue_line('markers', 'unit: Pure logic tests with no I/O')
  config.addinivalue_line('markers', 'contract: Service and API contract tests against mocks')
  config.addinivalue_line('markers', 'integration: Tests against a real PostgreSQL server (need TIMESCALE_URL)')


@pytest.fixture
def fixed_now() -> datetime:
  return FIXED_NOW


@pytest.fixture
def clock():
  return lambda: FIXED_NOW


@pytest.fixture
def mock_connection() -> MagicMock:
  connection = MagicMock()
  set_rows(connection, [])
  return connection


@pytest.fixture
def mock_pool(mock_connection) -> MagicMock:
  """ConnectionPool double whose acquire() yields ``mock_connection``."""
  pool = MagicMock(spec=ConnectionPool)

  @contextmanager
  def acquire(operation, timeout=None):
    yield mock_connection

  pool.acquire.side_effect = acquire
  pool.status.return_value = {'max_size': 20, 'in_use': 0, 'closed': False}
  return pool


@pytest.fixture
def timing_payload() -> dict:
  """Raw timing block with dns=10, connect=20, tls=30, ttfb=40, transfer=5."""
  return {
    'dnsStart': 1000,
    'dnsDone': 1010,
    'connectStart': 1010,
    'connectDone': 1030,
    'tlsHandshakeStart': 1030,
    'tlsHandshakeDone': 1060,
    'firstByteStart': 1060,
    'firstByteDone': 1100,
    'transferStart': 1100,
    'transferDone': 1105,
  }


@pytest.fixture
def http_payload(timing_payload) -> dict:
  """Valid HTTP probe result as a runner would send it."""
  return {
    'timestamp': 1714564800000,
    'monitorId': 'mon_123',
    'workspaceId': 'ws_1',
    'region': 'ams',
    'url': 'https://example.com/health',
    'latency': 105,
    'statusCode': 200,
    'error': False,
    'cronTimestamp': 1714564800000,
    'message': None,
    'timing': timing_payload,
    'headers': {'content-type': 'text/html'},
  }


@pytest.fixture
def tcp_payload() -> dict:
  return {
    'timestamp': 1714564800000,
    'monitorId': 'mon_tcp',
    'workspaceId': 'ws_1',
    'region': 'fra',
    'uri': 'example.com:443',
    'latency': 12,
    'error': True,
    'cronTimestamp': 1714564800000,
    'errorMessage': 'connection refused',
    'trigger': 'api',
  }


@pytest.fixture
def audit_payload() -> dict:
  return {
    'timestamp': 1714564800000,
    'id': 'evt_1',
    'action': 'monitor.failed',
    'actor': 'checker',
    'targets': {'type': 'monitor', 'id': 'mon_123'},
    'metadata': {'monitorId': 'mon_123', 'region': 'ams'},
    'version': 0,
  }
