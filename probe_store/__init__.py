"""Probe result time-series store: validated ingestion and a fixed query catalog."""

from probe_store.client import TimescaleClient
from probe_store.lib.config import Settings
from probe_store.lib.database import ConnectionPool
from probe_store.lib.errors import (
  ConnectionTimeoutError,
  PoolClosedError,
  ProbeStoreError,
  StorageError,
  ValidationError,
)
from probe_store.lib.timing import calculate_timing
from probe_store.models.constants import RequestStatus, classify_request_status
from probe_store.models.validation import (
  validate_audit_log,
  validate_http_response,
  validate_tcp_response,
  validate_timing,
)

__version__ = '0.1.0'

__all__ = [
  'ConnectionPool',
  'ConnectionTimeoutError',
  'PoolClosedError',
  'ProbeStoreError',
  'RequestStatus',
  'Settings',
  'StorageError',
  'TimescaleClient',
  'ValidationError',
  'calculate_timing',
  'classify_request_status',
  'validate_audit_log',
  'validate_http_response',
  'validate_tcp_response',
  'validate_timing',
]
