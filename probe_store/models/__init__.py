"""Models package for probe results, audit events, tables and query shapes."""

from probe_store.models.audit_log import AuditLog
from probe_store.models.pipe_response import PipeResponse, QueryStatistics
from probe_store.models.probe_result import HttpResponse, HttpTiming, TcpResponse, TimingPhases
from probe_store.models.tables import AuditLogRecord, HttpResponseRecord, TcpResponseRecord

__all__ = [
  'AuditLog',
  'AuditLogRecord',
  'HttpResponse',
  'HttpResponseRecord',
  'HttpTiming',
  'PipeResponse',
  'QueryStatistics',
  'TcpResponse',
  'TcpResponseRecord',
  'TimingPhases',
]
