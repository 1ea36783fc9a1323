"""Table definitions for the probe result time-series family.

Rows are append-only. ``timing``, ``headers``, ``assertions`` and
``targets`` hold serialized JSON text stored as given; audit ``metadata`` is
JSONB so it can be filtered on ``monitorId``.
"""

from sqlalchemy import BigInteger, Boolean, Column, DateTime, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class HttpResponseRecord(Base):
  """One row per HTTP check execution, keyed by (time, monitor_id, region)."""

  __tablename__ = 'http_responses'

  time = Column(DateTime(timezone=True), primary_key=True)
  monitor_id = Column(String(256), primary_key=True)
  region = Column(String(8), primary_key=True)
  workspace_id = Column(String(256), nullable=False)
  url = Column(Text, nullable=False)
  latency = Column(Integer, nullable=False)
  status_code = Column(Integer, nullable=True)
  error = Column(Boolean, nullable=False)
  cron_timestamp = Column(BigInteger, nullable=False)
  message = Column(Text, nullable=True)
  timing = Column(Text, nullable=True)
  headers = Column(Text, nullable=True)
  assertions = Column(Text, nullable=True)
  body = Column(Text, nullable=True)
  trigger = Column(String(16), nullable=False, default='cron')

  __table_args__ = (
    Index('ix_http_responses_monitor_id_time', 'monitor_id', 'time'),
  )


class TcpResponseRecord(Base):
  """One row per TCP check execution."""

  __tablename__ = 'tcp_responses'

  time = Column(DateTime(timezone=True), primary_key=True)
  monitor_id = Column(String(256), primary_key=True)
  region = Column(String(8), primary_key=True)
  workspace_id = Column(String(256), nullable=False)
  uri = Column(Text, nullable=True)
  latency = Column(BigInteger, nullable=False)
  error = Column(Boolean, nullable=False)
  cron_timestamp = Column(BigInteger, nullable=False)
  error_message = Column(Text, nullable=True)
  trigger = Column(String(16), nullable=False, default='cron')


class AuditLogRecord(Base):
  """Audit events; ``metadata`` may carry a ``monitorId`` correlation key."""

  __tablename__ = 'audit_logs'

  time = Column(DateTime(timezone=True), primary_key=True)
  id = Column(String(256), primary_key=True)
  action = Column(String(256), nullable=False)
  actor = Column(String(256), nullable=False)
  targets = Column(Text, nullable=True)
  # "metadata" is reserved on declarative classes
  event_metadata = Column('metadata', JSONB, nullable=True)
  version = Column(Integer, nullable=False, default=1)

  __table_args__ = (
    Index('ix_audit_logs_time', 'time'),
  )
