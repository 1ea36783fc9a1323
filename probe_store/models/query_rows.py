"""Row shapes returned by each catalog query (camelCase on the wire)."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from probe_store.models.constants import JobType, RequestStatus
from probe_store.models.probe_result import TimingPhases


class QueryRow(BaseModel):
  model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, use_enum_values=True)


class HomeStatsRow(QueryRow):
  count: int = Field(..., ge=0)


class HttpListRow(QueryRow):
  """One HTTP result with its read-time classification."""

  type: JobType = JobType.HTTP
  id: str | None = None
  monitor_id: str
  latency: int
  status_code: int | None = None
  region: str
  cron_timestamp: int
  timestamp: int = Field(..., description='Event time (epoch milliseconds)')
  timing: TimingPhases | None = None
  request_status: RequestStatus
  trigger: str


class HttpMetricsRow(QueryRow):
  """Latency percentiles and classification counts over a window."""

  p50_latency: float = 0.0
  p75_latency: float = 0.0
  p90_latency: float = 0.0
  p95_latency: float = 0.0
  p99_latency: float = 0.0
  count: int = 0
  success: int = 0
  degraded: int = 0
  error: int = 0
  last_timestamp: int | None = None


class HttpStatusWeeklyRow(QueryRow):
  day: datetime = Field(..., description='Start of the UTC day')
  count: int
  ok: int


class HttpStatus45dRow(QueryRow):
  timestamp: datetime
  count: int
  ok: int
  error: int
  degraded: int


class AuditLogRow(QueryRow):
  action: str
  id: str
  metadata: dict[str, Any] = Field(default_factory=dict)
  timestamp: int
