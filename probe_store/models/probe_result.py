"""Probe result Pydantic models.

Represents one recorded outcome of an HTTP or TCP check as produced by the
probe runners. Wire names are camelCase; attributes are snake_case.
"""

from datetime import datetime, timezone
from typing import Any

from pydantic import AnyUrl, BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from probe_store.models.constants import FLY_REGIONS, Trigger

Instant = int | float

_absolute_url = TypeAdapter(AnyUrl)


class WireModel(BaseModel):
  """Immutable model that reads and writes camelCase wire names."""

  model_config = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    use_enum_values=True,
    frozen=True,
  )


class HttpTiming(WireModel):
  """Raw sub-timestamps recorded during one HTTP probe. All ten are required."""

  dns_start: Instant
  dns_done: Instant
  connect_start: Instant
  connect_done: Instant
  tls_handshake_start: Instant
  tls_handshake_done: Instant
  first_byte_start: Instant
  first_byte_done: Instant
  transfer_start: Instant
  transfer_done: Instant


class TimingPhases(WireModel):
  """Latency phase durations derived from an HttpTiming block."""

  dns: Instant
  connect: Instant
  tls: Instant
  ttfb: Instant
  transfer: Instant


class ProbeResult(WireModel):
  """Fields shared by every probe result variant."""

  timestamp: int = Field(..., ge=0, description='Event time (epoch milliseconds)')
  monitor_id: str = Field(..., min_length=1, description='Owning monitor')
  workspace_id: str = Field(..., min_length=1, description='Owning workspace')
  region: str = Field(..., description='Deployment region the probe ran in')
  latency: int = Field(..., ge=0, description='Total latency in milliseconds')
  error: bool = Field(..., description='Explicit probe failure flag')
  cron_timestamp: int = Field(..., description='Scheduling epoch of the job run')
  trigger: Trigger | None = Field(default=None, description='cron or api (cron when absent)')

  @field_validator('region')
  @classmethod
  def validate_region(cls, v: str) -> str:
    if v not in FLY_REGIONS:
      raise PydanticCustomError(
        'region', "region '{region}' is not a supported region", {'region': v}
      )
    return v

  @property
  def time(self) -> datetime:
    """Event time as a timezone-aware UTC datetime."""
    return datetime.fromtimestamp(self.timestamp / 1000, tz=timezone.utc)


class HttpResponse(ProbeResult):
  """Outcome of one HTTP check execution."""

  url: str = Field(..., description='Absolute URL that was probed')
  status_code: int | None = Field(default=None, description='HTTP status code, if any')
  message: str | None = Field(default=None, description='Diagnostic text')
  timing: HttpTiming | None = Field(default=None, description='Raw phase sub-timestamps')
  headers: dict[str, str] | None = Field(default=None, description='Response headers')
  assertions: dict[str, Any] | None = Field(default=None, description='Assertion results')
  body: str | None = Field(default=None, description='Captured response body')

  @field_validator('url')
  @classmethod
  def validate_url(cls, v: str) -> str:
    """Validate the URL is absolute; the original string is kept as given."""
    try:
      _absolute_url.validate_python(v)
    except ValueError:
      raise PydanticCustomError('url_parsing', "'{url}' is not a valid absolute URL", {'url': v})
    return v


class TcpResponse(ProbeResult):
  """Outcome of one TCP check execution."""

  uri: str | None = Field(default=None, description='host:port that was probed')
  error_message: str | None = Field(default=None, description='Failure detail')
