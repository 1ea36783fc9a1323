"""Parameter models for the query catalog.

Every catalog operation validates its inputs through one of these models
before acquiring a connection, so only validated primitives ever reach a
statement (and always as bound parameters).
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from probe_store.models.constants import FLY_REGIONS, HOME_STATS_PERIODS

MAX_AUDIT_LOG_INTERVAL_DAYS = 365


class QueryParams(BaseModel):
  model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class HomeStatsParams(QueryParams):
  """Home summary: optional rolling window."""

  period: str | None = Field(default=None, description='10m, 1h, 1d, 1w or 1m')

  @field_validator('period')
  @classmethod
  def validate_period(cls, v: str | None) -> str | None:
    if v is not None and v not in HOME_STATS_PERIODS:
      raise PydanticCustomError(
        'period', "period '{period}' must be one of {allowed}",
        {'period': v, 'allowed': ', '.join(HOME_STATS_PERIODS)},
      )
    return v


class MonitorParams(QueryParams):
  monitor_id: str = Field(..., min_length=1)


class HttpListDailyParams(MonitorParams):
  """Per-monitor list: trailing 24 hours unless both bounds are given."""

  from_date: int | None = Field(default=None, ge=0, description='Range start (epoch ms)')
  to_date: int | None = Field(default=None, ge=0, description='Range end (epoch ms)')

  @model_validator(mode='after')
  def validate_range(self) -> 'HttpListDailyParams':
    if (self.from_date is None) != (self.to_date is None):
      raise PydanticCustomError('date_range', 'fromDate and toDate must be given together')
    if self.from_date is not None and self.from_date > self.to_date:
      raise PydanticCustomError('date_range', 'fromDate must not be after toDate')
    return self


class HttpMetricsDailyParams(MonitorParams):
  """Per-monitor metrics: optional region subset."""

  regions: list[str] | None = Field(default=None)

  @field_validator('regions')
  @classmethod
  def validate_regions(cls, v: list[str] | None) -> list[str] | None:
    if v is None:
      return None
    unknown = [region for region in v if region not in FLY_REGIONS]
    if unknown:
      raise PydanticCustomError(
        'region', 'unsupported regions: {regions}', {'regions': ', '.join(unknown)}
      )
    return v


class AuditLogParams(QueryParams):
  """Audit log window in whole days, optionally narrowed to one monitor."""

  monitor_id: str | None = Field(default=None, min_length=1)
  interval: int = Field(default=30, ge=1, le=MAX_AUDIT_LOG_INTERVAL_DAYS)

  @field_validator('interval', mode='before')
  @classmethod
  def reject_non_integers(cls, v: Any) -> Any:
    # bool is an int subclass and would otherwise pass as 0/1 days
    if isinstance(v, bool):
      raise PydanticCustomError('int_type', 'interval must be a whole number of days')
    return v
