from datetime import datetime, timezone
from typing import Any

from pydantic import Field, field_validator

from probe_store.models.probe_result import WireModel


class AuditLog(WireModel):
  """
  Audit event recorded against a workspace.
  A monitor can be correlated through the ``monitorId`` key inside metadata.
  """

  timestamp: int = Field(..., ge=0, description='Event time (epoch milliseconds)')
  id: str = Field(..., min_length=1, description='Event identifier')
  action: str = Field(..., min_length=1, description='Verb, e.g. monitor.failed')
  actor: str = Field(..., description='Who or what performed the action')
  targets: dict[str, Any] | None = Field(default=None)
  metadata: dict[str, Any] | None = Field(default=None)
  version: int = Field(default=1, ge=0)

  @field_validator('version')
  @classmethod
  def default_version(cls, v: int) -> int:
    return v or 1

  @property
  def time(self) -> datetime:
    return datetime.fromtimestamp(self.timestamp / 1000, tz=timezone.utc)
