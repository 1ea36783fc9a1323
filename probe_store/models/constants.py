"""Closed enumerations shared by validation and the query catalog."""

from enum import Enum

JOB_TYPES = ('http', 'tcp', 'imcp', 'udp', 'dns', 'ssl')

PERIODS = ('1h', '1d', '3d', '7d', '14d', '45d')

TRIGGERS = ('cron', 'api')

# Rolling windows accepted by the home summary
HOME_STATS_PERIODS = ('10m', '1h', '1d', '1w', '1m')

FLY_REGIONS = (
  'ams', 'arn', 'atl', 'bog', 'bom', 'bos', 'cdg', 'den', 'dfw',
  'ewr', 'eze', 'fra', 'gdl', 'gig', 'gru', 'hkg', 'iad', 'jnb',
  'lax', 'lhr', 'mad', 'mia', 'nrt', 'ord', 'otp', 'phx', 'qro',
  'scl', 'sea', 'sin', 'sjc', 'syd', 'waw', 'yul', 'yyz',
)


class JobType(str, Enum):
  """Kind of check that produced a result."""
  HTTP = 'http'
  TCP = 'tcp'
  IMCP = 'imcp'
  UDP = 'udp'
  DNS = 'dns'
  SSL = 'ssl'


class Trigger(str, Enum):
  """Whether a probe ran on its schedule or was requested on demand."""
  CRON = 'cron'
  API = 'api'


class RequestStatus(str, Enum):
  """Read-time classification of a probe result. Never stored."""
  SUCCESS = 'success'
  DEGRADED = 'degraded'
  ERROR = 'error'


def classify_request_status(error: bool, status_code: int | None) -> RequestStatus:
  """Classify a result from its error flag and HTTP status code.

  The error flag wins over any status code; a missing status code with no
  error flag counts as success.
  """
  if error or (status_code is not None and status_code >= 400):
    return RequestStatus.ERROR
  if status_code is not None and 300 <= status_code < 400:
    return RequestStatus.DEGRADED
  return RequestStatus.SUCCESS
