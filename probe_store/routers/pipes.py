"""Pipes API: the query catalog over HTTP.

Each endpoint answers with the ``{data, meta, rows, statistics}`` envelope.
Query parameter names follow the camelCase wire format. Input errors come
back as 400 from the service-level validation, not from FastAPI.
"""

from typing import Any, Optional

from fastapi import APIRouter, Depends, Query

from probe_store.client import TimescaleClient
from probe_store.routers import get_client

router = APIRouter(prefix='/v0/pipes', tags=['Pipes'])


def _split_regions(regions: Optional[str]) -> Optional[list[str]]:
  """Parse a comma-separated region list; blank entries are ignored."""
  if regions is None:
    return None
  return [region.strip() for region in regions.split(',') if region.strip()]


@router.get('/home_stats.json')
def home_stats(
  period: Optional[str] = Query(None, description='10m, 1h, 1d, 1w or 1m'),
  client: TimescaleClient = Depends(get_client),
) -> dict[str, Any]:
  """Total probe results across HTTP and TCP."""
  return client.home_stats(period).to_dict()


@router.get('/http_list_daily.json')
def http_list_daily(
  monitor_id: Optional[str] = Query(None, alias='monitorId'),
  from_date: Optional[int] = Query(None, alias='fromDate', description='Epoch milliseconds'),
  to_date: Optional[int] = Query(None, alias='toDate', description='Epoch milliseconds'),
  client: TimescaleClient = Depends(get_client),
) -> dict[str, Any]:
  """One monitor's HTTP results, newest first."""
  return client.http_list_daily(monitor_id, from_date, to_date).to_dict()


@router.get('/http_metrics_daily.json')
def http_metrics_daily(
  monitor_id: Optional[str] = Query(None, alias='monitorId'),
  regions: Optional[str] = Query(None, description='Comma-separated region codes'),
  client: TimescaleClient = Depends(get_client),
) -> dict[str, Any]:
  """Latency percentiles and status counts over 24 hours."""
  return client.http_metrics_daily(monitor_id, _split_regions(regions)).to_dict()


@router.get('/http_status_weekly.json')
def http_status_weekly(
  monitor_id: Optional[str] = Query(None, alias='monitorId'),
  client: TimescaleClient = Depends(get_client),
) -> dict[str, Any]:
  return client.http_status_weekly(monitor_id).to_dict()


@router.get('/http_status_45d.json')
def http_status_45d(
  monitor_id: Optional[str] = Query(None, alias='monitorId'),
  client: TimescaleClient = Depends(get_client),
) -> dict[str, Any]:
  return client.http_status_45d(monitor_id).to_dict()


@router.get('/audit_log.json')
def audit_log(
  monitor_id: Optional[str] = Query(None, alias='monitorId'),
  interval: Optional[int] = Query(None, description='Window in days (1-365, default 30)'),
  client: TimescaleClient = Depends(get_client),
) -> dict[str, Any]:
  """Audit events, newest first."""
  return client.get_audit_log(monitor_id, interval).to_dict()
