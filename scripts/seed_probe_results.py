"""Sample Data Script for the Probe Result Store.

Generates realistic HTTP and TCP probe results plus audit events and writes
them through the ingestion service, then prints the query catalog's view of
them.

Commands:
- seed: Insert sample results for one monitor
- summary: Print home stats and the 24-hour metrics for one monitor

The tables must already exist; this script does not create schema.
"""

import random
import sys
import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from probe_store.client import TimescaleClient
from probe_store.lib.errors import ProbeStoreError
from probe_store.models.audit_log import AuditLog
from probe_store.models.constants import FLY_REGIONS
from probe_store.models.probe_result import HttpResponse, TcpResponse

console = Console()

# Weighted status codes: mostly healthy, some redirects and failures
STATUS_CODES = [200] * 16 + [301, 302, 404, 500]


def _load_env() -> None:
  env_path = Path.cwd() / '.env.local'
  if env_path.exists():
    load_dotenv(env_path)
    console.print(f'[dim]Loaded environment from {env_path}[/dim]')


def _epoch_ms(value: datetime) -> int:
  return int(value.timestamp() * 1000)


def sample_timing(rng: random.Random, started_ms: int) -> dict[str, int]:
  """Consecutive DNS, connect, TLS, first-byte and transfer phases."""
  timing, cursor = {}, started_ms
  for start, done, low, high in (
    ('dnsStart', 'dnsDone', 1, 30),
    ('connectStart', 'connectDone', 5, 60),
    ('tlsHandshakeStart', 'tlsHandshakeDone', 10, 80),
    ('firstByteStart', 'firstByteDone', 20, 300),
    ('transferStart', 'transferDone', 1, 50),
  ):
    timing[start] = cursor
    cursor += rng.randint(low, high)
    timing[done] = cursor
  return timing


def generate_http_results(
  monitor_id: str,
  workspace_id: str,
  count: int,
  now: datetime,
  regions: list[str],
  rng: random.Random,
) -> list[HttpResponse]:
  """Build ``count`` HTTP results spread over the trailing 24 hours."""
  results = []
  for _ in range(count):
    at = now - timedelta(seconds=rng.randint(0, 24 * 3600 - 1))
    timestamp = _epoch_ms(at)
    timing = sample_timing(rng, timestamp)
    status_code = rng.choice(STATUS_CODES)
    results.append(HttpResponse(
      timestamp=timestamp,
      monitor_id=monitor_id,
      workspace_id=workspace_id,
      region=rng.choice(regions),
      url='https://example.com/health',
      latency=timing['transferDone'] - timing['dnsStart'],
      status_code=status_code,
      error=False,
      cron_timestamp=_epoch_ms(at.replace(second=0, microsecond=0)),
      timing=timing,
      headers={'content-type': 'application/json'},
      trigger=rng.choice(['cron', 'cron', 'cron', 'api']),
    ))
  return results


def generate_tcp_results(
  monitor_id: str,
  workspace_id: str,
  count: int,
  now: datetime,
  regions: list[str],
  rng: random.Random,
) -> list[TcpResponse]:
  """Build ``count`` TCP results spread over the trailing 24 hours."""
  results = []
  for _ in range(count):
    at = now - timedelta(seconds=rng.randint(0, 24 * 3600 - 1))
    failed = rng.random() < 0.1
    results.append(TcpResponse(
      timestamp=_epoch_ms(at),
      monitor_id=monitor_id,
      workspace_id=workspace_id,
      region=rng.choice(regions),
      uri='example.com:443',
      latency=rng.randint(5, 120),
      error=failed,
      cron_timestamp=_epoch_ms(at.replace(second=0, microsecond=0)),
      error_message='connection refused' if failed else None,
    ))
  return results


def generate_audit_logs(monitor_id: str, count: int, now: datetime, rng: random.Random) -> list[AuditLog]:
  actions = ['monitor.failed', 'monitor.recovered', 'monitor.degraded']
  return [
    AuditLog(
      timestamp=_epoch_ms(now - timedelta(days=rng.randint(0, 29), minutes=rng.randint(0, 1439))),
      id=f'sample_{uuid.uuid4().hex[:12]}',
      action=rng.choice(actions),
      actor='seed-script',
      targets={'type': 'monitor', 'id': monitor_id},
      metadata={'monitorId': monitor_id, 'region': rng.choice(FLY_REGIONS)},
    )
    for _ in range(count)
  ]


@click.group()
def cli():
  """Sample data for the probe result store."""
  _load_env()


@cli.command()
@click.option('--monitor-id', default='sample_monitor', help='Monitor to attribute results to')
@click.option('--workspace-id', default='sample_workspace', help='Owning workspace')
@click.option('--http', 'http_count', default=200, type=int, help='Number of HTTP results')
@click.option('--tcp', 'tcp_count', default=50, type=int, help='Number of TCP results')
@click.option('--audit', 'audit_count', default=10, type=int, help='Number of audit events')
@click.option('--regions', default='ams,fra,iad,sin', help='Comma-separated regions to sample from')
@click.option('--seed', default=None, type=int, help='Random seed for reproducible data')
def seed(monitor_id, workspace_id, http_count, tcp_count, audit_count, regions, seed):
  """Insert sample probe results and audit events."""
  rng = random.Random(seed)
  region_list = [region.strip() for region in regions.split(',') if region.strip()]
  unknown = [region for region in region_list if region not in FLY_REGIONS]
  if unknown or not region_list:
    console.print(f'[red]Error: unsupported regions: {", ".join(unknown) or "(none given)"}[/red]')
    sys.exit(1)

  now = datetime.now(timezone.utc)
  http_results = generate_http_results(monitor_id, workspace_id, http_count, now, region_list, rng)
  tcp_results = generate_tcp_results(monitor_id, workspace_id, tcp_count, now, region_list, rng)
  audit_logs = generate_audit_logs(monitor_id, audit_count, now, rng)

  console.print('\n[bold]Seeding probe results...[/bold]')
  try:
    with TimescaleClient.from_settings(ping=True) as client:
      console.print(f'[cyan]1. Inserting {len(http_results)} HTTP results...[/cyan]')
      for result in http_results:
        client.insert_http_response(result)
      console.print(f'[cyan]2. Inserting {len(tcp_results)} TCP results...[/cyan]')
      for result in tcp_results:
        client.insert_tcp_response(result)
      console.print(f'[cyan]3. Inserting {len(audit_logs)} audit events...[/cyan]')
      for entry in audit_logs:
        client.insert_audit_log(entry)
  except (ProbeStoreError, ValueError) as e:
    console.print(f'[red]Error seeding sample data: {e}[/red]')
    sys.exit(1)

  console.print('\n[green]✓ Sample data created successfully![/green]')
  console.print(f'  Monitor: {monitor_id}')


@cli.command()
@click.option('--monitor-id', default='sample_monitor', help='Monitor to summarize')
@click.option('--period', default=None, help='Home stats window (10m, 1h, 1d, 1w, 1m)')
def summary(monitor_id, period):
  """Print home stats and 24-hour metrics for a monitor."""
  try:
    with TimescaleClient.from_settings() as client:
      home = client.home_stats(period)
      metrics = client.http_metrics_daily(monitor_id)
  except (ProbeStoreError, ValueError) as e:
    console.print(f'[red]Error querying probe store: {e}[/red]')
    sys.exit(1)

  console.print(f'\n[bold]Total results[/bold] ({period or "all time"}): {home.data[0].count}')

  row = metrics.data[0]
  table = Table(title=f'Last 24h: {monitor_id}')
  table.add_column('Metric', style='cyan')
  table.add_column('Value', justify='right')
  for label, value in (
    ('p50 latency (ms)', f'{row.p50_latency:.1f}'),
    ('p95 latency (ms)', f'{row.p95_latency:.1f}'),
    ('p99 latency (ms)', f'{row.p99_latency:.1f}'),
    ('count', str(row.count)),
    ('success', str(row.success)),
    ('degraded', str(row.degraded)),
    ('error', str(row.error)),
  ):
    table.add_row(label, value)
  console.print(table)
  console.print(f'[dim]Query time: {metrics.statistics.elapsed * 1000:.1f} ms[/dim]')


if __name__ == '__main__':
  cli()
