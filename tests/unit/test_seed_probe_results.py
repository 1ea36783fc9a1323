"""Unit tests for the sample data script."""

import random
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from probe_store.lib.timing import calculate_timing
from probe_store.models.constants import FLY_REGIONS
from scripts.seed_probe_results import (
  cli,
  generate_audit_logs,
  generate_http_results,
  generate_tcp_results,
)

pytestmark = pytest.mark.unit


class TestGenerators:
  def test_http_results_are_valid_and_in_window(self, fixed_now):
    results = generate_http_results('mon_1', 'ws_1', 25, fixed_now, ['ams', 'fra'], random.Random(7))

    assert len(results) == 25
    window_start = int(fixed_now.timestamp() * 1000) - 24 * 3600 * 1000
    for result in results:
      assert result.region in ('ams', 'fra')
      assert window_start <= result.timestamp <= int(fixed_now.timestamp() * 1000)
      phases = calculate_timing(result.timing)
      assert result.latency == phases.dns + phases.connect + phases.tls + phases.ttfb + phases.transfer

  def test_same_seed_same_data(self, fixed_now):
    first = generate_tcp_results('m', 'w', 5, fixed_now, ['ams'], random.Random(1))
    second = generate_tcp_results('m', 'w', 5, fixed_now, ['ams'], random.Random(1))

    assert first == second

  def test_audit_logs_carry_monitor_id(self, fixed_now):
    entries = generate_audit_logs('mon_1', 3, fixed_now, random.Random(3))

    assert all(entry.metadata['monitorId'] == 'mon_1' for entry in entries)
    assert all(entry.metadata['region'] in FLY_REGIONS for entry in entries)


class TestCli:
  def test_seed_rejects_unknown_region(self):
    result = CliRunner().invoke(cli, ['seed', '--regions', 'ams,xyz'])

    assert result.exit_code == 1
    assert 'xyz' in result.output

  def test_seed_reports_missing_configuration(self):
    with patch('scripts.seed_probe_results.TimescaleClient.from_settings') as from_settings:
      from_settings.side_effect = ValueError('TIMESCALE_URL or DATABASE_URL must be set')

      result = CliRunner().invoke(cli, ['seed', '--http', '1', '--tcp', '0', '--audit', '0'])

    assert result.exit_code == 1
    assert 'TIMESCALE_URL' in result.output

  def test_seed_inserts_through_client(self):
    with patch('scripts.seed_probe_results.TimescaleClient.from_settings') as from_settings:
      client = from_settings.return_value.__enter__.return_value

      result = CliRunner().invoke(cli, ['seed', '--http', '3', '--tcp', '2', '--audit', '1', '--seed', '5'])

    assert result.exit_code == 0, result.output
    assert client.insert_http_response.call_count == 3
    assert client.insert_tcp_response.call_count == 2
    assert client.insert_audit_log.call_count == 1
