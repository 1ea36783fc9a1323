"""Contract tests for the pipes and events HTTP API.

The application is built around a mocked TimescaleClient so only routing,
parameter parsing, error mapping and response shapes are exercised.
"""

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from probe_store.app import create_app
from probe_store.client import TimescaleClient
from probe_store.lib.errors import ConnectionTimeoutError, PoolClosedError, StorageError, ValidationError
from probe_store.models.pipe_response import PipeResponse
from probe_store.models.query_rows import AuditLogRow, HomeStatsRow, HttpMetricsRow

pytestmark = pytest.mark.contract


@pytest.fixture
def store_client(mock_pool):
  client = MagicMock(spec=TimescaleClient)
  client.pool = mock_pool
  return client


@pytest.fixture
def api(store_client):
  with TestClient(create_app(store_client)) as test_client:
    yield test_client


class TestPipes:
  def test_home_stats_envelope(self, api, store_client):
    store_client.home_stats.return_value = PipeResponse[HomeStatsRow].build([HomeStatsRow(count=42)], 0.003)

    response = api.get('/v0/pipes/home_stats.json', params={'period': '1d'})

    assert response.status_code == 200
    assert response.json() == {
      'data': [{'count': 42}],
      'meta': {},
      'rows': 1,
      'statistics': {'elapsed': 0.003, 'rows_read': 1},
    }
    store_client.home_stats.assert_called_once_with('1d')

  def test_metrics_regions_split_on_commas(self, api, store_client):
    store_client.http_metrics_daily.return_value = PipeResponse[HttpMetricsRow].build([HttpMetricsRow()], 0.0)

    response = api.get('/v0/pipes/http_metrics_daily.json', params={'monitorId': 'mon_1', 'regions': 'ams, fra,'})

    assert response.status_code == 200
    assert response.json()['data'][0]['p99Latency'] == 0.0
    store_client.http_metrics_daily.assert_called_once_with('mon_1', ['ams', 'fra'])

  def test_list_range_parameters_passed_through(self, api, store_client):
    store_client.http_list_daily.return_value = PipeResponse.build([], 0.0)

    api.get('/v0/pipes/http_list_daily.json', params={'monitorId': 'm', 'fromDate': 1, 'toDate': 2})

    store_client.http_list_daily.assert_called_once_with('m', 1, 2)

  def test_audit_log_defaults(self, api, store_client):
    store_client.get_audit_log.return_value = PipeResponse[AuditLogRow].build([], 0.0)

    response = api.get('/v0/pipes/audit_log.json')

    assert response.json()['data'] == []
    store_client.get_audit_log.assert_called_once_with(None, None)

  def test_non_integer_interval_is_400(self, api, store_client):
    response = api.get('/v0/pipes/audit_log.json', params={'interval': 'abc'})

    assert response.status_code == 400
    body = response.json()
    assert body['error_code'] == 'VALIDATION_ERROR'
    assert body['errors'][0]['field'] == 'interval'
    store_client.get_audit_log.assert_not_called()

  def test_unknown_pipe_is_404(self, api):
    assert api.get('/v0/pipes/nope.json').status_code == 404


class TestErrorMapping:
  @pytest.mark.parametrize(
    'error,status_code,error_code',
    [
      (ValidationError('Invalid MonitorParams: monitorId', [
        {'field': 'monitorId', 'constraint': 'missing', 'message': 'Field required'},
      ]), 400, 'VALIDATION_ERROR'),
      (ConnectionTimeoutError('http_status_weekly', 2.0), 503, 'CONNECTION_TIMEOUT'),
      (PoolClosedError('http_status_weekly'), 503, 'POOL_CLOSED'),
      (StorageError('http_status_weekly', RuntimeError('relation does not exist')), 500, 'STORAGE_ERROR'),
    ],
  )
  def test_store_errors_mapped_to_status(self, api, store_client, error, status_code, error_code):
    store_client.http_status_weekly.side_effect = error

    response = api.get('/v0/pipes/http_status_weekly.json', params={'monitorId': 'm'})

    assert response.status_code == status_code
    assert response.json()['error_code'] == error_code
    assert response.json()['message'] == str(error)

  def test_validation_errors_listed(self, api, store_client):
    store_client.http_status_45d.side_effect = ValidationError('Invalid', [
      {'field': 'monitorId', 'constraint': 'missing', 'message': 'Field required'},
    ])

    response = api.get('/v0/pipes/http_status_45d.json')

    assert response.json()['errors'] == [
      {'field': 'monitorId', 'constraint': 'missing', 'message': 'Field required'},
    ]


class TestEvents:
  def test_single_record_inserted(self, api, store_client, http_payload):
    response = api.post('/v0/events', params={'name': 'http_responses'}, json=http_payload)

    assert response.status_code == 200
    assert response.json() == {'successful_rows': 1, 'quarantined_rows': 0}
    inserted = store_client.insert_http_response.call_args[0][0]
    assert inserted.monitor_id == 'mon_123'

  def test_batch_inserted_in_order(self, api, store_client, tcp_payload):
    second = {**tcp_payload, 'monitorId': 'mon_tcp_2'}

    response = api.post('/v0/events', params={'name': 'tcp_responses'}, json=[tcp_payload, second])

    assert response.json()['successful_rows'] == 2
    monitors = [call.args[0].monitor_id for call in store_client.insert_tcp_response.call_args_list]
    assert monitors == ['mon_tcp', 'mon_tcp_2']

  def test_audit_log_event(self, api, store_client, audit_payload):
    response = api.post('/v0/events', params={'name': 'audit_logs'}, json=audit_payload)

    assert response.status_code == 200
    assert store_client.insert_audit_log.call_args[0][0].version == 1

  def test_invalid_record_rejects_whole_batch(self, api, store_client, http_payload):
    invalid = {**http_payload, 'region': 'zzz'}

    response = api.post('/v0/events', params={'name': 'http_responses'}, json=[http_payload, invalid])

    assert response.status_code == 400
    assert response.json()['errors'][0]['field'] == '[1].region'
    store_client.insert_http_response.assert_not_called()

  def test_unknown_datasource_is_400(self, api, store_client, http_payload):
    response = api.post('/v0/events', params={'name': 'udp_responses'}, json=http_payload)

    assert response.status_code == 400
    assert response.json()['errors'][0]['field'] == 'name'

  def test_insert_failure_is_500(self, api, store_client, http_payload):
    store_client.insert_http_response.side_effect = StorageError('insert_http_response', RuntimeError('x'))

    response = api.post('/v0/events', params={'name': 'http_responses'}, json=http_payload)

    assert response.status_code == 500
    assert response.json()['error_code'] == 'STORAGE_ERROR'


class TestOperationalEndpoints:
  def test_health_reports_pool(self, api):
    response = api.get('/health')

    assert response.status_code == 200
    assert response.json() == {
      'status': 'healthy',
      'pool': {'max_size': 20, 'in_use': 0, 'closed': False},
    }

  def test_metrics_exposes_store_metrics(self, api):
    response = api.get('/metrics')

    assert response.status_code == 200
    assert 'probe_store_query_duration_seconds' in response.text
    assert 'probe_store_pool_connections_in_use' in response.text

  def test_correlation_id_echoed(self, api):
    response = api.get('/health', headers={'X-Correlation-ID': 'cid-42'})

    assert response.headers['X-Correlation-ID'] == 'cid-42'

  def test_correlation_id_generated(self, api):
    response = api.get('/health')

    assert len(response.headers['X-Correlation-ID']) == 36

  def test_injected_client_not_closed_on_shutdown(self, store_client):
    with TestClient(create_app(store_client)):
      pass

    store_client.close.assert_not_called()
