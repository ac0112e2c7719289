import threading
from datetime import timedelta

from client_manager.main import app
from client_manager.shared.counters import RequestCounters
from client_manager.shared.utils import utc_now

HEALTH_URL = '/client-manager/api/v1/health'


def test_root_health(client):
    response = client.get('/')

    assert response.status_code == 200
    assert response.json()['status'] == 'healthy'


def test_api_health_with_cache(client):
    response = client.get(HEALTH_URL)

    assert response.status_code == 200
    data = response.json()
    assert data['status'] == 'healthy'
    assert data['components']['database']['status'] == 'healthy'
    assert data['components']['redis']['status'] == 'healthy'


def test_api_health_without_cache_is_degraded(make_client):
    client = make_client(None)

    data = client.get(HEALTH_URL).json()

    assert data['status'] == 'degraded'
    assert data['components']['redis']['status'] == 'disabled'


def test_api_health_with_cache_down_is_degraded(make_client, failing_redis):
    client = make_client(failing_redis)

    data = client.get(HEALTH_URL).json()

    assert data['status'] == 'degraded'
    assert data['components']['redis']['status'] == 'unhealthy'


def test_request_and_error_counters(client):
    client.get('/')
    client.get('/client-manager/api/v1/configurations/nonexistent/x')

    data = client.get(HEALTH_URL).json()

    # A propria requisicao de health ja foi contada
    assert data['request_count'] == 3
    assert data['error_count'] == 1
    assert app.state.request_counters.error_count == 1


def test_response_carries_request_ids(client):
    response = client.get('/', headers={'X-Correlation-ID': 'corr-123'})

    assert response.headers['X-Correlation-ID'] == 'corr-123'
    assert response.headers['X-Request-ID']


def test_counters_are_thread_safe():
    counters = RequestCounters()

    def hammer():
        for _ in range(1000):
            counters.record_request()
            counters.record_error()

    threads = [threading.Thread(target=hammer) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert counters.request_count == 8000
    assert counters.error_count == 8000


def test_counters_snapshot_reports_uptime():
    counters = RequestCounters()
    counters.mark_started(utc_now() - timedelta(seconds=90))
    counters.record_request()

    snapshot = counters.snapshot()

    assert snapshot['request_count'] == 1
    assert snapshot['error_count'] == 0
    assert snapshot['uptime_seconds'] >= 90
