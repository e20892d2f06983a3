from prometheus_client import REGISTRY
from app import errors


def test_metrics_endpoint_exposes_prometheus_after_requests(client):
    # trigger a couple of requests
    r1 = client.get('/healthz')
    assert r1.status_code == 200
    assert r1.json()['status'] == 'ok'
    r2 = client.get('/schedule/day', params={'date': '2024-03-04'})
    assert r2.status_code == 200
    client.put('/tasks/some-id', json={'title': 'x'})
    m = client.get('/metrics')
    assert m.status_code == 200
    body = m.text
    assert 'team_scheduler_requests_total' in body
    assert 'team_scheduler_layout_duration_seconds' in body
    # task ids are collapsed into one label
    assert 'path="/tasks/:id"' in body
    assert 'some-id' not in body


def test_drop_counter_recorded(client):
    labels = {'gesture': 'move', 'view': 'month', 'changed': 'true'}
    before = REGISTRY.get_sample_value('team_scheduler_drops_total', labels)
    task = client.post('/tasks', json={'title': 'a', 'assignee': 'Jeff', 'date': '2024-03-04'}).json()['task']
    r = client.post('/schedule/drop', json={
        'taskId': task['id'],
        'pointer': {'x': 0},
        'target': {'view': 'month', 'date': '2024-03-08'},
    })
    assert r.status_code == 200
    assert r.json()['task']['date'] == '2024-03-08'
    after = REGISTRY.get_sample_value('team_scheduler_drops_total', labels)
    assert after == (before or 0.0) + 1


def test_layout_errors_use_app_error_shape(client):
    r = client.get('/schedule/timeline', params={'granularity': 90})
    assert r.status_code == 400
    data = r.json()
    assert data['detail']['code'] == 'INVALID_GRANULARITY'
    assert 'message' in data['detail']


def test_app_errors_map_to_client_statuses():
    direct = {cls.__name__ for cls in errors.BaseAppException.__subclasses__()}
    assert direct == {'NotFoundError', 'ValidationAppError'}
    assert errors.OutOfRangeError('x').http_status == 400
