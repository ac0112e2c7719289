from jose import jwt

BASE_URL = '/client-manager/api/v1/logs'

WIDE_PERIOD = {'start_date': '2000-01-01T00:00:00', 'end_date': '2100-01-01T00:00:00'}


def _bearer(claims: dict) -> dict:
    token = jwt.encode(claims, 'qualquer-segredo', algorithm='HS256')
    return {'Authorization': f'Bearer {token}'}


def _create_log(client, **overrides):
    payload = {
        'client_id': 'client-a',
        'module_name': 'completion',
        'user_id': 'user-1',
        'log_content': 'linha de log',
        **overrides,
    }
    response = client.post(BASE_URL, json=payload)
    assert response.status_code == 201
    return response.json()


def test_create_log(client):
    data = _create_log(client, first_line_no=10, last_line_no=20)

    assert data['id'] is not None
    assert data['client_id'] == 'client-a'
    assert data['first_line_no'] == 10
    assert data['last_line_no'] == 20
    assert data['start_flag'] is False


def test_create_log_requires_client_id(client):
    response = client.post(BASE_URL, json={'module_name': 'completion'})

    assert response.status_code == 400
    assert response.json()['field'] == 'client_id'


def test_create_log_requires_module_name(client):
    response = client.post(BASE_URL, json={'client_id': 'client-a'})

    assert response.status_code == 400
    assert response.json()['field'] == 'module_name'


def test_list_logs_by_client_user_and_module(client):
    _create_log(client)
    _create_log(client, module_name='chat')
    _create_log(client, client_id='client-b', user_id='user-2')

    by_client = client.get(f'{BASE_URL}/clients/client-a').json()
    by_user = client.get(f'{BASE_URL}/users/user-2').json()
    by_module = client.get(f'{BASE_URL}/modules/chat').json()

    assert by_client['total'] == 2
    assert by_user['total'] == 1
    assert by_user['items'][0]['client_id'] == 'client-b'
    assert by_module['total'] == 1


def test_list_logs_paginates_newest_first(client):
    for index in range(3):
        _create_log(client, log_content=f'linha {index}')

    response = client.get(f'{BASE_URL}/clients/client-a', params={'page': 1, 'per_page': 2})

    data = response.json()
    assert data['total'] == 3
    assert data['total_pages'] == 2
    assert [item['log_content'] for item in data['items']] == ['linha 2', 'linha 1']


def test_list_sessions_returns_only_flagged_logs(client):
    _create_log(client, start_flag=True)
    _create_log(client)
    _create_log(client, end_flag=True)
    _create_log(client, client_id='client-b', start_flag=True)

    response = client.get(f'{BASE_URL}/clients/client-a/sessions')

    data = response.json()
    assert data['total'] == 2
    assert all(item['start_flag'] or item['end_flag'] for item in data['items'])


def test_log_stats(client):
    _create_log(client)
    _create_log(client, module_name='chat')
    _create_log(client, client_id='client-b')

    response = client.get(f'{BASE_URL}/stats', params=WIDE_PERIOD)

    assert response.status_code == 200
    assert response.json() == {
        'total_count': 3,
        'client_counts': {'client-a': 2, 'client-b': 1},
        'module_counts': {'completion': 2, 'chat': 1},
    }


def test_log_stats_requires_dates(client):
    response = client.get(f'{BASE_URL}/stats')

    assert response.status_code == 400
    assert response.json()['field'] == 'start_date'


def test_delete_old_logs(client):
    _create_log(client)
    _create_log(client)

    kept = client.delete(BASE_URL, params={'before_date': '2000-01-01T00:00:00'})
    assert kept.json()['deleted_count'] == 0

    removed = client.delete(BASE_URL, params={'before_date': '2100-01-01T00:00:00'})
    assert removed.status_code == 200
    assert removed.json()['deleted_count'] == 2
    assert client.get(f'{BASE_URL}/clients/client-a').json()['total'] == 0


def test_delete_old_logs_requires_date(client):
    response = client.delete(BASE_URL)

    assert response.status_code == 400
    assert response.json()['field'] == 'before_date'


def test_upload_log_file_uses_user_from_token(client, storage):
    response = client.post(
        f'{BASE_URL}/upload',
        files={'logfile': ('session.log', b'conteudo do log', 'text/plain')},
        headers=_bearer({'id': 42}),
    )

    assert response.status_code == 200
    data = response.json()
    assert data['object_key'] == 'logs/42/session.log'
    assert data['bucket'] == 'client-logs'
    assert data['size'] == len(b'conteudo do log')
    assert storage.objects['logs/42/session.log'][0] == b'conteudo do log'


def test_upload_log_file_strips_directories(client, storage):
    response = client.post(
        f'{BASE_URL}/upload',
        files={'logfile': ('../../etc/passwd', b'x', 'text/plain')},
        headers=_bearer({'id': 'abc'}),
    )

    assert response.status_code == 200
    assert response.json()['object_key'] == 'logs/abc/passwd'


def test_upload_log_file_without_token(client, storage):
    response = client.post(
        f'{BASE_URL}/upload',
        files={'logfile': ('session.log', b'x', 'text/plain')},
    )

    assert response.status_code == 200
    assert response.json()['object_key'] == 'logs/session.log'


def test_upload_log_file_requires_file(client):
    response = client.post(f'{BASE_URL}/upload')

    assert response.status_code == 422


def test_upload_log_file_storage_failure(make_client, failing_storage):
    client = make_client(None, failing_storage)

    response = client.post(
        f'{BASE_URL}/upload',
        files={'logfile': ('session.log', b'x', 'text/plain')},
    )

    assert response.status_code == 503
    assert response.json()['code'] == 'storage.error'
