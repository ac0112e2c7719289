from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError
from jose import jwt

from client_manager.cli import build_parser, parse_listen
from client_manager.modules.logs.service import build_upload_key
from client_manager.shared.cache import cache_delete, cache_get, cache_set
from client_manager.shared.logging import parse_log_levels
from client_manager.shared.security import sanitize_filename
from client_manager.shared.storage import LogStorage
from client_manager.shared.utils import user_id_from_authorization


def _token(claims: dict) -> str:
    return jwt.encode(claims, 'segredo', algorithm='HS256')


# -------------------------------------------------------------------------
# user_id_from_authorization
# -------------------------------------------------------------------------


@pytest.mark.parametrize(
    ('claim', 'expected'),
    [
        (42, '42'),
        (42.0, '42'),
        ('abc', 'abc'),
        (True, ''),
        (None, ''),
    ],
)
def test_user_id_from_token_claim(claim, expected):
    assert user_id_from_authorization(f'Bearer {_token({"id": claim})}') == expected


def test_user_id_from_invalid_token():
    assert user_id_from_authorization('Bearer not-a-jwt') == ''
    assert user_id_from_authorization('') == ''
    assert user_id_from_authorization(None) == ''


def test_user_id_from_token_without_bearer_prefix():
    assert user_id_from_authorization(_token({'id': 7})) == '7'


# -------------------------------------------------------------------------
# Nomes de arquivo
# -------------------------------------------------------------------------


@pytest.mark.parametrize(
    ('filename', 'expected'),
    [
        ('app.log', 'app.log'),
        ('logs/2024/app.log', 'app.log'),
        ('..\\..\\windows\\app.log', 'app.log'),
        ('..', ''),
        ('', ''),
    ],
)
def test_sanitize_filename(filename, expected):
    assert sanitize_filename(filename) == expected


def test_build_upload_key():
    assert build_upload_key('42', 'app.log') == 'logs/42/app.log'
    assert build_upload_key('', 'app.log') == 'logs/app.log'
    assert build_upload_key('../x', 'app.log') == 'logs/x/app.log'


# -------------------------------------------------------------------------
# Cache com cliente ausente
# -------------------------------------------------------------------------


def test_cache_helpers_are_noops_without_client():
    assert cache_get(None, 'config:a:b') is None
    cache_set(None, 'config:a:b', 'v', 300)
    cache_delete(None, 'config:a:b')


def test_cache_get_decodes_bytes(fake_redis):
    fake_redis.setex('config:a:b', 300, 'v')
    fake_redis._data['config:a:b'] = (b'v', None)

    assert cache_get(fake_redis, 'config:a:b') == 'v'


def test_cache_helpers_swallow_redis_errors(failing_redis):
    assert cache_get(failing_redis, 'config:a:b') is None
    cache_set(failing_redis, 'config:a:b', 'v', 300)
    cache_delete(failing_redis, 'config:a:b')

    assert failing_redis.attempts == 3


# -------------------------------------------------------------------------
# Logging e CLI
# -------------------------------------------------------------------------


def test_parse_log_levels():
    levels = parse_log_levels('client_manager.modules.logs:debug, sqlalchemy.engine:INFO, invalido')

    assert levels == {
        'client_manager.modules.logs': 'DEBUG',
        'sqlalchemy.engine': 'INFO',
    }


@pytest.mark.parametrize(
    ('value', 'expected'),
    [
        ('', ('0.0.0.0', 8080)),
        (':9000', ('0.0.0.0', 9000)),
        ('127.0.0.1:9000', ('127.0.0.1', 9000)),
        ('9000', ('0.0.0.0', 9000)),
        ('localhost', ('localhost', 8080)),
    ],
)
def test_parse_listen(value, expected):
    assert parse_listen(value, '0.0.0.0', 8080) == expected


@pytest.mark.parametrize('value', [':abc', ':70000', ':0'])
def test_parse_listen_rejects_invalid_port(value):
    with pytest.raises(ValueError):
        parse_listen(value, '0.0.0.0', 8080)


def test_cli_flags():
    args = build_parser().parse_args(['-l', ':9000', '--no-redis', '-c', 'prod.env'])

    assert args.listen == ':9000'
    assert args.no_redis is True
    assert args.config == 'prod.env'


# -------------------------------------------------------------------------
# Storage de arquivos de log
# -------------------------------------------------------------------------


def test_log_storage_puts_object_in_bucket():
    s3 = MagicMock()
    storage = LogStorage(s3, 'client-logs')

    key = storage.put_log_file('logs/42/app.log', b'linha', content_type='text/plain')

    assert key == 'logs/42/app.log'
    s3.put_object.assert_called_once_with(
        Bucket='client-logs',
        Key='logs/42/app.log',
        Body=b'linha',
        ContentType='text/plain',
    )


def test_log_storage_creates_missing_bucket():
    s3 = MagicMock()
    s3.head_bucket.side_effect = ClientError(
        {'Error': {'Code': '404', 'Message': 'Not Found'}},
        'HeadBucket',
    )

    LogStorage(s3, 'client-logs').ensure_bucket()

    s3.create_bucket.assert_called_once_with(Bucket='client-logs')


def test_log_storage_keeps_existing_bucket():
    s3 = MagicMock()

    LogStorage(s3, 'client-logs').ensure_bucket()

    s3.create_bucket.assert_not_called()
