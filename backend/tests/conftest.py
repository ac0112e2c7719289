import os

# Ambiente de teste: configurado antes de importar a aplicacao
os.environ.setdefault('DATABASE_DSN', 'sqlite://')
os.environ.setdefault('REDIS_ENABLED', 'false')
os.environ.setdefault('LOG_FORMAT', 'console')
os.environ.setdefault('LOG_LEVEL', 'WARNING')

import pytest
from botocore.exceptions import ClientError
from fastapi.testclient import TestClient
from redis.exceptions import ConnectionError as RedisConnectionError
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from client_manager.database import Base, get_db
from client_manager.dependencies import get_cache_client, get_storage_client
from client_manager.main import app
from client_manager.shared.counters import RequestCounters


# -------------------------------------------------------------------------
# Dubles de Redis e storage
# -------------------------------------------------------------------------


class FakeClock:
    """Relogio controlado pelos testes para simular expiracao de TTL."""

    def __init__(self, now: float = 1_000.0) -> None:
        self.now = now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeRedis:
    """Redis em memoria com suporte a TTL e registro das chamadas."""

    def __init__(self, clock: FakeClock | None = None) -> None:
        self.clock = clock or FakeClock()
        self.calls: list[tuple] = []
        self._data: dict[str, tuple[str, float | None]] = {}

    def _alive(self, key: str) -> str | None:
        item = self._data.get(key)
        if item is None:
            return None
        value, expires_at = item
        if expires_at is not None and self.clock.now >= expires_at:
            del self._data[key]
            return None
        return value

    def get(self, key: str) -> str | None:
        self.calls.append(('get', key))
        return self._alive(key)

    def setex(self, key: str, ttl: int, value: str) -> bool:
        self.calls.append(('setex', key, ttl, value))
        self._data[key] = (str(value), self.clock.now + ttl)
        return True

    def set(self, key: str, value: str) -> bool:
        self.calls.append(('set', key, value))
        self._data[key] = (str(value), None)
        return True

    def delete(self, *keys: str) -> int:
        self.calls.append(('delete', *keys))
        removed = 0
        for key in keys:
            if self._alive(key) is not None:
                removed += 1
            self._data.pop(key, None)
        return removed

    def ttl(self, key: str) -> int:
        if self._alive(key) is None:
            return -2
        expires_at = self._data[key][1]
        if expires_at is None:
            return -1
        return int(expires_at - self.clock.now)

    def ping(self) -> bool:
        return True

    def close(self) -> None:
        pass

    def written_keys(self) -> list[str]:
        """Chaves que receberam escrita (set ou setex)."""
        return [call[1] for call in self.calls if call[0] in ('set', 'setex')]


class FailingRedis:
    """Redis inacessivel: toda operacao levanta erro de conexao."""

    def __init__(self) -> None:
        self.attempts = 0

    def _fail(self, *args, **kwargs):
        self.attempts += 1
        raise RedisConnectionError('Connection refused')

    get = _fail
    setex = _fail
    set = _fail
    delete = _fail
    ping = _fail

    def close(self) -> None:
        pass


class FakeStorage:
    """Storage em memoria no lugar do MinIO/S3."""

    def __init__(self, bucket: str = 'client-logs') -> None:
        self._bucket = bucket
        self.objects: dict[str, tuple[bytes, str]] = {}

    @property
    def bucket(self) -> str:
        return self._bucket

    def ensure_bucket(self) -> None:
        pass

    def put_log_file(self, object_key: str, data: bytes, content_type: str = 'text/plain') -> str:
        self.objects[object_key] = (data, content_type)
        return object_key


class FailingStorage(FakeStorage):
    """Storage que recusa todos os uploads."""

    def put_log_file(self, object_key, data, content_type='text/plain'):
        raise ClientError(
            {'Error': {'Code': 'InternalError', 'Message': 'storage offline'}},
            'PutObject',
        )


# -------------------------------------------------------------------------
# Banco de dados
# -------------------------------------------------------------------------


@pytest.fixture()
def engine():
    """Engine SQLite em memoria compartilhada entre as conexoes do teste."""
    test_engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )


@pytest.fixture()
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


# -------------------------------------------------------------------------
# Cache, storage e cliente HTTP
# -------------------------------------------------------------------------


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def fake_redis(clock):
    return FakeRedis(clock)


@pytest.fixture()
def storage():
    return FakeStorage()


@pytest.fixture()
def make_client(session_factory, storage):
    """
    Fabrica de TestClient com as dependencias sobrescritas.

    Recebe o cliente de cache a ser usado (None desabilita o cache).
    """

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    def _make(redis=None, storage_client=None) -> TestClient:
        app.dependency_overrides[get_db] = override_get_db
        app.dependency_overrides[get_cache_client] = lambda: redis
        app.dependency_overrides[get_storage_client] = lambda: storage_client or storage
        app.state.request_counters = RequestCounters()
        return TestClient(app)

    yield _make
    app.dependency_overrides.clear()


@pytest.fixture()
def client(make_client, fake_redis):
    return make_client(fake_redis)


@pytest.fixture()
def failing_redis():
    return FailingRedis()


@pytest.fixture()
def failing_storage():
    return FailingStorage()
