from sqlalchemy import select, update

from client_manager.modules.configurations.models import Configuration
from client_manager.modules.configurations.repository import (
    CONFIG_CACHE_TTL_SECONDS,
    ConfigurationRepository,
    config_cache_key,
)


def _set_value_directly(db_session, configuration_id: int, value: str) -> None:
    """Altera o valor no banco sem passar pelo repositorio (cache nao e tocado)."""
    db_session.execute(
        update(Configuration)
        .where(Configuration.id == configuration_id)
        .values(value=value)
    )
    db_session.commit()


def test_cache_key_format():
    assert config_cache_key('feature-flags', 'dark-mode') == 'config:feature-flags:dark-mode'
    assert CONFIG_CACHE_TTL_SECONDS == 300


def test_fetch_on_miss_reads_database_and_populates_cache(db_session, fake_redis):
    repository = ConfigurationRepository(db_session, fake_redis)
    created = repository.create({'namespace': 'app', 'key': 'theme', 'value': 'dark'})

    configuration = repository.get_by_namespace_key('app', 'theme')

    assert configuration.id == created.id
    assert configuration.value == 'dark'
    assert fake_redis.get('config:app:theme') == 'dark'
    assert fake_redis.ttl('config:app:theme') == CONFIG_CACHE_TTL_SECONDS


def test_fetch_on_hit_serves_cached_value_without_metadata(db_session, fake_redis):
    repository = ConfigurationRepository(db_session, fake_redis)
    created = repository.create({
        'namespace': 'app',
        'key': 'theme',
        'value': 'dark',
        'description': 'Tema da interface',
    })
    repository.get_by_namespace_key('app', 'theme')

    # Banco alterado por fora: a leitura seguinte ainda vem do cache
    _set_value_directly(db_session, created.id, 'light')
    configuration = repository.get_by_namespace_key('app', 'theme')

    assert configuration.value == 'dark'
    assert configuration.namespace == 'app'
    assert configuration.key == 'theme'
    assert configuration.id is None
    assert configuration.description is None
    assert configuration.created_at is None


def test_cache_failure_falls_back_to_database(db_session, failing_redis):
    repository = ConfigurationRepository(db_session, failing_redis)
    repository.create({'namespace': 'app', 'key': 'retries', 'value': '3'})

    configuration = repository.get_by_namespace_key('app', 'retries')

    assert configuration is not None
    assert configuration.value == '3'
    # create (delete), fetch (get) e repopulacao (setex) tentaram o Redis
    assert failing_redis.attempts == 3


def test_cache_failure_does_not_break_writes(db_session, failing_redis):
    repository = ConfigurationRepository(db_session, failing_redis)
    created = repository.create({'namespace': 'app', 'key': 'retries', 'value': '3'})

    updated = repository.update(created.id, {'value': '5'})
    deleted = repository.soft_delete(created.id)

    assert updated.value == '5'
    assert deleted is True
    assert repository.get_by_namespace_key('app', 'retries') is None


def _run_sequence(repository: ConfigurationRepository) -> list:
    created = repository.create({'namespace': 'svc', 'key': 'timeout', 'value': '10'})
    outcomes = [repository.get_by_namespace_key('svc', 'timeout').value]

    repository.update(created.id, {'value': '20'})
    outcomes.append(repository.get_by_namespace_key('svc', 'timeout').value)

    outcomes.append(repository.soft_delete(created.id))
    outcomes.append(repository.get_by_namespace_key('svc', 'timeout'))
    outcomes.append(repository.soft_delete(created.id))
    outcomes.append(repository.update(created.id, {'value': '30'}))
    return outcomes


def test_no_cache_mode_matches_cached_mode(session_factory, fake_redis):
    with_cache_session = session_factory()
    with_cache = _run_sequence(ConfigurationRepository(with_cache_session, fake_redis))
    with_cache_rows = with_cache_session.execute(
        select(Configuration.value, Configuration.deleted_at.is_(None))
    ).all()
    with_cache_session.execute(Configuration.__table__.delete())
    with_cache_session.commit()
    with_cache_session.close()

    without_cache_session = session_factory()
    without_cache = _run_sequence(ConfigurationRepository(without_cache_session, None))
    without_cache_rows = without_cache_session.execute(
        select(Configuration.value, Configuration.deleted_at.is_(None))
    ).all()
    without_cache_session.close()

    assert with_cache == without_cache == ['10', '20', True, None, False, None]
    assert with_cache_rows == without_cache_rows


def test_create_invalidates_stale_cache_entry(db_session, fake_redis):
    fake_redis.setex('config:app:mode', CONFIG_CACHE_TTL_SECONDS, 'stale')
    repository = ConfigurationRepository(db_session, fake_redis)

    repository.create({'namespace': 'app', 'key': 'mode', 'value': 'fresh'})

    assert ('delete', 'config:app:mode') in fake_redis.calls
    assert repository.get_by_namespace_key('app', 'mode').value == 'fresh'


def test_update_overwrites_cache_and_resets_ttl(db_session, fake_redis, clock):
    repository = ConfigurationRepository(db_session, fake_redis)
    created = repository.create({'namespace': 'app', 'key': 'limit', 'value': '1'})
    repository.get_by_namespace_key('app', 'limit')

    clock.advance(200)
    repository.update(created.id, {'value': '2'})

    assert fake_redis.get('config:app:limit') == '2'
    assert fake_redis.ttl('config:app:limit') == CONFIG_CACHE_TTL_SECONDS
    assert repository.get_by_namespace_key('app', 'limit').value == '2'


def test_update_with_new_key_drops_old_cache_entry(db_session, fake_redis):
    repository = ConfigurationRepository(db_session, fake_redis)
    created = repository.create({'namespace': 'app', 'key': 'old', 'value': 'v'})
    repository.get_by_namespace_key('app', 'old')

    repository.update(created.id, {'key': 'new'})

    assert fake_redis.get('config:app:old') is None
    assert fake_redis.get('config:app:new') == 'v'
    assert repository.get_by_namespace_key('app', 'old') is None


def test_cached_entry_expires_after_ttl(db_session, fake_redis, clock):
    repository = ConfigurationRepository(db_session, fake_redis)
    created = repository.create({'namespace': 'app', 'key': 'banner', 'value': 'v1'})
    repository.get_by_namespace_key('app', 'banner')
    _set_value_directly(db_session, created.id, 'v2')

    clock.advance(CONFIG_CACHE_TTL_SECONDS - 1)
    assert repository.get_by_namespace_key('app', 'banner').value == 'v1'

    clock.advance(1)
    assert repository.get_by_namespace_key('app', 'banner').value == 'v2'


def test_create_then_fetch_populates_documented_cache_key(db_session, fake_redis):
    repository = ConfigurationRepository(db_session, fake_redis)
    repository.create({'namespace': 'build', 'key': 'timeout', 'value': '30'})

    configuration = repository.get_by_namespace_key('build', 'timeout')

    assert configuration is not None
    assert configuration.value == '30'
    assert fake_redis.get('config:build:timeout') == '30'


def test_fetch_missing_returns_none_without_cache_write(db_session, fake_redis):
    repository = ConfigurationRepository(db_session, fake_redis)

    assert repository.get_by_namespace_key('nonexistent', 'x') is None
    assert fake_redis.written_keys() == []


def test_soft_delete_invalidates_cache(db_session, fake_redis):
    repository = ConfigurationRepository(db_session, fake_redis)
    created = repository.create({'namespace': 'app', 'key': 'flag', 'value': 'on'})
    repository.get_by_namespace_key('app', 'flag')

    assert repository.soft_delete(created.id) is True

    assert fake_redis.get('config:app:flag') is None
    assert repository.get_by_namespace_key('app', 'flag') is None
    assert repository.get_by_id(created.id) is None
    row = db_session.get(Configuration, created.id)
    assert row.deleted_at is not None


def test_soft_delete_missing_touches_nothing(db_session, fake_redis):
    repository = ConfigurationRepository(db_session, fake_redis)

    assert repository.soft_delete(999) is False
    assert fake_redis.calls == []


def test_get_all_paginates_and_searches(db_session):
    repository = ConfigurationRepository(db_session)
    for index in range(5):
        repository.create({'namespace': 'ns', 'key': f'key{index}', 'value': str(index)})
    repository.create({
        'namespace': 'other',
        'key': 'alpha',
        'value': 'x',
        'description': 'Valor especial',
    })

    items, total = repository.get_all(page=1, per_page=4)
    assert total == 6
    assert len(items) == 4

    items, total = repository.get_all(page=2, per_page=4)
    assert len(items) == 2

    items, total = repository.get_all(search='ESPECIAL')
    assert total == 1
    assert items[0].key == 'alpha'


def test_get_by_namespace_orders_by_key(db_session):
    repository = ConfigurationRepository(db_session)
    for key in ('zeta', 'alpha', 'mid'):
        repository.create({'namespace': 'ordered', 'key': key, 'value': key})
    repository.create({'namespace': 'elsewhere', 'key': 'beta', 'value': 'b'})

    configurations = repository.get_by_namespace('ordered')

    assert [configuration.key for configuration in configurations] == ['alpha', 'mid', 'zeta']
