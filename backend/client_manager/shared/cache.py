"""
Operacoes de cache Redis tolerantes a falha.

Todas as funcoes aceitam client None (cache desabilitado) e nunca
propagam erros do Redis: falhas sao registradas em log (warning) e
tratadas como ausencia de cache, para que o chamador siga para o banco.
"""

from redis import Redis
from redis.exceptions import RedisError

from client_manager.shared.logging import get_logger
from client_manager.shared.metrics import track_cache_lookup

logger = get_logger(__name__)


def cache_get(redis: Redis | None, cache_key: str) -> str | None:
    """
    Busca um valor no cache.

    Args:
        redis: Cliente Redis ou None.
        cache_key: Chave completa no Redis.

    Returns:
        Valor em cache, ou None em caso de miss, erro ou cache desabilitado.
    """
    if redis is None:
        return None

    try:
        value = redis.get(cache_key)
    except RedisError as exc:
        track_cache_lookup('error')
        logger.warning(
            'Falha ao consultar cache, consultando banco de dados',
            cache_key=cache_key,
            error=str(exc),
        )
        return None

    if value is None:
        track_cache_lookup('miss')
        return None

    track_cache_lookup('hit')
    if isinstance(value, bytes):
        return value.decode('utf-8')
    return value


def cache_set(redis: Redis | None, cache_key: str, value: str, ttl: int) -> None:
    """Grava um valor no cache com TTL em segundos."""
    if redis is None:
        return

    try:
        redis.setex(cache_key, ttl, value)
    except RedisError as exc:
        logger.warning(
            'Falha ao gravar cache',
            cache_key=cache_key,
            error=str(exc),
        )


def cache_delete(redis: Redis | None, *cache_keys: str) -> None:
    """Remove uma ou mais chaves do cache."""
    if redis is None or not cache_keys:
        return

    try:
        redis.delete(*cache_keys)
    except RedisError as exc:
        logger.warning(
            'Falha ao invalidar cache',
            cache_key=','.join(cache_keys),
            error=str(exc),
        )
