from redis import Redis
from redis.exceptions import RedisError

from client_manager.config import settings
from client_manager.shared.logging import get_logger

logger = get_logger(__name__)


def create_redis_client() -> Redis | None:
    """
    Cria o cliente Redis a partir das configuracoes e testa a conexao.

    Retorna None quando o Redis esta desabilitado ou inacessivel; nesse
    caso a aplicacao opera sem cache, lendo direto do banco de dados.
    """
    if not settings.redis_enabled:
        logger.info('Redis desabilitado por configuracao, operando sem cache')
        return None

    client = Redis.from_url(
        settings.redis_url,
        decode_responses=True,
        socket_timeout=settings.redis_socket_timeout,
        socket_connect_timeout=settings.redis_socket_timeout,
    )
    try:
        client.ping()
    except RedisError as exc:
        logger.warning(
            'Falha ao conectar ao Redis, operando sem cache',
            redis_url=settings.redis_url,
            error=str(exc),
        )
        client.close()
        return None

    logger.info('Conexao com Redis estabelecida', redis_url=settings.redis_url)
    return client
