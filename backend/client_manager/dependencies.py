from fastapi import Header, Request
from redis import Redis

from client_manager.shared.counters import RequestCounters
from client_manager.shared.storage import LogStorage
from client_manager.shared.utils import user_id_from_authorization


def get_storage_client() -> LogStorage:
    """Dependency que fornece o cliente de storage (MinIO/S3)."""
    return LogStorage.from_settings()


def get_cache_client(request: Request) -> Redis | None:
    """
    Dependency que fornece o cliente Redis criado no startup.

    Retorna None quando o cache esta desabilitado ou indisponivel.
    """
    return getattr(request.app.state, 'redis', None)


def get_request_counters(request: Request) -> RequestCounters:
    """Dependency que fornece os contadores de requisicoes da aplicacao."""
    return request.app.state.request_counters


def get_request_user_id(authorization: str | None = Header(None)) -> str:
    """
    Dependency que extrai o ID do usuario do token Bearer.

    O token nao e validado (sem autenticacao); apenas a claim 'id' e lida.
    Retorna string vazia quando o header ou a claim estao ausentes.
    """
    return user_id_from_authorization(authorization or '')
