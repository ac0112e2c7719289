from fastapi import APIRouter, Depends, Query
from redis import Redis
from sqlalchemy.orm import Session

from client_manager.database import get_db
from client_manager.dependencies import get_cache_client
from client_manager.modules.configurations.repository import ConfigurationRepository
from client_manager.modules.configurations.schemas import (
    ConfigurationCreate,
    ConfigurationListResponse,
    ConfigurationResponse,
    ConfigurationUpdate,
)
from client_manager.modules.configurations.service import ConfigurationService
from client_manager.shared.schemas import MessageResponse

router = APIRouter(
    prefix='/client-manager/api/v1/configurations',
    tags=['Configurations'],
)


# -------------------------------------------------------------------------
# Dependency injection chain: get_db + cache -> repository -> service
# -------------------------------------------------------------------------


def get_configuration_repository(
    db: Session = Depends(get_db),
    redis: Redis | None = Depends(get_cache_client),
) -> ConfigurationRepository:
    """Dependency que fornece o repositorio de configuracoes."""
    return ConfigurationRepository(db, redis)


def get_configuration_service(
    repository: ConfigurationRepository = Depends(get_configuration_repository),
) -> ConfigurationService:
    """Dependency que fornece o servico de configuracoes."""
    return ConfigurationService(repository)


# -------------------------------------------------------------------------
# Endpoints
# -------------------------------------------------------------------------


@router.get('', response_model=ConfigurationListResponse)
def list_configurations(
    page: int = Query(1, ge=1, description='Numero da pagina'),
    per_page: int = Query(20, ge=1, le=100, description='Itens por pagina'),
    search: str | None = Query(None, description='Busca por namespace, chave ou descricao'),
    service: ConfigurationService = Depends(get_configuration_service),
) -> ConfigurationListResponse:
    """Lista as configuracoes com paginacao e busca textual."""
    return service.list_configurations(page=page, per_page=per_page, search=search)


@router.get('/{namespace}', response_model=list[ConfigurationResponse])
def list_namespace_configurations(
    namespace: str,
    service: ConfigurationService = Depends(get_configuration_service),
) -> list[ConfigurationResponse]:
    """Lista todas as configuracoes de um namespace, ordenadas pela chave."""
    return service.get_namespace_configurations(namespace)


@router.get('/{namespace}/{key}', response_model=ConfigurationResponse)
def get_configuration(
    namespace: str,
    key: str,
    service: ConfigurationService = Depends(get_configuration_service),
) -> ConfigurationResponse:
    """
    Retorna uma configuracao pela chave composta.

    Consulta o cache primeiro; em cache hit apenas namespace, key e value
    sao retornados.
    """
    return service.get_configuration(namespace, key)


@router.post('', response_model=ConfigurationResponse, status_code=201)
def create_configuration(
    data: ConfigurationCreate,
    service: ConfigurationService = Depends(get_configuration_service),
) -> ConfigurationResponse:
    """Cria uma nova configuracao. Retorna 409 se a chave ja existir."""
    return service.create_configuration(data)


@router.put('/{configuration_id}', response_model=ConfigurationResponse)
def update_configuration(
    configuration_id: int,
    data: ConfigurationUpdate,
    service: ConfigurationService = Depends(get_configuration_service),
) -> ConfigurationResponse:
    """
    Atualiza uma configuracao existente.

    Apenas os campos fornecidos serao atualizados. O novo valor e
    gravado no cache com TTL renovado.
    """
    return service.update_configuration(configuration_id, data)


@router.delete('/{configuration_id}', response_model=MessageResponse)
def delete_configuration(
    configuration_id: int,
    service: ConfigurationService = Depends(get_configuration_service),
) -> MessageResponse:
    """
    Realiza soft delete de uma configuracao.

    A configuracao nao e removida do banco de dados, apenas marcada como
    excluida, e a entrada de cache e invalidada.
    """
    service.delete_configuration(configuration_id)
    return MessageResponse(
        success=True,
        message='Configuracao excluida com sucesso',
    )
