from datetime import datetime

from fastapi import APIRouter, Depends, File, Query, UploadFile
from sqlalchemy.orm import Session

from client_manager.database import get_db
from client_manager.dependencies import get_request_user_id, get_storage_client
from client_manager.modules.logs.repository import ClientLogRepository
from client_manager.modules.logs.schemas import (
    ClientLogCreate,
    ClientLogListResponse,
    ClientLogResponse,
    ClientLogStatsResponse,
    DeleteLogsResponse,
    LogUploadResponse,
)
from client_manager.modules.logs.service import ClientLogService
from client_manager.shared.storage import LogStorage

router = APIRouter(
    prefix='/client-manager/api/v1/logs',
    tags=['Logs'],
)


# -------------------------------------------------------------------------
# Dependency injection chain: get_db -> repository -> service
# -------------------------------------------------------------------------


def get_client_log_repository(
    db: Session = Depends(get_db),
) -> ClientLogRepository:
    """Dependency que fornece o repositorio de logs."""
    return ClientLogRepository(db)


def get_client_log_service(
    repository: ClientLogRepository = Depends(get_client_log_repository),
) -> ClientLogService:
    """Dependency que fornece o servico de logs."""
    return ClientLogService(repository)


def get_log_upload_service(
    repository: ClientLogRepository = Depends(get_client_log_repository),
    storage: LogStorage = Depends(get_storage_client),
) -> ClientLogService:
    """Dependency que fornece o servico de logs com acesso ao storage."""
    return ClientLogService(repository, storage)


# -------------------------------------------------------------------------
# Recebimento de logs
# -------------------------------------------------------------------------


@router.post('', response_model=ClientLogResponse, status_code=201)
def create_log(
    data: ClientLogCreate,
    service: ClientLogService = Depends(get_client_log_service),
) -> ClientLogResponse:
    """Registra um trecho de log enviado pelo cliente."""
    return service.create_log(data)


@router.post('/upload', response_model=LogUploadResponse)
def upload_log_file(
    logfile: UploadFile = File(..., description='Arquivo de log'),
    user_id: str = Depends(get_request_user_id),
    service: ClientLogService = Depends(get_log_upload_service),
) -> LogUploadResponse:
    """
    Recebe um arquivo de log completo e o armazena no MinIO/S3.

    O arquivo e gravado em logs/{user_id}/{filename}, onde user_id vem
    da claim 'id' do token Bearer (sem validacao de assinatura).
    """
    file_data = logfile.file.read()
    return service.upload_log_file(
        user_id=user_id,
        filename=logfile.filename,
        file_data=file_data,
        content_type=logfile.content_type,
    )


# -------------------------------------------------------------------------
# Consultas
# -------------------------------------------------------------------------


@router.get('/stats', response_model=ClientLogStatsResponse)
def get_log_stats(
    start_date: datetime | None = Query(None, description='Inicio do periodo (ISO 8601)'),
    end_date: datetime | None = Query(None, description='Fim do periodo (ISO 8601)'),
    service: ClientLogService = Depends(get_client_log_service),
) -> ClientLogStatsResponse:
    """Retorna a quantidade de logs por cliente e por modulo no periodo."""
    return service.get_stats(start_date, end_date)


@router.get('/clients/{client_id}', response_model=ClientLogListResponse)
def list_client_logs(
    client_id: str,
    page: int = Query(1, ge=1, description='Numero da pagina'),
    per_page: int = Query(20, ge=1, le=100, description='Itens por pagina'),
    service: ClientLogService = Depends(get_client_log_service),
) -> ClientLogListResponse:
    """Lista os logs de um cliente."""
    return service.list_by_client(client_id, page=page, per_page=per_page)


@router.get('/clients/{client_id}/sessions', response_model=ClientLogListResponse)
def list_client_sessions(
    client_id: str,
    page: int = Query(1, ge=1, description='Numero da pagina'),
    per_page: int = Query(20, ge=1, le=100, description='Itens por pagina'),
    service: ClientLogService = Depends(get_client_log_service),
) -> ClientLogListResponse:
    """Lista os logs que marcam inicio ou fim de sessao de um cliente."""
    return service.list_sessions(client_id, page=page, per_page=per_page)


@router.get('/users/{user_id}', response_model=ClientLogListResponse)
def list_user_logs(
    user_id: str,
    page: int = Query(1, ge=1, description='Numero da pagina'),
    per_page: int = Query(20, ge=1, le=100, description='Itens por pagina'),
    service: ClientLogService = Depends(get_client_log_service),
) -> ClientLogListResponse:
    """Lista os logs de um usuario."""
    return service.list_by_user(user_id, page=page, per_page=per_page)


@router.get('/modules/{module_name}', response_model=ClientLogListResponse)
def list_module_logs(
    module_name: str,
    page: int = Query(1, ge=1, description='Numero da pagina'),
    per_page: int = Query(20, ge=1, le=100, description='Itens por pagina'),
    service: ClientLogService = Depends(get_client_log_service),
) -> ClientLogListResponse:
    """Lista os logs de um modulo."""
    return service.list_by_module(module_name, page=page, per_page=per_page)


# -------------------------------------------------------------------------
# Limpeza
# -------------------------------------------------------------------------


@router.delete('', response_model=DeleteLogsResponse)
def delete_old_logs(
    before_date: datetime | None = Query(None, description='Remove logs criados antes desta data'),
    service: ClientLogService = Depends(get_client_log_service),
) -> DeleteLogsResponse:
    """Remove definitivamente os logs anteriores a data informada."""
    deleted_count = service.delete_old_logs(before_date)
    return DeleteLogsResponse(deleted_count=deleted_count)
