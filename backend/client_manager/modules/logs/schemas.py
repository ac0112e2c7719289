from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from client_manager.shared.schemas import PaginatedResponse


class ClientLogCreate(BaseModel):
    """
    Schema para registro de um trecho de log do cliente.

    client_id e module_name sao obrigatorios; a verificacao e feita
    pelo servico, que responde 400 indicando o campo ausente.
    """

    client_id: str | None = Field(None, max_length=255)
    module_name: str | None = Field(None, max_length=255)
    user_id: str | None = Field(None, max_length=255)
    file_name: str | None = Field(None, max_length=512)
    log_content: str | None = None
    first_line_no: int = Field(0, ge=0)
    last_line_no: int = Field(0, ge=0)
    start_flag: bool = False
    end_flag: bool = False


class ClientLogResponse(BaseModel):
    """Schema de resposta com dados do log."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    client_id: str
    user_id: str | None = None
    module_name: str
    file_name: str | None = None
    log_content: str | None = None
    first_line_no: int
    last_line_no: int
    start_flag: bool
    end_flag: bool
    created_at: datetime
    updated_at: datetime


class LogUploadResponse(BaseModel):
    """Resultado do upload de um arquivo de log para o storage."""

    success: bool = True
    message: str
    bucket: str
    object_key: str
    size: int


class ClientLogStatsResponse(BaseModel):
    """Estatisticas de logs em um periodo."""

    total_count: int
    client_counts: dict[str, int]
    module_counts: dict[str, int]


class DeleteLogsResponse(BaseModel):
    """Resultado da limpeza de logs antigos."""

    success: bool = True
    deleted_count: int


# Alias para resposta paginada de logs
ClientLogListResponse = PaginatedResponse[ClientLogResponse]
