from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from client_manager.shared.schemas import PaginatedResponse
from client_manager.shared.security import sanitize_text


class ConfigurationCreate(BaseModel):
    """Schema para criacao de uma nova configuracao."""

    # namespace e key sao gravados como enviados: compoem a chave de cache
    namespace: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description='Namespace da configuracao (ex: build)',
    )
    key: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description='Chave da configuracao dentro do namespace',
    )
    value: str = Field(
        '',
        description='Valor da configuracao',
    )
    description: str | None = Field(
        None,
        description='Descricao da configuracao',
    )

    @field_validator('description')
    @classmethod
    def description_sanitized(cls, v: str | None) -> str | None:
        """Sanitiza descricao (se fornecida)."""
        if v is None:
            return v
        return sanitize_text(v)


class ConfigurationUpdate(BaseModel):
    """
    Schema para atualizacao de uma configuracao.

    Todos os campos sao opcionais; apenas os fornecidos sao alterados.
    """

    namespace: str | None = Field(None, min_length=1, max_length=255)
    key: str | None = Field(None, min_length=1, max_length=255)
    value: str | None = None
    description: str | None = None

    @field_validator('description')
    @classmethod
    def description_sanitized(cls, v: str | None) -> str | None:
        """Sanitiza descricao (se fornecida)."""
        if v is None:
            return v
        return sanitize_text(v)


class ConfigurationResponse(BaseModel):
    """
    Schema de resposta com dados da configuracao.

    Leituras servidas pelo cache trazem apenas namespace, key e value;
    por isso id, description e timestamps sao opcionais.
    """

    model_config = ConfigDict(from_attributes=True)

    id: int | None = None
    namespace: str
    key: str
    value: str
    description: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


# Alias para resposta paginada de configuracoes
ConfigurationListResponse = PaginatedResponse[ConfigurationResponse]
