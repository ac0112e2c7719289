from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from client_manager.shared.schemas import PaginatedResponse
from client_manager.shared.security import sanitize_text


class FeedbackCreate(BaseModel):
    """
    Schema generico de feedback (completion, copy_code e error).

    Todos os campos sao opcionais.
    """

    conversation_id: str | None = Field(None, max_length=255)
    user_id: str | None = Field(None, max_length=255)
    content: str | None = None
    metadata: str | None = Field(
        None,
        description='Dados adicionais em JSON serializado',
    )


class EvaluateFeedbackCreate(BaseModel):
    """
    Schema de avaliacao de uma resposta (like/dislike).

    A obrigatoriedade dos campos e verificada pelo servico, que
    responde 400 indicando o campo invalido.
    """

    conversation_id: str | None = Field(None, max_length=255)
    evaluation_type: str | None = Field(
        None,
        description='Tipo de avaliacao: like ou dislike',
    )
    user_id: str | None = Field(None, max_length=255)
    metadata: str | None = None


class UseCodeFeedbackCreate(BaseModel):
    """Schema de uso de codigo sugerido (ex: accept, insert)."""

    conversation_id: str | None = Field(None, max_length=255)
    action_type: str | None = None
    user_id: str | None = Field(None, max_length=255)
    metadata: str | None = None


class IssueFeedbackCreate(BaseModel):
    """Schema de relato de problema pelo usuario."""

    description: str | None = None
    issue_type: str | None = Field(None, max_length=100)
    user_id: str | None = Field(None, max_length=255)
    metadata: str | None = Field(
        None,
        description='Objeto JSON serializado; issue_type e mesclado a ele',
    )

    @field_validator('description')
    @classmethod
    def description_sanitized(cls, v: str | None) -> str | None:
        """Sanitiza descricao (se fornecida)."""
        if v is None:
            return v
        return sanitize_text(v)


class FeedbackResponse(BaseModel):
    """Schema de resposta com dados do feedback."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    type: str
    conversation_id: str | None = None
    user_id: str | None = None
    content: str | None = None
    metadata: str | None = Field(None, validation_alias='feedback_metadata')
    created_at: datetime
    updated_at: datetime


class FeedbackStatsResponse(BaseModel):
    """Estatisticas de feedbacks por tipo em um periodo."""

    type_counts: dict[str, int]
    total_count: int


# Alias para resposta paginada de feedbacks
FeedbackListResponse = PaginatedResponse[FeedbackResponse]
