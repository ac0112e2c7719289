from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from client_manager.database import get_db
from client_manager.modules.feedbacks.repository import FeedbackRepository
from client_manager.modules.feedbacks.schemas import (
    EvaluateFeedbackCreate,
    FeedbackCreate,
    FeedbackListResponse,
    FeedbackResponse,
    FeedbackStatsResponse,
    IssueFeedbackCreate,
    UseCodeFeedbackCreate,
)
from client_manager.modules.feedbacks.service import FeedbackService
from client_manager.shared.schemas import MessageResponse

router = APIRouter(
    prefix='/client-manager/api/v1/feedbacks',
    tags=['Feedbacks'],
)


# -------------------------------------------------------------------------
# Dependency injection chain: get_db -> repository -> service
# -------------------------------------------------------------------------


def get_feedback_repository(
    db: Session = Depends(get_db),
) -> FeedbackRepository:
    """Dependency que fornece o repositorio de feedbacks."""
    return FeedbackRepository(db)


def get_feedback_service(
    repository: FeedbackRepository = Depends(get_feedback_repository),
) -> FeedbackService:
    """Dependency que fornece o servico de feedbacks."""
    return FeedbackService(repository)


# -------------------------------------------------------------------------
# Criacao
# -------------------------------------------------------------------------


@router.post('/completion', response_model=FeedbackResponse, status_code=201)
def create_completion_feedback(
    data: FeedbackCreate,
    service: FeedbackService = Depends(get_feedback_service),
) -> FeedbackResponse:
    """Registra feedback de completion."""
    return service.create_completion(data)


@router.post('/completions', response_model=MessageResponse, status_code=201)
def create_batch_completion_feedback(
    items: list[FeedbackCreate],
    service: FeedbackService = Depends(get_feedback_service),
) -> MessageResponse:
    """Registra varios feedbacks de completion em uma unica requisicao."""
    count = service.create_batch_completion(items)
    return MessageResponse(
        success=True,
        message='Feedbacks de completion criados com sucesso',
        data={'created_count': count},
    )


@router.post('/copy_code', response_model=FeedbackResponse, status_code=201)
def create_copy_code_feedback(
    data: FeedbackCreate,
    service: FeedbackService = Depends(get_feedback_service),
) -> FeedbackResponse:
    """Registra feedback de copia de codigo."""
    return service.create_copy_code(data)


@router.post('/evaluate', response_model=FeedbackResponse, status_code=201)
def create_evaluate_feedback(
    data: EvaluateFeedbackCreate,
    service: FeedbackService = Depends(get_feedback_service),
) -> FeedbackResponse:
    """Registra avaliacao (like/dislike) de uma conversa."""
    return service.create_evaluate(data)


@router.post('/use_code', response_model=FeedbackResponse, status_code=201)
def create_use_code_feedback(
    data: UseCodeFeedbackCreate,
    service: FeedbackService = Depends(get_feedback_service),
) -> FeedbackResponse:
    """Registra o uso de um codigo sugerido."""
    return service.create_use_code(data)


@router.post('/issue', response_model=FeedbackResponse, status_code=201)
def create_issue_feedback(
    data: IssueFeedbackCreate,
    service: FeedbackService = Depends(get_feedback_service),
) -> FeedbackResponse:
    """Registra um problema relatado pelo usuario."""
    return service.create_issue(data)


@router.post('/error', response_model=FeedbackResponse, status_code=201)
def create_error_feedback(
    data: FeedbackCreate,
    service: FeedbackService = Depends(get_feedback_service),
) -> FeedbackResponse:
    """Registra feedback de erro."""
    return service.create_error(data)


# -------------------------------------------------------------------------
# Consultas
# -------------------------------------------------------------------------


@router.get('/stats', response_model=FeedbackStatsResponse)
def get_feedback_stats(
    start_date: datetime | None = Query(None, description='Inicio do periodo (ISO 8601)'),
    end_date: datetime | None = Query(None, description='Fim do periodo (ISO 8601)'),
    service: FeedbackService = Depends(get_feedback_service),
) -> FeedbackStatsResponse:
    """Retorna a quantidade de feedbacks por tipo no periodo informado."""
    return service.get_stats(start_date, end_date)


@router.get('/conversations/{conversation_id}', response_model=list[FeedbackResponse])
def list_conversation_feedbacks(
    conversation_id: str,
    service: FeedbackService = Depends(get_feedback_service),
) -> list[FeedbackResponse]:
    """Lista os feedbacks de uma conversa em ordem cronologica."""
    return service.list_by_conversation(conversation_id)


@router.get('/types/{feedback_type}', response_model=FeedbackListResponse)
def list_feedbacks_by_type(
    feedback_type: str,
    page: int = Query(1, ge=1, description='Numero da pagina'),
    per_page: int = Query(20, ge=1, le=100, description='Itens por pagina'),
    service: FeedbackService = Depends(get_feedback_service),
) -> FeedbackListResponse:
    """Lista feedbacks de um tipo com paginacao (mais recentes primeiro)."""
    return service.list_by_type(feedback_type, page=page, per_page=per_page)
