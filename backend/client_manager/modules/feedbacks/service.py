import json
from datetime import datetime

from client_manager.modules.feedbacks.models import FEEDBACK_TYPES, Feedback
from client_manager.modules.feedbacks.repository import FeedbackRepository
from client_manager.modules.feedbacks.schemas import (
    EvaluateFeedbackCreate,
    FeedbackCreate,
    FeedbackResponse,
    FeedbackStatsResponse,
    IssueFeedbackCreate,
    UseCodeFeedbackCreate,
)
from client_manager.shared.exceptions import ValidationException
from client_manager.shared.logging import get_logger
from client_manager.shared.metrics import track_feedback_received
from client_manager.shared.schemas import PaginatedResponse

logger = get_logger(__name__)

EVALUATION_TYPES = ('like', 'dislike')


class FeedbackService:
    """
    Servico de feedbacks dos clientes.

    Valida os dados de cada tipo de feedback, persiste o registro e
    atualiza as metricas de feedbacks recebidos.
    """

    def __init__(self, repository: FeedbackRepository) -> None:
        """Inicializa o servico com o repositorio de feedbacks."""
        self._repository = repository

    # ---------------------------------------------------------------------
    # Criacao
    # ---------------------------------------------------------------------

    def create_completion(self, data: FeedbackCreate) -> FeedbackResponse:
        """Registra feedback de completion."""
        return self._create('completion', self._generic_data(data))

    def create_copy_code(self, data: FeedbackCreate) -> FeedbackResponse:
        """Registra feedback de copia de codigo."""
        return self._create('copy_code', self._generic_data(data))

    def create_error(self, data: FeedbackCreate) -> FeedbackResponse:
        """Registra feedback de erro reportado pelo cliente."""
        return self._create('error', self._generic_data(data))

    def create_batch_completion(self, items: list[FeedbackCreate]) -> int:
        """
        Registra varios feedbacks de completion em lote.

        Args:
            items: Lista de feedbacks.

        Returns:
            Quantidade de feedbacks criados.

        Raises:
            ValidationException: Se a lista estiver vazia.
        """
        if not items:
            raise ValidationException('Nenhum feedback valido informado', field='data')

        feedbacks_data = [
            {'type': 'completion', **self._generic_data(item)}
            for item in items
        ]
        count = self._repository.create_batch(feedbacks_data)

        track_feedback_received('completion', count)
        logger.info('Feedbacks de completion criados em lote', count=count)
        return count

    def create_evaluate(self, data: EvaluateFeedbackCreate) -> FeedbackResponse:
        """
        Registra avaliacao (like/dislike) de uma conversa.

        O tipo de avaliacao e gravado como conteudo do feedback.

        Raises:
            ValidationException: Se conversation_id estiver vazio ou o tipo
                de avaliacao for invalido.
        """
        if not data.conversation_id:
            raise ValidationException(
                'conversation_id e obrigatorio',
                field='conversation_id',
            )
        if data.evaluation_type not in EVALUATION_TYPES:
            raise ValidationException(
                "evaluation_type e obrigatorio e deve ser 'like' ou 'dislike'",
                field='evaluation_type',
            )

        return self._create('evaluate', {
            'conversation_id': data.conversation_id,
            'user_id': data.user_id,
            'content': data.evaluation_type,
            'feedback_metadata': data.metadata,
        })

    def create_use_code(self, data: UseCodeFeedbackCreate) -> FeedbackResponse:
        """
        Registra o uso de um codigo sugerido.

        Raises:
            ValidationException: Se conversation_id ou action_type estiverem vazios.
        """
        if not data.conversation_id:
            raise ValidationException(
                'conversation_id e obrigatorio',
                field='conversation_id',
            )
        if not data.action_type:
            raise ValidationException('action_type e obrigatorio', field='action_type')

        return self._create('use_code', {
            'conversation_id': data.conversation_id,
            'user_id': data.user_id,
            'content': data.action_type,
            'feedback_metadata': data.metadata,
        })

    def create_issue(self, data: IssueFeedbackCreate) -> FeedbackResponse:
        """
        Registra um problema relatado pelo usuario.

        Quando informado, issue_type e incluido no objeto JSON de metadata.

        Raises:
            ValidationException: Se a descricao estiver vazia ou metadata nao
                for um objeto JSON.
        """
        if not data.description:
            raise ValidationException('description e obrigatoria', field='description')

        metadata = data.metadata
        if data.issue_type:
            metadata = self._merge_issue_type(metadata, data.issue_type)

        return self._create('issue', {
            'user_id': data.user_id,
            'content': data.description,
            'feedback_metadata': metadata,
        })

    # ---------------------------------------------------------------------
    # Consultas
    # ---------------------------------------------------------------------

    def list_by_conversation(self, conversation_id: str) -> list[FeedbackResponse]:
        """Lista os feedbacks de uma conversa em ordem cronologica."""
        return [
            FeedbackResponse.model_validate(feedback)
            for feedback in self._repository.get_by_conversation(conversation_id)
        ]

    def list_by_type(
        self,
        feedback_type: str,
        page: int = 1,
        per_page: int = 20,
    ) -> PaginatedResponse[FeedbackResponse]:
        """Lista feedbacks de um tipo com paginacao."""
        if feedback_type not in FEEDBACK_TYPES:
            raise ValidationException(
                f'Tipo de feedback invalido: {feedback_type}',
                field='feedback_type',
            )

        feedbacks, total = self._repository.get_by_type(
            feedback_type,
            page=page,
            per_page=per_page,
        )
        return PaginatedResponse[FeedbackResponse].create(
            items=[FeedbackResponse.model_validate(feedback) for feedback in feedbacks],
            total=total,
            page=page,
            per_page=per_page,
        )

    def get_stats(
        self,
        start_date: datetime | None,
        end_date: datetime | None,
    ) -> FeedbackStatsResponse:
        """
        Retorna a contagem de feedbacks por tipo em um periodo.

        Args:
            start_date: Inicio do periodo (obrigatorio).
            end_date: Fim do periodo (obrigatorio).

        Raises:
            ValidationException: Se alguma das datas nao for informada.
        """
        if start_date is None:
            raise ValidationException('start_date e obrigatorio', field='start_date')
        if end_date is None:
            raise ValidationException('end_date e obrigatorio', field='end_date')

        type_counts = self._repository.count_by_type(start_date, end_date)
        return FeedbackStatsResponse(
            type_counts=type_counts,
            total_count=sum(type_counts.values()),
        )

    # ---------------------------------------------------------------------
    # Helpers
    # ---------------------------------------------------------------------

    def _create(self, feedback_type: str, feedback_data: dict) -> FeedbackResponse:
        feedback: Feedback = self._repository.create({'type': feedback_type, **feedback_data})

        track_feedback_received(feedback_type)
        logger.info(
            'Feedback criado',
            feedback_id=feedback.id,
            type=feedback_type,
            conversation_id=feedback.conversation_id,
        )
        return FeedbackResponse.model_validate(feedback)

    @staticmethod
    def _generic_data(data: FeedbackCreate) -> dict:
        return {
            'conversation_id': data.conversation_id,
            'user_id': data.user_id,
            'content': data.content,
            'feedback_metadata': data.metadata,
        }

    @staticmethod
    def _merge_issue_type(metadata: str | None, issue_type: str) -> str:
        """Inclui issue_type no objeto JSON de metadata."""
        merged: dict = {}
        if metadata:
            try:
                parsed = json.loads(metadata)
            except json.JSONDecodeError:
                raise ValidationException(
                    'metadata deve ser um objeto JSON',
                    field='metadata',
                )
            if not isinstance(parsed, dict):
                raise ValidationException(
                    'metadata deve ser um objeto JSON',
                    field='metadata',
                )
            merged.update(parsed)

        merged['issue_type'] = issue_type
        return json.dumps(merged)
