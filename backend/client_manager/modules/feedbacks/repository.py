from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from client_manager.modules.feedbacks.models import Feedback


class FeedbackRepository:
    """Repositorio de acesso a dados de feedbacks."""

    def __init__(self, db: Session) -> None:
        self._db = db

    def create(self, feedback_data: dict) -> Feedback:
        """Cria um novo feedback."""
        feedback = Feedback(**feedback_data)
        self._db.add(feedback)
        self._db.commit()
        self._db.refresh(feedback)
        return feedback

    def create_batch(self, feedbacks_data: list[dict]) -> int:
        """
        Cria varios feedbacks em uma unica transacao.

        Args:
            feedbacks_data: Lista de dicionarios com os dados de cada feedback.

        Returns:
            Quantidade de feedbacks criados.
        """
        feedbacks = [Feedback(**data) for data in feedbacks_data]
        self._db.add_all(feedbacks)
        self._db.commit()
        return len(feedbacks)

    def get_by_conversation(self, conversation_id: str) -> list[Feedback]:
        """Lista os feedbacks de uma conversa em ordem cronologica."""
        stmt = (
            select(Feedback)
            .where(Feedback.conversation_id == conversation_id)
            .order_by(Feedback.created_at.asc(), Feedback.id.asc())
        )
        return list(self._db.execute(stmt).scalars().all())

    def get_by_type(
        self,
        feedback_type: str,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[list[Feedback], int]:
        """
        Busca feedbacks de um tipo com paginacao (mais recentes primeiro).

        Returns:
            Tupla com lista de feedbacks e total de registros.
        """
        count_stmt = select(func.count(Feedback.id)).where(Feedback.type == feedback_type)
        total: int = self._db.execute(count_stmt).scalar_one()

        offset = (page - 1) * per_page
        stmt = (
            select(Feedback)
            .where(Feedback.type == feedback_type)
            .order_by(Feedback.created_at.desc(), Feedback.id.desc())
            .offset(offset)
            .limit(per_page)
        )
        feedbacks = list(self._db.execute(stmt).scalars().all())
        return feedbacks, total

    def count_by_type(self, start_date: datetime, end_date: datetime) -> dict[str, int]:
        """
        Conta feedbacks por tipo dentro de um periodo (inclusivo).

        Args:
            start_date: Inicio do periodo.
            end_date: Fim do periodo.

        Returns:
            Dicionario tipo -> quantidade.
        """
        stmt = (
            select(Feedback.type, func.count(Feedback.id))
            .where(Feedback.created_at.between(start_date, end_date))
            .group_by(Feedback.type)
        )
        rows = self._db.execute(stmt).all()
        return {feedback_type: count for feedback_type, count in rows}
