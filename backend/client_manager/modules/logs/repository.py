from datetime import datetime

from sqlalchemy import delete, func, or_, select
from sqlalchemy.orm import Session

from client_manager.modules.logs.models import ClientLog


class ClientLogRepository:
    """Repositorio de acesso a dados de logs dos clientes."""

    def __init__(self, db: Session) -> None:
        self._db = db

    def create(self, log_data: dict) -> ClientLog:
        """Cria um novo registro de log."""
        client_log = ClientLog(**log_data)
        self._db.add(client_log)
        self._db.commit()
        self._db.refresh(client_log)
        return client_log

    def _paginate(self, filters: list, page: int, per_page: int) -> tuple[list[ClientLog], int]:
        """Conta e busca uma pagina de logs (mais recentes primeiro)."""
        count_stmt = select(func.count(ClientLog.id)).where(*filters)
        total: int = self._db.execute(count_stmt).scalar_one()

        offset = (page - 1) * per_page
        stmt = (
            select(ClientLog)
            .where(*filters)
            .order_by(ClientLog.created_at.desc(), ClientLog.id.desc())
            .offset(offset)
            .limit(per_page)
        )
        logs = list(self._db.execute(stmt).scalars().all())
        return logs, total

    def get_by_client(
        self,
        client_id: str,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[list[ClientLog], int]:
        """Busca logs de um cliente com paginacao."""
        return self._paginate([ClientLog.client_id == client_id], page, per_page)

    def get_by_user(
        self,
        user_id: str,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[list[ClientLog], int]:
        """Busca logs de um usuario com paginacao."""
        return self._paginate([ClientLog.user_id == user_id], page, per_page)

    def get_by_module(
        self,
        module_name: str,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[list[ClientLog], int]:
        """Busca logs de um modulo com paginacao."""
        return self._paginate([ClientLog.module_name == module_name], page, per_page)

    def get_sessions(
        self,
        client_id: str,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[list[ClientLog], int]:
        """
        Busca os logs que marcam inicio ou fim de sessao de um cliente.

        Args:
            client_id: ID do cliente.
            page: Numero da pagina (1-indexed).
            per_page: Quantidade de itens por pagina.

        Returns:
            Tupla com lista de logs e total de registros.
        """
        filters = [
            ClientLog.client_id == client_id,
            or_(ClientLog.start_flag.is_(True), ClientLog.end_flag.is_(True)),
        ]
        return self._paginate(filters, page, per_page)

    def get_stats(self, start_date: datetime, end_date: datetime) -> dict:
        """
        Agrega a quantidade de logs por cliente e por modulo em um periodo.

        Returns:
            Dicionario com total_count, client_counts e module_counts.
        """
        period = ClientLog.created_at.between(start_date, end_date)

        total: int = self._db.execute(
            select(func.count(ClientLog.id)).where(period)
        ).scalar_one()

        client_rows = self._db.execute(
            select(ClientLog.client_id, func.count(ClientLog.id))
            .where(period)
            .group_by(ClientLog.client_id)
        ).all()

        module_rows = self._db.execute(
            select(ClientLog.module_name, func.count(ClientLog.id))
            .where(period)
            .group_by(ClientLog.module_name)
        ).all()

        return {
            'total_count': total,
            'client_counts': {client_id: count for client_id, count in client_rows},
            'module_counts': {module_name: count for module_name, count in module_rows},
        }

    def delete_before(self, before_date: datetime) -> int:
        """
        Remove definitivamente os logs criados antes da data informada.

        Returns:
            Quantidade de registros removidos.
        """
        stmt = delete(ClientLog).where(ClientLog.created_at < before_date)
        result = self._db.execute(stmt)
        self._db.commit()
        return result.rowcount or 0
