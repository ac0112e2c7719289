from sqlalchemy import Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from client_manager.shared.models import SoftDeleteModel


class Configuration(SoftDeleteModel):
    """
    Modelo de configuracao entregue aos clientes.

    Identificada pela chave composta (namespace, key). A unicidade do par
    e verificada pelo servico antes da criacao, mas nao e garantida por
    constraint no banco.
    Herda de SoftDeleteModel (inclui id, created_at, updated_at, deleted_at).
    """

    __tablename__ = 'configurations'
    __table_args__ = (
        Index('ix_configurations_namespace_key', 'namespace', 'key'),
    )

    namespace: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
    )
    key: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    value: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default='',
    )
    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        default=None,
    )
