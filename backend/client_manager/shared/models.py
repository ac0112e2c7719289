from datetime import datetime

from sqlalchemy import DateTime, Integer, func
from sqlalchemy.orm import Mapped, mapped_column

from client_manager.database import Base


class BaseModel(Base):
    """Tabela com id inteiro e carimbos de criacao/atualizacao."""

    __abstract__ = True

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class SoftDeleteModel(BaseModel):
    """
    Tabela cujas linhas sao apenas marcadas como excluidas.

    Consultas devem filtrar deleted_at IS NULL.
    """

    __abstract__ = True

    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
