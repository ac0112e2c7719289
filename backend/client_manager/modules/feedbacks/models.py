from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from client_manager.shared.models import BaseModel

# Tipos de feedback aceitos pela API
FEEDBACK_TYPES = (
    'completion',
    'copy_code',
    'evaluate',
    'use_code',
    'issue',
    'error',
)


class Feedback(BaseModel):
    """
    Modelo de feedback enviado pelos clientes (IDE/plugin).

    O campo metadata guarda um JSON serializado como texto. O atributo
    Python se chama feedback_metadata porque 'metadata' e reservado
    pelo SQLAlchemy Declarative.
    """

    __tablename__ = 'feedbacks'

    type: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        index=True,
    )
    conversation_id: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        index=True,
    )
    user_id: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        index=True,
    )
    content: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    feedback_metadata: Mapped[str | None] = mapped_column(
        'metadata',
        Text,
        nullable=True,
    )
