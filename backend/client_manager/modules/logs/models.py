from sqlalchemy import BigInteger, Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from client_manager.shared.models import BaseModel


class ClientLog(BaseModel):
    """
    Modelo de log enviado pelos clientes.

    Cada registro contem um trecho do log de um modulo do cliente.
    start_flag e end_flag marcam o inicio e o fim de uma sessao.
    """

    __tablename__ = 'client_logs'

    client_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
    )
    user_id: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        index=True,
    )
    module_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
    )
    file_name: Mapped[str | None] = mapped_column(
        String(512),
        nullable=True,
    )
    log_content: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    first_line_no: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        default=0,
    )
    last_line_no: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        default=0,
    )
    start_flag: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )
    end_flag: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )
