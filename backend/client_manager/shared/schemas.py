import math
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

ItemT = TypeVar('ItemT')


class PaginatedResponse(BaseModel, Generic[ItemT]):
    """Pagina de resultados de uma listagem."""

    items: list[ItemT]
    total: int = Field(ge=0)
    page: int = Field(ge=1)
    per_page: int = Field(ge=1)
    total_pages: int = Field(ge=0)

    @classmethod
    def create(
        cls,
        items: list[ItemT],
        total: int,
        page: int,
        per_page: int,
    ) -> 'PaginatedResponse[ItemT]':
        return cls(
            items=items,
            total=total,
            page=page,
            per_page=per_page,
            total_pages=math.ceil(total / per_page),
        )


class MessageResponse(BaseModel):
    """Resposta de operacoes sem recurso de retorno (ex: exclusao, lote)."""

    success: bool = True
    message: str
    data: dict[str, Any] | None = None
