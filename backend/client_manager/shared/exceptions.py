class NotFoundException(Exception):
    """Excecao para recurso nao encontrado (HTTP 404)."""

    code = 'notfound.error'

    def __init__(self, message: str = 'Recurso nao encontrado') -> None:
        self.message = message
        super().__init__(self.message)


class ConflictException(Exception):
    """Excecao para recurso duplicado (HTTP 409)."""

    code = 'conflict.error'

    def __init__(self, message: str = 'Recurso ja existe') -> None:
        self.message = message
        super().__init__(self.message)


class ValidationException(Exception):
    """
    Excecao para dados de entrada invalidos (HTTP 400).

    Carrega o nome do campo que falhou na validacao.
    """

    code = 'validation.error'

    def __init__(self, message: str = 'Requisicao invalida', field: str | None = None) -> None:
        self.message = message
        self.field = field
        super().__init__(self.message)


class StorageException(Exception):
    """Excecao para falhas no storage de objetos (HTTP 503)."""

    code = 'storage.error'

    def __init__(self, message: str = 'Storage indisponivel') -> None:
        self.message = message
        super().__init__(self.message)
