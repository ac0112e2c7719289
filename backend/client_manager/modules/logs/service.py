from datetime import datetime

from botocore.exceptions import BotoCoreError, ClientError

from client_manager.modules.logs.repository import ClientLogRepository
from client_manager.modules.logs.schemas import (
    ClientLogCreate,
    ClientLogResponse,
    ClientLogStatsResponse,
    LogUploadResponse,
)
from client_manager.shared.exceptions import StorageException, ValidationException
from client_manager.shared.logging import get_logger
from client_manager.shared.metrics import track_log_received
from client_manager.shared.schemas import PaginatedResponse
from client_manager.shared.security import sanitize_filename
from client_manager.shared.storage import LogStorage

logger = get_logger(__name__)

# Prefixo dos arquivos de log no bucket
LOG_UPLOAD_PREFIX = 'logs'


def build_upload_key(user_id: str, filename: str) -> str:
    """
    Monta a chave do arquivo no bucket: logs/{user_id}/{filename}.

    Quando o usuario nao e identificado, o arquivo fica direto em logs/.
    """
    parts = [LOG_UPLOAD_PREFIX, sanitize_filename(user_id), filename]
    return '/'.join(part for part in parts if part)


class ClientLogService:
    """
    Servico de logs dos clientes.

    Registra trechos de log no banco, recebe arquivos de log completos
    (armazenados no MinIO/S3) e oferece consultas e estatisticas.
    """

    def __init__(
        self,
        repository: ClientLogRepository,
        storage: LogStorage | None = None,
    ) -> None:
        """
        Inicializa o servico.

        Args:
            repository: Repositorio de logs.
            storage: Cliente de storage, necessario apenas para upload.
        """
        self._repository = repository
        self._storage = storage

    def create_log(self, data: ClientLogCreate) -> ClientLogResponse:
        """
        Registra um trecho de log.

        Raises:
            ValidationException: Se client_id ou module_name estiverem vazios.
        """
        if not data.client_id:
            raise ValidationException('client_id e obrigatorio', field='client_id')
        if not data.module_name:
            raise ValidationException('module_name e obrigatorio', field='module_name')

        client_log = self._repository.create(data.model_dump())

        track_log_received(client_log.client_id, client_log.module_name)
        logger.info(
            'Log registrado',
            log_id=client_log.id,
            client_id=client_log.client_id,
            user_id=client_log.user_id,
            module_name=client_log.module_name,
        )
        return ClientLogResponse.model_validate(client_log)

    def upload_log_file(
        self,
        user_id: str,
        filename: str | None,
        file_data: bytes,
        content_type: str | None = None,
    ) -> LogUploadResponse:
        """
        Armazena um arquivo de log enviado pelo cliente.

        Args:
            user_id: ID do usuario extraido do token (pode ser vazio).
            filename: Nome original do arquivo; apenas o nome base e usado.
            file_data: Conteudo do arquivo.
            content_type: Tipo MIME informado no upload.

        Returns:
            Bucket, chave e tamanho do arquivo armazenado.

        Raises:
            ValidationException: Se o nome do arquivo for invalido.
            StorageException: Se o upload para o storage falhar.
        """
        safe_name = sanitize_filename(filename or '')
        if not safe_name:
            raise ValidationException('Nome de arquivo invalido', field='logfile')

        if self._storage is None:
            raise StorageException('Storage de arquivos nao configurado')

        object_key = build_upload_key(user_id, safe_name)
        try:
            self._storage.put_log_file(
                object_key,
                file_data,
                content_type=content_type or 'text/plain',
            )
        except (ClientError, BotoCoreError) as exc:
            logger.error(
                'Falha no upload do arquivo de log',
                object_key=object_key,
                user_id=user_id,
                error=str(exc),
            )
            raise StorageException('Falha ao armazenar arquivo de log') from exc

        logger.info(
            'Arquivo de log armazenado',
            object_key=object_key,
            user_id=user_id,
            size=len(file_data),
        )
        return LogUploadResponse(
            message=f'Arquivo enviado com sucesso: {object_key}',
            bucket=self._storage.bucket,
            object_key=object_key,
            size=len(file_data),
        )

    # ---------------------------------------------------------------------
    # Consultas
    # ---------------------------------------------------------------------

    @staticmethod
    def _page(
        logs: list,
        total: int,
        page: int,
        per_page: int,
    ) -> PaginatedResponse[ClientLogResponse]:
        return PaginatedResponse[ClientLogResponse].create(
            items=[ClientLogResponse.model_validate(client_log) for client_log in logs],
            total=total,
            page=page,
            per_page=per_page,
        )

    def list_by_client(
        self,
        client_id: str,
        page: int = 1,
        per_page: int = 20,
    ) -> PaginatedResponse[ClientLogResponse]:
        """Lista logs de um cliente (mais recentes primeiro)."""
        logs, total = self._repository.get_by_client(client_id, page=page, per_page=per_page)
        return self._page(logs, total, page, per_page)

    def list_by_user(
        self,
        user_id: str,
        page: int = 1,
        per_page: int = 20,
    ) -> PaginatedResponse[ClientLogResponse]:
        """Lista logs de um usuario (mais recentes primeiro)."""
        logs, total = self._repository.get_by_user(user_id, page=page, per_page=per_page)
        return self._page(logs, total, page, per_page)

    def list_by_module(
        self,
        module_name: str,
        page: int = 1,
        per_page: int = 20,
    ) -> PaginatedResponse[ClientLogResponse]:
        """Lista logs de um modulo (mais recentes primeiro)."""
        logs, total = self._repository.get_by_module(module_name, page=page, per_page=per_page)
        return self._page(logs, total, page, per_page)

    def list_sessions(
        self,
        client_id: str,
        page: int = 1,
        per_page: int = 20,
    ) -> PaginatedResponse[ClientLogResponse]:
        """Lista os marcadores de inicio/fim de sessao de um cliente."""
        logs, total = self._repository.get_sessions(client_id, page=page, per_page=per_page)
        return self._page(logs, total, page, per_page)

    def get_stats(
        self,
        start_date: datetime | None,
        end_date: datetime | None,
    ) -> ClientLogStatsResponse:
        """
        Retorna totais de logs por cliente e por modulo em um periodo.

        Raises:
            ValidationException: Se alguma das datas nao for informada.
        """
        if start_date is None:
            raise ValidationException('start_date e obrigatorio', field='start_date')
        if end_date is None:
            raise ValidationException('end_date e obrigatorio', field='end_date')

        return ClientLogStatsResponse(**self._repository.get_stats(start_date, end_date))

    def delete_old_logs(self, before_date: datetime | None) -> int:
        """
        Remove os logs criados antes da data informada.

        Returns:
            Quantidade de logs removidos.

        Raises:
            ValidationException: Se a data nao for informada.
        """
        if before_date is None:
            raise ValidationException('before_date e obrigatorio', field='before_date')

        deleted_count = self._repository.delete_before(before_date)
        logger.info(
            'Logs antigos removidos',
            before_date=before_date.isoformat(),
            deleted_count=deleted_count,
        )
        return deleted_count
