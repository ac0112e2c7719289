"""
Armazenamento dos arquivos de log enviados pelos clientes (MinIO/S3).
"""

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from client_manager.config import settings
from client_manager.shared.logging import get_logger

logger = get_logger(__name__)

# Buckets novos no MinIO ignoram a regiao, mas o boto3 exige uma
_DEFAULT_REGION = 'us-east-1'


def _endpoint_url(endpoint: str, use_ssl: bool) -> str:
    scheme = 'https' if use_ssl else 'http'
    return f'{scheme}://{endpoint}'


class LogStorage:
    """Bucket S3 compativel onde os arquivos de log sao gravados."""

    def __init__(self, client, bucket: str) -> None:
        self._client = client
        self._bucket = bucket

    @classmethod
    def from_settings(cls) -> 'LogStorage':
        """Monta o storage a partir das variaveis MINIO_*."""
        client = boto3.client(
            's3',
            endpoint_url=_endpoint_url(settings.minio_endpoint, settings.minio_use_ssl),
            aws_access_key_id=settings.minio_access_key,
            aws_secret_access_key=settings.minio_secret_key,
            region_name=_DEFAULT_REGION,
            config=Config(retries={'max_attempts': 2}, signature_version='s3v4'),
        )
        return cls(client, settings.minio_bucket)

    @property
    def bucket(self) -> str:
        return self._bucket

    def ensure_bucket(self) -> None:
        """Cria o bucket de logs caso ainda nao exista."""
        try:
            self._client.head_bucket(Bucket=self._bucket)
            return
        except ClientError:
            pass

        self._client.create_bucket(Bucket=self._bucket)
        logger.info('Bucket de logs criado', bucket=self._bucket)

    def put_log_file(
        self,
        object_key: str,
        data: bytes,
        content_type: str = 'text/plain',
    ) -> str:
        """
        Grava um arquivo de log no bucket.

        Args:
            object_key: Chave do objeto (ex: logs/42/session.log).
            data: Conteudo bruto do arquivo.
            content_type: Tipo MIME informado pelo cliente.

        Returns:
            A chave gravada.

        Raises:
            ClientError, BotoCoreError: Falhas do storage sao propagadas.
        """
        self._client.put_object(
            Bucket=self._bucket,
            Key=object_key,
            Body=data,
            ContentType=content_type,
        )
        logger.debug(
            'Objeto gravado no storage',
            bucket=self._bucket,
            object_key=object_key,
            size=len(data),
        )
        return object_key
