import os

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Configuracoes da aplicacao carregadas de variaveis de ambiente."""

    model_config = SettingsConfigDict(
        # Arquivo alternativo pode ser indicado pela CLI (--config)
        env_file=os.getenv('CLIENT_MANAGER_ENV_FILE', '.env'),
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore',
    )

    # -------------------------------------------------------------------------
    # Servidor HTTP
    # -------------------------------------------------------------------------
    server_host: str = '0.0.0.0'
    server_port: int = 8080

    # -------------------------------------------------------------------------
    # Banco de dados
    # -------------------------------------------------------------------------
    # DSN completo (ex: sqlite:///./client-manager.db). Quando vazio, a URL
    # e montada a partir dos campos postgres_*.
    database_dsn: str = ''

    postgres_host: str = 'localhost'
    postgres_port: int = 5432
    postgres_user: str = 'client_manager'
    postgres_password: str = 'client_manager_secret_password'
    postgres_db: str = 'client_manager'

    @property
    def database_url(self) -> str:
        """URL de conexao com o banco de dados."""
        if self.database_dsn:
            return self.database_dsn
        return (
            f'postgresql://{self.postgres_user}:{self.postgres_password}'
            f'@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}'
        )

    # -------------------------------------------------------------------------
    # Redis (cache de configuracoes)
    # -------------------------------------------------------------------------
    redis_enabled: bool = True
    redis_url: str = 'redis://localhost:6379/0'
    redis_socket_timeout: float = 3.0

    # -------------------------------------------------------------------------
    # MinIO (S3-compatible) para upload de arquivos de log
    # -------------------------------------------------------------------------
    minio_endpoint: str = 'localhost:9000'
    minio_access_key: str = 'minioadmin'
    minio_secret_key: str = 'minioadmin_secret_password'
    minio_bucket: str = 'client-logs'
    minio_use_ssl: bool = False

    # -------------------------------------------------------------------------
    # Logging
    # -------------------------------------------------------------------------
    log_level: str = 'INFO'
    log_format: str = 'json'
    log_levels: str = ''

    # -------------------------------------------------------------------------
    # CORS
    # -------------------------------------------------------------------------
    cors_origins: str = 'http://localhost:3000'

    @property
    def cors_origins_list(self) -> list[str]:
        """Retorna lista de origens permitidas para CORS."""
        return [origin.strip() for origin in self.cors_origins.split(',')]


# Instancia global de configuracoes
settings = Settings()
