from logging.config import fileConfig

from sqlalchemy import create_engine, pool

from alembic import context

from client_manager.config import settings
from client_manager.database import Base

# Registra as tabelas no metadata usado pelo autogenerate
from client_manager.modules.configurations import models as _configurations  # noqa: F401
from client_manager.modules.feedbacks import models as _feedbacks  # noqa: F401
from client_manager.modules.logs import models as _logs  # noqa: F401

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

# A URL vem sempre das configuracoes da aplicacao (DATABASE_DSN / POSTGRES_*)
DATABASE_URL = settings.database_url

# SQLite nao suporta ALTER TABLE completo: usa o modo batch do Alembic
RENDER_AS_BATCH = DATABASE_URL.startswith('sqlite')


def _configure(**kwargs) -> None:
    context.configure(
        target_metadata=Base.metadata,
        compare_type=True,
        render_as_batch=RENDER_AS_BATCH,
        **kwargs,
    )


def run_migrations_offline() -> None:
    """Gera o SQL das migracoes sem conectar ao banco."""
    _configure(
        url=DATABASE_URL,
        literal_binds=True,
        dialect_opts={'paramstyle': 'named'},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Aplica as migracoes no banco configurado."""
    engine = create_engine(DATABASE_URL, poolclass=pool.NullPool)
    try:
        with engine.connect() as connection:
            _configure(connection=connection)
            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
