from collections.abc import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from client_manager.config import settings


def _engine_options(database_url: str) -> dict:
    """Opcoes do engine conforme o dialeto (SQLite nao usa pool de conexoes)."""
    if database_url.startswith('sqlite'):
        return {'connect_args': {'check_same_thread': False}}
    return {
        'pool_pre_ping': True,
        'pool_size': 10,
        'max_overflow': 90,
        'pool_recycle': 3600,
        'pool_timeout': 30,
    }


# Cria engine de conexao com o banco configurado
engine = create_engine(
    settings.database_url,
    echo=False,
    **_engine_options(settings.database_url),
)

# Fabrica de sessoes
SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Classe base declarativa para todos os modelos SQLAlchemy."""
    pass


def init_db() -> None:
    """Cria as tabelas que ainda nao existem (ambientes sem Alembic)."""
    # Importa os modelos para registra-los no metadata
    from client_manager.modules.configurations import models as _configurations  # noqa: F401
    from client_manager.modules.feedbacks import models as _feedbacks  # noqa: F401
    from client_manager.modules.logs import models as _logs  # noqa: F401

    Base.metadata.create_all(bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Dependency do FastAPI que fornece uma sessao do banco de dados."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
