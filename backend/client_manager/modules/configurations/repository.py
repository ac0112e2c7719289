from redis import Redis
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from client_manager.modules.configurations.models import Configuration
from client_manager.shared.cache import cache_delete, cache_get, cache_set
from client_manager.shared.utils import utc_now

# Formato de chave consultado por ferramentas externas: nao alterar
CONFIG_CACHE_PREFIX = 'config:'

# Tempo de vida fixo das entradas de configuracao no cache (5 minutos)
CONFIG_CACHE_TTL_SECONDS = 5 * 60


def config_cache_key(namespace: str, key: str) -> str:
    """Monta a chave de cache de uma configuracao (ex: config:build:timeout)."""
    return f'{CONFIG_CACHE_PREFIX}{namespace}:{key}'


class ConfigurationRepository:
    """
    Repositorio de acesso a dados de configuracoes.

    O banco de dados e a unica fonte da verdade. Quando um cliente Redis
    e fornecido, as leituras por (namespace, key) usam cache-aside e as
    escritas invalidam ou atualizam a entrada correspondente. Sem Redis
    (redis=None), todas as operacoes acessam apenas o banco.
    """

    def __init__(self, db: Session, redis: Redis | None = None) -> None:
        """Inicializa o repositorio com a sessao do banco e o cache opcional."""
        self._db = db
        self._redis = redis

    # ---------------------------------------------------------------------
    # Leituras com cache
    # ---------------------------------------------------------------------

    def get_by_namespace_key(self, namespace: str, key: str) -> Configuration | None:
        """
        Busca uma configuracao pela chave composta, consultando o cache primeiro.

        Em cache hit, retorna uma instancia transiente com apenas namespace,
        key e value preenchidos (id, description e timestamps nao sao
        cacheados). Em miss ou falha do Redis, consulta o banco e repopula
        o cache com TTL fixo.

        Args:
            namespace: Namespace da configuracao.
            key: Chave da configuracao dentro do namespace.

        Returns:
            Configuracao encontrada ou None.
        """
        cache_key = config_cache_key(namespace, key)

        cached_value = cache_get(self._redis, cache_key)
        if cached_value is not None:
            return Configuration(namespace=namespace, key=key, value=cached_value)

        configuration = self.find_by_namespace_key(namespace, key)
        if configuration is None:
            return None

        cache_set(self._redis, cache_key, configuration.value, CONFIG_CACHE_TTL_SECONDS)
        return configuration

    # ---------------------------------------------------------------------
    # Leituras direto no banco
    # ---------------------------------------------------------------------

    def find_by_namespace_key(self, namespace: str, key: str) -> Configuration | None:
        """
        Busca uma configuracao pela chave composta apenas no banco.

        Como a unicidade nao e garantida por constraint, retorna o registro
        ativo de menor id quando houver duplicatas.
        """
        stmt = (
            select(Configuration)
            .where(
                Configuration.namespace == namespace,
                Configuration.key == key,
                Configuration.deleted_at.is_(None),
            )
            .order_by(Configuration.id)
            .limit(1)
        )
        return self._db.execute(stmt).scalars().first()

    def exists(self, namespace: str, key: str) -> bool:
        """Indica se existe configuracao ativa com a chave composta."""
        return self.find_by_namespace_key(namespace, key) is not None

    def get_by_id(self, configuration_id: int) -> Configuration | None:
        """
        Busca uma configuracao pelo ID (excluindo registros com soft delete).

        Args:
            configuration_id: ID da configuracao.

        Returns:
            Configuracao encontrada ou None.
        """
        stmt = select(Configuration).where(
            Configuration.id == configuration_id,
            Configuration.deleted_at.is_(None),
        )
        return self._db.execute(stmt).scalar_one_or_none()

    def get_all(
        self,
        page: int = 1,
        per_page: int = 20,
        search: str | None = None,
    ) -> tuple[list[Configuration], int]:
        """
        Busca configuracoes com paginacao e busca textual.

        Args:
            page: Numero da pagina (1-indexed).
            per_page: Quantidade de itens por pagina.
            search: Termo buscado em namespace, key ou description.

        Returns:
            Tupla com lista de configuracoes e total de registros.
        """
        filters = [Configuration.deleted_at.is_(None)]

        if search:
            search_filter = f'%{search}%'
            filters.append(
                (Configuration.namespace.ilike(search_filter))
                | (Configuration.key.ilike(search_filter))
                | (Configuration.description.ilike(search_filter))
            )

        count_stmt = select(func.count(Configuration.id)).where(*filters)
        total: int = self._db.execute(count_stmt).scalar_one()

        offset = (page - 1) * per_page
        stmt = (
            select(Configuration)
            .where(*filters)
            .order_by(Configuration.created_at.desc(), Configuration.id.desc())
            .offset(offset)
            .limit(per_page)
        )
        configurations = list(self._db.execute(stmt).scalars().all())
        return configurations, total

    def get_by_namespace(self, namespace: str) -> list[Configuration]:
        """Lista as configuracoes de um namespace ordenadas pela chave."""
        stmt = (
            select(Configuration)
            .where(
                Configuration.namespace == namespace,
                Configuration.deleted_at.is_(None),
            )
            .order_by(Configuration.key.asc())
        )
        return list(self._db.execute(stmt).scalars().all())

    # ---------------------------------------------------------------------
    # Escritas (banco primeiro, cache depois)
    # ---------------------------------------------------------------------

    def create(self, configuration_data: dict) -> Configuration:
        """
        Cria uma configuracao e invalida a entrada de cache da chave.

        A entrada e removida (nao sobrescrita) para que a proxima leitura
        busque o registro no banco.
        """
        configuration = Configuration(**configuration_data)
        self._db.add(configuration)
        self._db.commit()
        self._db.refresh(configuration)

        cache_delete(
            self._redis,
            config_cache_key(configuration.namespace, configuration.key),
        )
        return configuration

    def update(self, configuration_id: int, configuration_data: dict) -> Configuration | None:
        """
        Atualiza uma configuracao e regrava o valor no cache com TTL renovado.

        Se namespace ou key mudarem, a entrada da chave antiga tambem e
        removida do cache.

        Args:
            configuration_id: ID da configuracao.
            configuration_data: Campos a atualizar.

        Returns:
            Configuracao atualizada ou None se nao encontrada.
        """
        configuration = self.get_by_id(configuration_id)
        if not configuration:
            return None

        previous_cache_key = config_cache_key(configuration.namespace, configuration.key)

        for field, value in configuration_data.items():
            setattr(configuration, field, value)

        self._db.commit()
        self._db.refresh(configuration)

        cache_key = config_cache_key(configuration.namespace, configuration.key)
        cache_set(self._redis, cache_key, configuration.value, CONFIG_CACHE_TTL_SECONDS)
        if previous_cache_key != cache_key:
            cache_delete(self._redis, previous_cache_key)

        return configuration

    def soft_delete(self, configuration_id: int) -> bool:
        """
        Realiza soft delete (define deleted_at) e invalida o cache da chave.

        Args:
            configuration_id: ID da configuracao a ser excluida.

        Returns:
            True se excluida, False se nao encontrada (nada e alterado).
        """
        configuration = self.get_by_id(configuration_id)
        if not configuration:
            return False

        configuration.deleted_at = utc_now()
        self._db.commit()

        cache_delete(
            self._redis,
            config_cache_key(configuration.namespace, configuration.key),
        )
        return True
