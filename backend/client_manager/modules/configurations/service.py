from client_manager.modules.configurations.repository import ConfigurationRepository
from client_manager.modules.configurations.schemas import (
    ConfigurationCreate,
    ConfigurationResponse,
    ConfigurationUpdate,
)
from client_manager.shared.exceptions import (
    ConflictException,
    NotFoundException,
    ValidationException,
)
from client_manager.shared.logging import get_logger
from client_manager.shared.schemas import PaginatedResponse
from client_manager.shared.utils import utc_now

logger = get_logger(__name__)


class ConfigurationService:
    """
    Servico de configuracoes.

    Contem a logica de negocio das configuracoes entregues aos clientes:
    validacao de entrada, verificacao de duplicidade e traducao de
    ausencia em NotFoundException. O cache fica encapsulado no repositorio.
    """

    def __init__(self, repository: ConfigurationRepository) -> None:
        """Inicializa o servico com o repositorio de configuracoes."""
        self._repository = repository

    def get_configuration(self, namespace: str, key: str) -> ConfigurationResponse:
        """
        Busca uma configuracao pela chave composta (cache-aside).

        Args:
            namespace: Namespace da configuracao.
            key: Chave da configuracao.

        Returns:
            Dados da configuracao. Quando servida pelo cache, apenas
            namespace, key e value sao preenchidos.

        Raises:
            ValidationException: Se namespace ou chave estiverem vazios.
            NotFoundException: Se a configuracao nao existir.
        """
        if not namespace:
            raise ValidationException('Namespace e obrigatorio', field='namespace')
        if not key:
            raise ValidationException('Chave e obrigatoria', field='key')

        configuration = self._repository.get_by_namespace_key(namespace, key)
        if configuration is None:
            raise NotFoundException('Configuracao nao encontrada')
        return ConfigurationResponse.model_validate(configuration)

    def list_configurations(
        self,
        page: int = 1,
        per_page: int = 20,
        search: str | None = None,
    ) -> PaginatedResponse[ConfigurationResponse]:
        """Lista configuracoes com paginacao e busca textual."""
        configurations, total = self._repository.get_all(
            page=page,
            per_page=per_page,
            search=search,
        )

        return PaginatedResponse[ConfigurationResponse].create(
            items=[
                ConfigurationResponse.model_validate(configuration)
                for configuration in configurations
            ],
            total=total,
            page=page,
            per_page=per_page,
        )

    def get_namespace_configurations(self, namespace: str) -> list[ConfigurationResponse]:
        """Lista todas as configuracoes de um namespace."""
        if not namespace:
            raise ValidationException('Namespace e obrigatorio', field='namespace')

        return [
            ConfigurationResponse.model_validate(configuration)
            for configuration in self._repository.get_by_namespace(namespace)
        ]

    def create_configuration(self, data: ConfigurationCreate) -> ConfigurationResponse:
        """
        Cria uma nova configuracao.

        A duplicidade e verificada no banco (e nao no cache) antes da
        insercao. A verificacao nao e atomica com a escrita.

        Raises:
            ConflictException: Se ja existir configuracao com a mesma chave.
        """
        if self._repository.exists(data.namespace, data.key):
            raise ConflictException('Configuracao ja existe')

        configuration = self._repository.create({
            'namespace': data.namespace,
            'key': data.key,
            'value': data.value,
            'description': data.description,
        })

        logger.info(
            'Configuracao criada',
            configuration_id=configuration.id,
            namespace=configuration.namespace,
            key=configuration.key,
        )
        return ConfigurationResponse.model_validate(configuration)

    def update_configuration(
        self,
        configuration_id: int,
        data: ConfigurationUpdate,
    ) -> ConfigurationResponse:
        """
        Atualiza uma configuracao existente.

        O registro e sempre regravado, mesmo sem campos informados:
        updated_at avanca e o valor volta ao cache com TTL renovado.

        Args:
            configuration_id: ID da configuracao.
            data: Campos a atualizar (apenas os fornecidos).

        Returns:
            Dados da configuracao atualizada.

        Raises:
            NotFoundException: Se a configuracao nao for encontrada.
        """
        existing = self._repository.get_by_id(configuration_id)
        if not existing:
            raise NotFoundException('Configuracao nao encontrada')

        update_data: dict = {}

        if data.namespace is not None:
            update_data['namespace'] = data.namespace

        if data.key is not None:
            update_data['key'] = data.key

        if data.value is not None:
            update_data['value'] = data.value

        if data.description is not None:
            update_data['description'] = data.description

        update_data['updated_at'] = utc_now()

        configuration = self._repository.update(configuration_id, update_data)
        if not configuration:
            raise NotFoundException('Configuracao nao encontrada')

        logger.info(
            'Configuracao atualizada',
            configuration_id=configuration.id,
            namespace=configuration.namespace,
            key=configuration.key,
        )
        return ConfigurationResponse.model_validate(configuration)

    def delete_configuration(self, configuration_id: int) -> None:
        """
        Realiza soft delete de uma configuracao.

        Raises:
            NotFoundException: Se a configuracao nao for encontrada.
        """
        success = self._repository.soft_delete(configuration_id)
        if not success:
            raise NotFoundException('Configuracao nao encontrada')

        logger.info('Configuracao excluida', configuration_id=configuration_id)
