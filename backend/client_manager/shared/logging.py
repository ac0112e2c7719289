"""
Logging estruturado do Client Manager (structlog + logging stdlib).

Cada requisicao HTTP abre um contexto com request_id, correlation_id e
client_id (header X-Client-ID), anexado a todos os eventos emitidos
durante a requisicao. Logs de bibliotecas terceiras passam pelo mesmo
pipeline e saem no mesmo formato (JSON ou console).
"""

import logging
import logging.config
import uuid
from contextvars import ContextVar, Token

import structlog

SERVICE_NAME = 'client-manager'

# Campos cujo valor nunca deve aparecer nos logs
_SENSITIVE_KEYS = frozenset({'authorization', 'token', 'password', 'secret_key'})

# Bibliotecas com log muito verboso em INFO
_QUIET_LOGGERS = ('uvicorn', 'uvicorn.access', 'sqlalchemy.engine', 'botocore', 'boto3', 'redis')

_VALID_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')

# ---------------------------------------------------------------------------
# Contexto da requisicao
# ---------------------------------------------------------------------------
_request_context: ContextVar[dict | None] = ContextVar('request_context', default=None)


def generate_id() -> str:
    """Gera um identificador curto (12 chars hex) para requisicoes."""
    return uuid.uuid4().hex[:12]


def bind_request_context(
    request_id: str,
    correlation_id: str,
    client_id: str | None = None,
) -> Token:
    """
    Abre o contexto de log de uma requisicao.

    Returns:
        Token a ser passado para reset_request_context ao final da requisicao.
    """
    context = {'request_id': request_id, 'correlation_id': correlation_id}
    if client_id:
        context['client_id'] = client_id
    return _request_context.set(context)


def reset_request_context(token: Token) -> None:
    """Fecha o contexto aberto por bind_request_context."""
    _request_context.reset(token)


def current_request_context() -> dict:
    """Copia do contexto da requisicao atual (vazio fora de requisicoes)."""
    return dict(_request_context.get() or {})


# ---------------------------------------------------------------------------
# Structlog processors
# ---------------------------------------------------------------------------

def add_request_context(
    logger: logging.Logger,
    method_name: str,
    event_dict: dict,
) -> dict:
    """Anexa os ids da requisicao atual sem sobrescrever campos do evento."""
    for field, value in (_request_context.get() or {}).items():
        event_dict.setdefault(field, value)
    return event_dict


def add_service_name(
    logger: logging.Logger,
    method_name: str,
    event_dict: dict,
) -> dict:
    event_dict['service'] = SERVICE_NAME
    return event_dict


def mask_sensitive_fields(
    logger: logging.Logger,
    method_name: str,
    event_dict: dict,
) -> dict:
    """Substitui o valor de campos sensiveis (ex: authorization) por '***'."""
    for field in _SENSITIVE_KEYS.intersection(event_dict):
        event_dict[field] = '***'
    return event_dict


# ---------------------------------------------------------------------------
# Log levels por modulo
# ---------------------------------------------------------------------------

def parse_log_levels(log_levels_str: str) -> dict[str, str]:
    """
    Interpreta a configuracao LOG_LEVELS.

    Formato: "client_manager.modules.configurations:DEBUG,sqlalchemy.engine:INFO".
    Pares sem ':' ou com nivel desconhecido sao ignorados.
    """
    levels: dict[str, str] = {}
    for pair in (log_levels_str or '').split(','):
        module, sep, level = pair.strip().rpartition(':')
        module = module.strip()
        level = level.strip().upper()
        if sep and module and level in _VALID_LEVELS:
            levels[module] = level
    return levels


def set_module_log_levels(levels: dict[str, str]) -> None:
    for module_name, level_str in levels.items():
        logging.getLogger(module_name).setLevel(getattr(logging, level_str))


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------

_configured = False


def _renderer(log_format: str):
    if log_format == 'console':
        return structlog.dev.ConsoleRenderer()
    return structlog.processors.JSONRenderer(ensure_ascii=False)


def setup_logging(
    log_level: str = 'INFO',
    log_format: str = 'json',
    log_levels: str = '',
) -> None:
    """
    Configura structlog e o logging stdlib para toda a aplicacao.

    Idempotente: apenas a primeira chamada tem efeito.

    Args:
        log_level: Nivel global (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_format: 'json' (producao) ou 'console' (desenvolvimento).
        log_levels: Overrides por modulo, no formato de parse_log_levels.
    """
    global _configured
    if _configured:
        return
    _configured = True

    shared_processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        add_service_name,
        add_request_context,
        mask_sensitive_fields,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt='iso', utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    logging.config.dictConfig({
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'structlog': {
                '()': structlog.stdlib.ProcessorFormatter,
                'processors': [
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    _renderer(log_format),
                ],
                'foreign_pre_chain': shared_processors,
            },
        },
        'handlers': {
            'default': {
                'class': 'logging.StreamHandler',
                'formatter': 'structlog',
                'stream': 'ext://sys.stdout',
            },
        },
        'root': {
            'handlers': ['default'],
            'level': log_level.upper(),
        },
        'loggers': {name: {'level': 'WARNING'} for name in _QUIET_LOGGERS},
    })

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    set_module_log_levels(parse_log_levels(log_levels))


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """
    Retorna um logger structlog para o modulo.

    Uso:
        logger = get_logger(__name__)
        logger.warning('Falha ao consultar cache', cache_key=cache_key)
    """
    return structlog.get_logger(name)
