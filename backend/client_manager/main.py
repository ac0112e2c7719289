import time
from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator

from botocore.exceptions import BotoCoreError, ClientError
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator
from redis import Redis
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from client_manager.config import settings
from client_manager.database import get_db, init_db
from client_manager.dependencies import get_cache_client, get_request_counters
from client_manager.shared.counters import RequestCounters
from client_manager.shared.exceptions import (
    ConflictException,
    NotFoundException,
    StorageException,
    ValidationException,
)
from client_manager.shared.logging import (
    bind_request_context,
    generate_id,
    get_logger,
    reset_request_context,
    setup_logging,
)
from client_manager.shared.metrics import track_request_finished, track_request_started
from client_manager.shared.redis_client import create_redis_client
from client_manager.shared.storage import LogStorage

# Inicializa logging estruturado antes de qualquer outro codigo
setup_logging(
    log_level=settings.log_level,
    log_format=settings.log_format,
    log_levels=settings.log_levels,
)

logger = get_logger(__name__)

SERVICE_NAME = 'Client Manager API'
SERVICE_VERSION = '1.0.0'
API_PREFIX = '/client-manager/api/v1'


def _ensure_storage_bucket() -> None:
    """Garante o bucket de logs; falhas nao impedem o startup."""
    try:
        LogStorage.from_settings().ensure_bucket()
    except (ClientError, BotoCoreError) as exc:
        logger.warning(
            'Storage indisponivel no startup, upload de logs pode falhar',
            bucket=settings.minio_bucket,
            error=str(exc),
        )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Gerencia o ciclo de vida da aplicacao (startup/shutdown)."""
    # Startup: banco, cache e storage
    init_db()
    app.state.redis = create_redis_client()
    _ensure_storage_bucket()
    app.state.request_counters.mark_started()
    logger.info(
        'Client Manager API iniciada',
        version=SERVICE_VERSION,
        cache_enabled=app.state.redis is not None,
        cors_origins=settings.cors_origins,
    )
    yield
    # Shutdown: libera conexoes do Redis
    if app.state.redis is not None:
        app.state.redis.close()
        app.state.redis = None
    logger.info('Client Manager API encerrada')


app = FastAPI(
    title=SERVICE_NAME,
    description='API de configuracoes, feedbacks e logs dos clientes',
    version=SERVICE_VERSION,
    lifespan=lifespan,
    docs_url='/docs',
    redoc_url='/redoc',
)

# Estado da aplicacao: cache (definido no startup) e contadores de requisicoes
app.state.redis = None
app.state.request_counters = RequestCounters()

# -------------------------------------------------------------------------
# CORS Middleware
# -------------------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=['GET', 'POST', 'PUT', 'DELETE', 'OPTIONS'],
    allow_headers=[
        'Authorization',
        'Content-Type',
        'Accept',
        'Origin',
        'X-Requested-With',
        'X-Client-ID',
        'X-Correlation-ID',
    ],
)

# -------------------------------------------------------------------------
# Prometheus Instrumentation
# -------------------------------------------------------------------------
Instrumentator(
    should_group_status_codes=True,
    should_ignore_untemplated=True,
    should_group_untemplated=True,
    excluded_handlers=['/metrics', '/docs', '/redoc', '/openapi.json'],
).instrument(app).expose(app, endpoint='/metrics', include_in_schema=False)


@app.middleware('http')
async def request_counters_middleware(request: Request, call_next) -> JSONResponse:
    """
    Atualiza os contadores de requisicoes e erros da aplicacao.

    Respostas com status >= 400 contam como erro.
    """
    counters: RequestCounters = request.app.state.request_counters
    counters.record_request()
    track_request_started()

    status_code = 500
    try:
        response = await call_next(request)
        status_code = response.status_code
        return response
    finally:
        if status_code >= 400:
            counters.record_error()
        track_request_finished(request.method, status_code)


@app.middleware('http')
async def request_context_middleware(
    request: Request,
    call_next,
) -> JSONResponse:
    """
    Gera request_id e correlation_id para cada request HTTP.

    O correlation_id pode ser propagado pelo cliente via header
    X-Correlation-ID, ou sera gerado automaticamente. O client_id
    vem do header X-Client-ID, quando enviado.
    """
    req_id = generate_id()
    corr_id = request.headers.get('x-correlation-id') or generate_id()

    context_token = bind_request_context(
        request_id=req_id,
        correlation_id=corr_id,
        client_id=request.headers.get('x-client-id'),
    )

    try:
        response = await call_next(request)
        response.headers['X-Request-ID'] = req_id
        response.headers['X-Correlation-ID'] = corr_id
        return response
    finally:
        reset_request_context(context_token)


# -------------------------------------------------------------------------
# Handlers globais de excecoes
# -------------------------------------------------------------------------


@app.exception_handler(NotFoundException)
async def not_found_exception_handler(
    request: Request, exc: NotFoundException
) -> JSONResponse:
    return JSONResponse(
        status_code=404,
        content={'success': False, 'code': exc.code, 'message': exc.message},
    )


@app.exception_handler(ValidationException)
async def validation_exception_handler(
    request: Request, exc: ValidationException
) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={
            'success': False,
            'code': exc.code,
            'message': exc.message,
            'field': exc.field,
        },
    )


@app.exception_handler(ConflictException)
async def conflict_exception_handler(
    request: Request, exc: ConflictException
) -> JSONResponse:
    return JSONResponse(
        status_code=409,
        content={'success': False, 'code': exc.code, 'message': exc.message},
    )


@app.exception_handler(StorageException)
async def storage_exception_handler(
    request: Request, exc: StorageException
) -> JSONResponse:
    return JSONResponse(
        status_code=503,
        content={'success': False, 'code': exc.code, 'message': exc.message},
    )


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(
    request: Request, exc: SQLAlchemyError
) -> JSONResponse:
    logger.error(
        'Erro no banco de dados',
        path=request.url.path,
        method=request.method,
        error=str(exc),
    )
    return JSONResponse(
        status_code=500,
        content={
            'success': False,
            'code': 'internal.error',
            'message': 'Erro interno do servidor',
        },
    )


# -------------------------------------------------------------------------
# Routers dos modulos
# -------------------------------------------------------------------------
from client_manager.modules.configurations.router import router as configurations_router
from client_manager.modules.feedbacks.router import router as feedbacks_router
from client_manager.modules.logs.router import router as logs_router

app.include_router(configurations_router)
app.include_router(feedbacks_router)
app.include_router(logs_router)


# -------------------------------------------------------------------------
# Health Check
# -------------------------------------------------------------------------


@app.get('/', tags=['Health'])
async def health_check() -> dict[str, str]:
    """Endpoint de health check simples da aplicacao."""
    return {
        'status': 'healthy',
        'service': SERVICE_NAME,
        'version': SERVICE_VERSION,
    }


def _elapsed_ms(started: float) -> float:
    return round((time.monotonic() - started) * 1000, 1)


def _check_database(db: Session) -> dict:
    started = time.monotonic()
    try:
        db.execute(text('SELECT 1')).scalar()
    except SQLAlchemyError as exc:
        return {'status': 'unhealthy', 'error': str(exc)[:200]}
    return {'status': 'healthy', 'latency_ms': _elapsed_ms(started)}


def _check_redis(redis: Redis | None) -> dict:
    if redis is None:
        return {'status': 'disabled'}
    started = time.monotonic()
    try:
        redis.ping()
    except RedisError as exc:
        return {'status': 'unhealthy', 'error': str(exc)[:200]}
    return {'status': 'healthy', 'latency_ms': _elapsed_ms(started)}


@app.get(f'{API_PREFIX}/health', tags=['Health'])
def api_health_check(
    db: Session = Depends(get_db),
    redis: Redis | None = Depends(get_cache_client),
    counters: RequestCounters = Depends(get_request_counters),
) -> dict:
    """
    Health check com status do banco de dados e do Redis.

    - healthy: banco e cache respondendo
    - degraded: cache desabilitado ou fora do ar (leituras vao ao banco)
    - unhealthy: banco fora do ar
    """
    database = _check_database(db)
    cache = _check_redis(redis)

    if database['status'] != 'healthy':
        overall = 'unhealthy'
    elif cache['status'] != 'healthy':
        overall = 'degraded'
    else:
        overall = 'healthy'

    return {
        'status': overall,
        'service': SERVICE_NAME,
        'version': SERVICE_VERSION,
        'components': {'database': database, 'redis': cache},
        **counters.snapshot(),
    }
