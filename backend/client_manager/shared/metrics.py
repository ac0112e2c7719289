"""
Metricas Prometheus customizadas para o Client Manager.

Define contadores e gauges para monitorar conexoes ativas, logs e
feedbacks recebidos e a efetividade do cache de configuracoes.
As metricas HTTP padrao (contagem e latencia por rota) sao expostas
pelo prometheus-fastapi-instrumentator em main.py.
"""

from prometheus_client import Counter, Gauge

# ---------------------------------------------------------------------------
# Metricas de requisicoes
# ---------------------------------------------------------------------------

ACTIVE_CONNECTIONS = Gauge(
    'client_manager_active_connections',
    'Numero de requisicoes HTTP em andamento',
)

HTTP_ERRORS_TOTAL = Counter(
    'client_manager_http_errors_total',
    'Total de respostas HTTP com status de erro',
    ['method', 'status'],
)

# ---------------------------------------------------------------------------
# Metricas de telemetria dos clientes
# ---------------------------------------------------------------------------

LOGS_RECEIVED_TOTAL = Counter(
    'client_manager_logs_received_total',
    'Total de logs recebidos por cliente e modulo',
    ['client_id', 'module'],
)

FEEDBACKS_RECEIVED_TOTAL = Counter(
    'client_manager_feedbacks_received_total',
    'Total de feedbacks recebidos por tipo',
    ['type'],
)

# ---------------------------------------------------------------------------
# Metricas do cache de configuracoes
# ---------------------------------------------------------------------------

CONFIG_CACHE_REQUESTS_TOTAL = Counter(
    'client_manager_config_cache_requests_total',
    'Consultas ao cache de configuracoes por resultado',
    ['result'],  # result: hit/miss/error
)

# ---------------------------------------------------------------------------
# Helpers para instrumentar o codigo
# ---------------------------------------------------------------------------


def track_request_started() -> None:
    """Registra inicio de uma requisicao."""
    ACTIVE_CONNECTIONS.inc()


def track_request_finished(method: str, status_code: int) -> None:
    """Registra finalizacao de uma requisicao."""
    ACTIVE_CONNECTIONS.dec()
    if status_code >= 400:
        HTTP_ERRORS_TOTAL.labels(method=method, status=str(status_code)).inc()


def track_log_received(client_id: str, module: str) -> None:
    """Registra recebimento de um log de cliente."""
    LOGS_RECEIVED_TOTAL.labels(client_id=client_id, module=module).inc()


def track_feedback_received(feedback_type: str, count: int = 1) -> None:
    """Registra recebimento de feedbacks."""
    FEEDBACKS_RECEIVED_TOTAL.labels(type=feedback_type).inc(count)


def track_cache_lookup(result: str) -> None:
    """Registra o resultado de uma consulta ao cache (hit, miss ou error)."""
    CONFIG_CACHE_REQUESTS_TOTAL.labels(result=result).inc()
