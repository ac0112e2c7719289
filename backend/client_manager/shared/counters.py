import threading
from datetime import datetime

from client_manager.shared.utils import utc_now


class RequestCounters:
    """
    Contadores de requisicoes e erros da instancia da API.

    Cada aplicacao FastAPI possui sua propria instancia (app.state),
    injetada no middleware de requisicoes. Seguro para uso concorrente
    pelas threads do servidor.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._requests = 0
        self._errors = 0
        self._started_at: datetime = utc_now()

    def record_request(self) -> None:
        """Incrementa o total de requisicoes."""
        with self._lock:
            self._requests += 1

    def record_error(self) -> None:
        """Incrementa o total de respostas com erro."""
        with self._lock:
            self._errors += 1

    def mark_started(self, started_at: datetime | None = None) -> None:
        """Define o instante de inicio usado no calculo de uptime."""
        with self._lock:
            self._started_at = started_at or utc_now()

    @property
    def request_count(self) -> int:
        with self._lock:
            return self._requests

    @property
    def error_count(self) -> int:
        with self._lock:
            return self._errors

    @property
    def started_at(self) -> datetime:
        with self._lock:
            return self._started_at

    def uptime_seconds(self) -> float:
        """Segundos desde o inicio da aplicacao."""
        return (utc_now() - self.started_at).total_seconds()

    def snapshot(self) -> dict:
        """Retorna os valores atuais para o health check."""
        with self._lock:
            requests, errors, started_at = self._requests, self._errors, self._started_at
        return {
            'request_count': requests,
            'error_count': errors,
            'started_at': started_at.isoformat(),
            'uptime_seconds': round((utc_now() - started_at).total_seconds(), 1),
        }
