"""
Ponto de entrada de linha de comando do Client Manager.

Uso:
    client-manager --listen :8080
    client-manager --listen 127.0.0.1:9000 --no-redis
    client-manager --config /etc/client-manager/.env
"""

import argparse
import os

import uvicorn


def parse_listen(value: str, default_host: str, default_port: int) -> tuple[str, int]:
    """
    Interpreta o endereco de escuta no formato host:port ou :port.

    Args:
        value: Endereco informado (vazio usa os valores padrao).
        default_host: Host usado quando omitido.
        default_port: Porta usada quando omitida.

    Returns:
        Tupla (host, porta).

    Raises:
        ValueError: Se a porta nao for um inteiro valido.
    """
    if not value:
        return default_host, default_port

    host, sep, port = value.rpartition(':')
    if not sep:
        if value.isdigit():
            host, port = '', value
        else:
            return value, default_port

    try:
        port_number = int(port) if port else default_port
    except ValueError:
        raise ValueError(f'Porta invalida: {port}') from None
    if not 0 < port_number < 65536:
        raise ValueError(f'Porta invalida: {port}')
    return host or default_host, port_number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='client-manager',
        description='Servidor de configuracoes, feedbacks e logs dos clientes',
    )
    parser.add_argument(
        '--listen', '-l',
        default='',
        help='Endereco de escuta (host:port ou :port)',
    )
    parser.add_argument(
        '--no-redis',
        action='store_true',
        help='Desabilita o cache Redis (leituras direto do banco)',
    )
    parser.add_argument(
        '--config', '-c',
        default=None,
        help='Arquivo .env com as configuracoes',
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """Le os argumentos, ajusta o ambiente e inicia o servidor uvicorn."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # As configuracoes sao lidas no import; o ambiente precisa estar pronto antes
    if args.config:
        os.environ['CLIENT_MANAGER_ENV_FILE'] = args.config
    if args.no_redis:
        os.environ['REDIS_ENABLED'] = 'false'

    from client_manager.config import settings

    try:
        host, port = parse_listen(args.listen, settings.server_host, settings.server_port)
    except ValueError as exc:
        parser.error(str(exc))

    uvicorn.run(
        'client_manager.main:app',
        host=host,
        port=port,
        log_config=None,
    )


if __name__ == '__main__':
    main()
