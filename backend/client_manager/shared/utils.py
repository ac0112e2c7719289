from datetime import UTC, datetime

from jose import JWTError, jwt


def utc_now() -> datetime:
    """Retorna a data e hora atual em UTC."""
    return datetime.now(UTC)


def user_id_from_authorization(authorization: str | None) -> str:
    """
    Extrai o user id do claim 'id' de um token Bearer, sem validar assinatura.

    O token e emitido por outro servico; aqui ele serve apenas para
    identificar o diretorio do usuario. Retorna string vazia se o header
    estiver ausente ou o token for invalido.
    """
    if not authorization:
        return ''

    token = authorization
    if authorization.startswith('Bearer '):
        token = authorization[len('Bearer '):]

    try:
        claims = jwt.get_unverified_claims(token)
    except JWTError:
        return ''

    user_id = claims.get('id')
    if isinstance(user_id, bool) or user_id is None:
        return ''
    if isinstance(user_id, float):
        return f'{user_id:.0f}'
    if isinstance(user_id, (int, str)):
        return str(user_id)
    return ''
