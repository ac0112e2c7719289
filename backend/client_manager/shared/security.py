import re
from pathlib import PurePosixPath, PureWindowsPath

# Regex para remover caracteres de controle ASCII
_CONTROL_CHARS_RE = re.compile(r'[\x00-\x08\x0b-\x0c\x0e-\x1f\x7f]')

# Regex para caracteres potencialmente perigosos em nomes
_DANGEROUS_NAME_CHARS_RE = re.compile(r'[<>"\'`\\]')


def sanitize_text(value: str) -> str:
    """
    Sanitiza um texto removendo caracteres de controle e trim.
    """
    if value is None:
        return value
    cleaned = _CONTROL_CHARS_RE.sub('', value)
    return cleaned.strip()


def sanitize_name(value: str) -> str:
    """
    Sanitiza nomes removendo caracteres perigosos e trim.
    """
    cleaned = sanitize_text(value)
    cleaned = _DANGEROUS_NAME_CHARS_RE.sub('', cleaned)
    return re.sub(r'\s+', ' ', cleaned).strip()


def sanitize_filename(value: str) -> str:
    """
    Reduz um nome de arquivo enviado pelo cliente ao nome base.

    Remove diretorios (separadores POSIX e Windows) para impedir
    path traversal na chave do storage.
    """
    base = PureWindowsPath(PurePosixPath(value or '').name).name
    cleaned = sanitize_name(base)
    if cleaned in ('', '.', '..'):
        return ''
    return cleaned
