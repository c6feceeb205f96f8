import os
from typing import Optional


class SecurityError(Exception):
    """Excepción para rutas que escapan del directorio base"""
    pass

# =============================================================================
# PATH RESOLUTION
# =============================================================================

def canonical_path(path: str) -> str:
    """Ruta absoluta canónica: resuelve '..', symlinks y mayúsculas según el SO."""
    return os.path.normcase(os.path.realpath(path))


def resolve_ftp_path(base_directory: str, current_directory: str, requested_path: Optional[str]) -> str:
    """
    Combina la ruta pedida por el cliente con el estado de la sesión.
    No valida nada; ver `secure_path_resolution`.

    - ausente / ""  -> directorio actual
    - "/"           -> directorio base del usuario
    - "/x/y"        -> relativa al directorio base
    - "x/y"         -> relativa al directorio actual
    """
    if not requested_path:
        return current_directory
    if requested_path == "/":
        return base_directory
    if requested_path.startswith("/"):
        return os.path.join(base_directory, requested_path.lstrip("/"))
    return os.path.join(current_directory, requested_path)


def is_within_root(base_directory: str, path: str) -> bool:
    """
    Comprueba que `path` sea `base_directory` o un descendiente suyo.

    Compara por componentes (no por prefijo de texto), así '/data/user2'
    no pasa como hijo de '/data/user'.
    """
    root = canonical_path(base_directory)
    candidate = canonical_path(path)
    try:
        return os.path.commonpath([root, candidate]) == root
    except ValueError:
        # Unidades distintas en Windows
        return False


def secure_path_resolution(base_directory: str, current_directory: str, requested_path: Optional[str]) -> str:
    """
    Resuelve y valida una ruta de forma segura.

    Returns:
        str: ruta real canónica dentro de `base_directory`

    Raises:
        SecurityError: si la ruta resuelta queda fuera del directorio base
            o no es representable (p. ej. contiene un byte NUL)
    """
    joined = resolve_ftp_path(base_directory, current_directory, requested_path)
    try:
        resolved = os.path.realpath(joined)
    except ValueError as e:
        raise SecurityError(f"Invalid path: {e}") from e

    if not is_within_root(base_directory, resolved):
        raise SecurityError("Path traversal attempt detected")

    return resolved

# =============================================================================
# FILE SYSTEM QUERIES
# =============================================================================

def resolve_directory(base_directory: str, current_directory: str, requested_path: Optional[str]) -> str:
    """Resuelve una ruta que debe ser un directorio existente."""
    resolved = secure_path_resolution(base_directory, current_directory, requested_path)
    if not os.path.isdir(resolved):
        raise NotADirectoryError(resolved)
    return resolved


def resolve_file(base_directory: str, current_directory: str, requested_path: Optional[str]) -> str:
    """Resuelve una ruta que debe ser un archivo regular existente."""
    if not requested_path:
        raise FileNotFoundError("No file name given")
    resolved = secure_path_resolution(base_directory, current_directory, requested_path)
    if not os.path.isfile(resolved):
        raise FileNotFoundError(resolved)
    return resolved
