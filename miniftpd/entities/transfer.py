import logging
import os
import socket
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator, Optional

logger = logging.getLogger("miniftpd.transfer")

CHUNK_SIZE = 65536

# Entradas más antiguas muestran el año en lugar de la hora
SIX_MONTHS = 180 * 24 * 60 * 60

DIRECTORY_PREFIX = "drwxr-xr-x    2 2003     2003     4096"
FILE_PREFIX = "-rw-r--r--    2 2003     2003     "


class TransferAborted(Exception):
    """El cliente cerró la conexión de control durante la transferencia."""
    pass


class TransferType(Enum):
    ASCII = "A"
    BINARY = "I"


# =============================================================================
# DIRECTORY LISTING
# =============================================================================

def format_timestamp(mtime: float, now: Optional[float] = None) -> str:
    """'Mon dd HH:MM' para fechas recientes, 'Mon dd  YYYY' si tiene más de 180 días."""
    if now is None:
        now = time.time()
    local = time.localtime(mtime)
    if mtime < now - SIX_MONTHS:
        return time.strftime("%b %d  %Y", local)
    return time.strftime("%b %d %H:%M", local)


def format_directory_line(name: str, mtime: float, now: Optional[float] = None) -> str:
    return f"{DIRECTORY_PREFIX} {format_timestamp(mtime, now)} {name}"


def format_file_line(name: str, size: int, mtime: float, now: Optional[float] = None) -> str:
    return f"{FILE_PREFIX}{size} {format_timestamp(mtime, now)} {name}"


def iter_directory_listing(path: str, now: Optional[float] = None) -> Iterator[str]:
    """
    Genera una línea por entrada de `path`: primero todos los directorios,
    luego todos los archivos, en el orden del sistema de archivos.
    """
    directories = []
    files = []

    with os.scandir(path) as entries:
        for entry in entries:
            try:
                if entry.is_dir():
                    directories.append(entry)
                elif entry.is_file():
                    files.append(entry)
            except OSError:
                logger.debug("Skipping unreadable entry %s", entry.path)

    for entry in directories:
        try:
            st = entry.stat()
        except OSError:
            continue
        yield format_directory_line(entry.name, st.st_mtime, now)

    for entry in files:
        try:
            st = entry.stat()
        except OSError:
            continue
        yield format_file_line(entry.name, st.st_size, st.st_mtime, now)


def send_listing(data_socket: socket.socket, path: str, should_abort: Optional[Callable[[], bool]] = None) -> int:
    """
    Envía el listado por la conexión de datos como líneas ASCII con CRLF,
    independiente del TYPE de la sesión. Retorna el número de líneas.
    """
    count = 0
    with data_socket.makefile("w", encoding="ascii", errors="replace", newline="\r\n") as writer:
        for line in iter_directory_listing(path):
            _check_abort(should_abort)
            writer.write(line + "\n")
            count += 1
    return count

# =============================================================================
# FILE TRANSFER
# =============================================================================

def send_file(data_socket: socket.socket, path: str, transfer_type: TransferType,
              should_abort: Optional[Callable[[], bool]] = None) -> int:
    """
    Envía el archivo por la conexión de datos.

    - BINARY: bytes crudos en bloques de CHUNK_SIZE.
    - ASCII: se decodifica como texto y los finales de línea salen como CRLF.

    Retorna la cantidad de bytes (binario) o caracteres (ASCII) enviados.
    """
    if transfer_type is TransferType.BINARY:
        return _send_binary(data_socket, path, should_abort)
    return _send_ascii(data_socket, path, should_abort)


def _send_binary(data_socket, path, should_abort) -> int:
    total = 0
    with open(path, "rb") as f:
        while True:
            _check_abort(should_abort)
            chunk = f.read(CHUNK_SIZE)
            if not chunk:
                break
            data_socket.sendall(chunk)
            total += len(chunk)
    return total


def _send_ascii(data_socket, path, should_abort) -> int:
    total = 0
    # newline=None normaliza \r\n y \r a \n al leer; el writer los emite como \r\n
    with open(path, "r", encoding="utf-8", errors="replace", newline=None) as f, \
            data_socket.makefile("w", encoding="ascii", errors="replace", newline="\r\n") as writer:
        while True:
            _check_abort(should_abort)
            chunk = f.read(CHUNK_SIZE)
            if not chunk:
                break
            writer.write(chunk)
            total += len(chunk)
    return total


def _check_abort(should_abort):
    if should_abort is not None and should_abort():
        raise TransferAborted("Control connection closed during transfer")

# =============================================================================
# TRANSFER JOB
# =============================================================================

@dataclass
class TransferJob:
    """Una operación LIST o RETR sobre una ruta ya resuelta y validada."""

    command: str
    path: str
    transfer_type: TransferType = TransferType.BINARY

    def run(self, data_socket: socket.socket, should_abort: Optional[Callable[[], bool]] = None) -> int:
        if self.command == "LIST":
            return send_listing(data_socket, self.path, should_abort)
        return send_file(data_socket, self.path, self.transfer_type, should_abort)
