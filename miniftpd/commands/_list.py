import logging

from miniftpd.entities.command import Command
from miniftpd.entities.file_system_manager import SecurityError
from miniftpd.entities.ftp_codes import FtpCode
from miniftpd.entities.transfer import TransferJob

logger = logging.getLogger("miniftpd.commands.list")

# Opciones de 'ls' que algunos clientes envían como argumento
IGNORED_LIST_OPTIONS = ("-a", "-l", "-al", "-la")


def handle_list(cmd: Command, session):
    """Maneja comando LIST - listar directorio con formato detallado"""
    if not session.is_authenticated():
        return FtpCode.NOT_LOGGED_IN, "Not logged in"

    path = cmd.get_argument()
    if path is not None and path.strip().lower() in IGNORED_LIST_OPTIONS:
        path = None

    try:
        directory = session.resolve_directory(path)
    except (SecurityError, OSError):
        logger.info("LIST rejected for %s: %s", session.client_address, path)
        return FtpCode.FILE_ACTION_NOT_TAKEN, "Requested file action not taken"

    # El listado no depende del TYPE de la sesión
    return session.run_transfer(TransferJob("LIST", directory))
