import logging

from miniftpd.entities.command import Command
from miniftpd.entities.file_system_manager import SecurityError
from miniftpd.entities.ftp_codes import FtpCode
from miniftpd.entities.transfer import TransferJob

logger = logging.getLogger("miniftpd.commands.retr")


def handle_retr(cmd: Command, session):
    """Maneja comando RETR - descarga de archivo mediante data connection (streaming)."""

    # 1. Validación de sesión y argumentos
    if not session.is_authenticated():
        return FtpCode.NOT_LOGGED_IN, "Not logged in"

    if not cmd.has_argument():
        return FtpCode.SYNTAX_ERROR_IN_PARAMETERS, "Syntax error in parameters"

    # 2. Resolución segura de la ruta; nada de red si falla
    try:
        file_path = session.resolve_file(cmd.get_argument())
    except (SecurityError, OSError):
        logger.info("RETR rejected for %s: %s", session.client_address, cmd.get_argument())
        return FtpCode.FILE_UNAVAILABLE, "File Not Found"

    # 3. Transferir según el TYPE actual
    return session.run_transfer(TransferJob("RETR", file_path, session.transfer_type))
