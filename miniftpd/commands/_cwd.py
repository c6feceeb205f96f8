import logging

from miniftpd.entities.command import Command
from miniftpd.entities.file_system_manager import SecurityError
from miniftpd.entities.ftp_codes import FtpCode

logger = logging.getLogger("miniftpd.commands.cwd")


def change_directory(session, path: str) -> tuple:
    """Cambia el directorio actual solo si la ruta queda dentro del directorio base."""
    try:
        new_directory = session.change_directory(path)
    except SecurityError:
        logger.warning("CWD outside base directory rejected for %s: %s", session.client_address, path)
        return FtpCode.FILE_UNAVAILABLE, "Failed to change directory"
    except OSError:
        return FtpCode.FILE_UNAVAILABLE, "Failed to change directory"

    return FtpCode.FILE_ACTION_COMPLETED, f'Directory changed to "{new_directory}"'


def handle_cwd(cmd: Command, session) -> tuple:
    """Maneja comando CWD - Change Working Directory"""
    if not session.is_authenticated():
        return FtpCode.NOT_LOGGED_IN, "Not logged in"

    if not cmd.has_argument():
        return FtpCode.SYNTAX_ERROR_IN_PARAMETERS, "Syntax error in parameters"

    return change_directory(session, cmd.get_argument())
