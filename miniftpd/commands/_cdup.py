from miniftpd.commands._cwd import change_directory
from miniftpd.entities.command import Command
from miniftpd.entities.ftp_codes import FtpCode


def handle_cdup(cmd: Command, session) -> tuple:
    """Maneja comando CDUP - equivalente a CWD .."""
    if not session.is_authenticated():
        return FtpCode.NOT_LOGGED_IN, "Not logged in"

    return change_directory(session, "..")
