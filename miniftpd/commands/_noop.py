from miniftpd.entities.command import Command
from miniftpd.entities.ftp_codes import FtpCode


def handle_noop(cmd: Command, session) -> tuple:
    """Maneja comando NOOP - no operation (mantener conexión activa)."""
    return FtpCode.COMMAND_OK, "NOOP ok"
