import logging

from miniftpd.entities.command import Command
from miniftpd.entities.ftp_codes import FtpCode

logger = logging.getLogger("miniftpd.commands.quit")


def handle_quit(cmd: Command, session):
    """
    Maneja comando QUIT. Siempre termina el bucle de comandos; la respuesta
    221 solo se envía a sesiones autenticadas.
    """
    authenticated = session.is_authenticated()
    session.close()

    if not authenticated:
        return None

    logger.info("User Disconnected %s IP (%s)", session.user.username, session.client_ip)
    return FtpCode.CLOSING_CONTROL_CONNECTION, "Closing connection."
