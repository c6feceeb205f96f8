import logging

from miniftpd.entities.command import Command
from miniftpd.entities.ftp_codes import FtpCode

logger = logging.getLogger("miniftpd.commands.user")


def handle_user(cmd: Command, session) -> tuple:
    """Maneja el comando USER <username>."""

    # 1. Validar argumentos
    if not cmd.has_argument():
        return FtpCode.SYNTAX_ERROR_IN_PARAMETERS, "Syntax error in parameters"

    username = cmd.get_argument().strip()
    users = session.users

    # 2. Login anónimo: autentica directamente
    if users.is_anonymous_login(username):
        session.authenticate(users.anonymous_user)
        logger.info("LOGIN - Anonymous: true - IP %s", session.client_ip)
        return FtpCode.USER_LOGGED_IN, "Logged in as anonymous"

    # 3. Usuario registrado: esperar contraseña
    user = users.find_by_name(username)
    if user is None:
        session.reset_session()
        logger.info("FAILED LOGIN - Username not found. IP %s", session.client_ip)
        return FtpCode.NOT_LOGGED_IN, "Username not found. Ensure username is correct."

    session.select_user(user)
    logger.info("LOGIN - User Accepted. User: %s. IP %s", username, session.client_ip)
    return FtpCode.USER_OK_NEED_PASSWORD, "Username accepted. Waiting for password.."
