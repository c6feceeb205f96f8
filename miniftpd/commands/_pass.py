import logging

from miniftpd.entities.command import Command
from miniftpd.entities.ftp_codes import FtpCode

logger = logging.getLogger("miniftpd.commands.pass")


def handle_pass(cmd: Command, session) -> tuple:
    """
    Maneja el comando PASS <password>.
    - Requiere que USER haya sido aceptado antes.
    - Valida contra el hash bcrypt del usuario.
    - Al autenticar, el directorio actual pasa a ser el directorio base.
    """
    user = session.user

    # 1. Secuencia incorrecta: PASS sin USER previo
    if user is None:
        logger.info("FAILED LOGIN - PASS without USER. IP %s", session.client_ip)
        return FtpCode.NOT_LOGGED_IN, "Could not authenticate user. Please check your password."

    # 2. El anónimo ya quedó autenticado con USER
    if user.anonymous:
        return FtpCode.USER_LOGGED_IN, "Logged in as anonymous"

    # 3. Validar contraseña
    password = cmd.get_argument() or ""
    if not session.users.validate_password(user, password):
        logger.info("FAILED LOGIN - User %s IP %s", user.username, session.client_ip)
        return FtpCode.NOT_LOGGED_IN, "Could not authenticate user. Please check your password."

    session.authenticate(user)
    logger.info("LOGIN - User %s IP %s", user.username, session.client_ip)
    return FtpCode.USER_LOGGED_IN, f"User logged in. Welcome, {user.username}"
