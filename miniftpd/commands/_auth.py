import logging

from miniftpd.entities.certificates import CertificateError, certificate_exists, load_server_context
from miniftpd.entities.command import Command
from miniftpd.entities.ftp_codes import FtpCode

logger = logging.getLogger("miniftpd.commands.auth")


def handle_auth(cmd: Command, session) -> tuple:
    """
    Maneja AUTH <mode>. Solo se acepta TLS y solo con certificado configurado.
    El cambio de transporte ocurre después de enviar el 234.
    """
    mode = (cmd.get_argument() or "").strip()
    settings = session.settings

    if mode.upper() != "TLS" or not certificate_exists(settings.tls_certfile):
        return FtpCode.COMMAND_NOT_IMPLEMENTED_FOR_PARAMETER, f"Unrecognized AUTH Mode {mode}"

    if session.control.encrypted:
        return FtpCode.COMMAND_NOT_IMPLEMENTED_FOR_PARAMETER, "TLS already active"

    try:
        context = load_server_context(settings.tls_certfile, settings.tls_keyfile)
    except CertificateError:
        logger.exception("AUTH TLS unavailable for %s", session.client_address)
        return FtpCode.COMMAND_NOT_IMPLEMENTED_FOR_PARAMETER, f"Unrecognized AUTH Mode {mode}"

    session.request_tls(context)
    return FtpCode.SECURITY_EXCHANGE_COMPLETE, "Enabling TLS"
