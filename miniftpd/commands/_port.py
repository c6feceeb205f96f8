import logging

from miniftpd.entities.command import Command
from miniftpd.entities.data_channel import decode_endpoint, same_host
from miniftpd.entities.ftp_codes import FtpCode

logger = logging.getLogger("miniftpd.commands.port")


def handle_port(cmd: Command, session) -> tuple:
    """Maneja PORT h1,h2,h3,h4,p1,p2 - modo activo."""
    if not session.is_authenticated():
        return FtpCode.NOT_LOGGED_IN, "Not logged in"

    if not cmd.has_argument():
        return FtpCode.SYNTAX_ERROR_IN_PARAMETERS, "Syntax error in parameters"

    try:
        endpoint = decode_endpoint(cmd.get_argument())
    except ValueError as e:
        logger.info("Malformed PORT from %s: %s (%s)", session.client_address, cmd.get_argument(), e)
        return FtpCode.SYNTAX_ERROR_IN_PARAMETERS, "Syntax error in parameters"

    # Protección contra FTP bounce (RFC-2577)
    if not session.settings.permit_foreign_addresses and not same_host(endpoint.host, session.client_ip):
        logger.warning("PORT to foreign address %s rejected for %s", endpoint, session.client_address)
        return FtpCode.SYNTAX_ERROR_IN_PARAMETERS, f"Rejected data connection to foreign address {endpoint}"

    session.data_channel.set_active(endpoint)
    return FtpCode.COMMAND_OK, "Data Connection Established"
