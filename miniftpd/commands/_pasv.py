import ipaddress
import logging

from miniftpd.entities.command import Command
from miniftpd.entities.data_channel import encode_endpoint, normalize_host
from miniftpd.entities.ftp_codes import FtpCode

logger = logging.getLogger("miniftpd.commands.pasv")


def get_pasv_ip(session) -> str:
    """
    IP local por la que el cliente llegó a la conexión de control.
    PASV solo puede anunciar direcciones IPv4.
    """
    local_ip = normalize_host(session.control.local_address)
    if ipaddress.ip_address(local_ip).version != 4:
        raise ValueError(f"PASV requires an IPv4 control connection, got {local_ip}")
    return local_ip


def handle_pasv(cmd: Command, session) -> tuple:
    """Maneja comando PASV - modo pasivo para transferencia de datos"""
    if not session.is_authenticated():
        return FtpCode.NOT_LOGGED_IN, "Not logged in"

    try:
        bind_ip = get_pasv_ip(session)
        endpoint = session.data_channel.open_passive(bind_ip, session.settings.passive_address)
        encoded = encode_endpoint(endpoint)

    except (OSError, ValueError) as e:
        logger.warning("PASV setup failed for %s: %s", session.client_address, e)
        session.data_channel.close()
        return FtpCode.CANT_OPEN_DATA_CONNECTION, "Can't open data connection"

    return FtpCode.ENTERING_PASSIVE_MODE, f"Entering Passive Mode ({encoded})."
