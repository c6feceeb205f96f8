import platform

from miniftpd.entities.command import Command
from miniftpd.entities.ftp_codes import FtpCode

SYSTEM_MAPPINGS = {
    'linux': "UNIX Type: L8",
    'darwin': "UNIX Type: L8",
    'windows': "Windows_NT",
}

DEFAULT_SYSTEM_INFO = "UNKNOWN Type: L8"


def get_system_info():
    """Obtiene información del sistema para el comando SYST"""
    return SYSTEM_MAPPINGS.get(platform.system().lower(), DEFAULT_SYSTEM_INFO)


def handle_syst(cmd: Command, session) -> tuple:
    """Maneja comando SYST - información del sistema."""
    return FtpCode.SYSTEM_TYPE, get_system_info()
