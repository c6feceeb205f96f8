from miniftpd.entities.command import Command
from miniftpd.entities.ftp_codes import FtpCode


def handle_pwd(cmd: Command, session) -> tuple:
    """Maneja comando PWD - Print Working Directory"""
    current_dir = session.current_directory or "/"
    return FtpCode.PATH_CREATED, f'"{current_dir}" is current directory.'
