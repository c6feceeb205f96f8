"""Servidor FTP mínimo (RFC-959): sesión de control, PORT/PASV, LIST y RETR."""

__version__ = "0.1.0"
