import logging
import select
import socket
import ssl
from typing import Optional

logger = logging.getLogger("miniftpd.control_stream")

# RFC-959 no fija un máximo; cortar líneas absurdas evita crecer sin límite
MAX_LINE_LENGTH = 8192


class LineTooLongError(Exception):
    """La línea de comando supera MAX_LINE_LENGTH; ya fue descartada."""


class ControlStream:
    """
    Lectura/escritura por líneas sobre el socket de control.

    Las respuestas se enmarcan como "<código> <mensaje>\\r\\n". El transporte
    puede pasar a TLS en el sitio (AUTH TLS); el objeto nunca se reemplaza.
    """

    def __init__(self, sock: socket.socket, client_address=None, idle_timeout: Optional[float] = None):
        self._sock = sock
        self.client_address = client_address or self._peer_address()
        self.encrypted = False
        self.connected = True

        if idle_timeout:
            self._sock.settimeout(idle_timeout)

        self._reader = self._sock.makefile("rb")

    # ----------------- lectura -----------------
    def readline(self) -> Optional[str]:
        """
        Lee una línea de comando sin el terminador.
        Retorna None cuando el cliente cerró la conexión.

        Raises:
            socket.timeout: si vence el timeout de inactividad
            LineTooLongError: si la línea supera MAX_LINE_LENGTH
        """
        raw = self._reader.readline(MAX_LINE_LENGTH)
        if not raw:
            self.connected = False
            return None

        if len(raw) >= MAX_LINE_LENGTH and not raw.endswith(b"\n"):
            self._discard_until_newline()
            raise LineTooLongError(f"Line longer than {MAX_LINE_LENGTH} bytes")

        return raw.decode("utf-8", errors="replace").rstrip("\r\n")

    def _discard_until_newline(self):
        while True:
            chunk = self._reader.readline(MAX_LINE_LENGTH)
            if not chunk or chunk.endswith(b"\n"):
                return

    # ----------------- escritura -----------------
    def send_response(self, code: int, message: str) -> None:
        """Envía una respuesta con formato RFC-959. No lanza excepciones."""
        line = f"{int(code)} {message}\r\n"
        try:
            self._sock.sendall(line.encode("utf-8"))
            logger.info("Sent response to %s: %s", self.client_address, line.strip())
        except OSError:
            self.connected = False
            logger.exception("Failed to send response to %s: %s", self.client_address, line.strip())

    # ----------------- TLS -----------------
    def upgrade(self, context: ssl.SSLContext) -> None:
        """Negocia TLS como servidor sobre el mismo socket de control."""
        # El lector en claro no debe tener bytes pendientes: el cliente
        # espera el 234 antes de iniciar el handshake.
        self._reader.close()
        self._sock = context.wrap_socket(self._sock, server_side=True)
        self._reader = self._sock.makefile("rb")
        self.encrypted = True
        logger.info("Control connection with %s upgraded to TLS", self.client_address)

    # ----------------- estado -----------------
    def peer_closed(self) -> bool:
        """
        Indica si el cliente cerró la conexión de control, sin consumir datos.
        Con TLS no se puede espiar el flujo y siempre retorna False.
        """
        if not self.connected:
            return True
        if self.encrypted:
            return False

        try:
            readable, _, _ = select.select([self._sock], [], [], 0)
            if not readable:
                return False
            return self._sock.recv(1, socket.MSG_PEEK) == b""
        except OSError:
            return True

    @property
    def local_address(self) -> str:
        return self._sock.getsockname()[0]

    def _peer_address(self):
        try:
            return self._sock.getpeername()
        except OSError:
            return None

    def close(self) -> None:
        self.connected = False
        try:
            self._reader.close()
        except OSError:
            pass

        try:
            self._sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        self._sock.close()
