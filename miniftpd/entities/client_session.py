import logging
import os
import ssl
from enum import Enum
from typing import Optional, Tuple

from miniftpd.entities import file_system_manager
from miniftpd.entities.control_stream import ControlStream
from miniftpd.entities.data_channel import DataChannel, DataChannelError, normalize_host
from miniftpd.entities.ftp_codes import FtpCode
from miniftpd.entities.transfer import TransferAborted, TransferJob, TransferType
from miniftpd.entities.user_manager import User, UserManager

logger = logging.getLogger("miniftpd.session")


class SessionState(Enum):
    """
    Transiciones válidas:

        UNAUTHENTICATED  --USER conocido-->   AWAITING_PASSWORD
        AWAITING_PASSWORD --PASS correcto-->  AUTHENTICATED
        UNAUTHENTICATED  --USER anonymous-->  AUTHENTICATED
        cualquiera       --QUIT / error-->    CLOSED
    """

    UNAUTHENTICATED = "unauthenticated"
    AWAITING_PASSWORD = "awaiting_password"
    AUTHENTICATED = "authenticated"
    CLOSED = "closed"


class ClientSession:
    """Representa el estado de sesión de un cliente FTP (una conexión de control)."""

    def __init__(self, control: ControlStream, settings, user_manager: UserManager):
        self.control = control
        self.settings = settings
        self.users = user_manager
        self.client_address = control.client_address

        expected = None if settings.permit_foreign_addresses else self.client_ip
        self.data_channel = DataChannel(timeout=settings.data_timeout, expected_host=expected)

        self._pending_tls: Optional[ssl.SSLContext] = None
        self.reset_session()

    # ----------------- session lifecycle -----------------
    def reset_session(self) -> None:
        """Vuelve al estado inicial sin tocar la conexión de control."""
        self.state = SessionState.UNAUTHENTICATED
        self.user: Optional[User] = None
        self.base_directory: Optional[str] = None
        self.current_directory: Optional[str] = None
        self.transfer_type = TransferType.ASCII

    def close(self) -> None:
        """Marca la sesión como cerrada y libera la conexión de datos pendiente."""
        self.state = SessionState.CLOSED
        self.data_channel.close()

    def is_closed(self) -> bool:
        return self.state is SessionState.CLOSED

    @property
    def client_ip(self) -> Optional[str]:
        if not self.client_address:
            return None
        return normalize_host(self.client_address[0])

    # ----------------- user / auth -----------------
    def select_user(self, user: User) -> None:
        """USER con un usuario conocido: invalida cualquier login previo."""
        self.reset_session()
        self.user = user
        self.state = SessionState.AWAITING_PASSWORD
        logger.info("Username set to: %s", user.username)

    def authenticate(self, user: User) -> None:
        """Marca la sesión como autenticada y sitúa al usuario en su directorio base."""
        self.user = user
        self.base_directory = os.path.realpath(user.base_directory)
        self.current_directory = self.base_directory
        self.state = SessionState.AUTHENTICATED
        logger.info("User %s authenticated successfully", user.username)

    def is_authenticated(self) -> bool:
        return self.state is SessionState.AUTHENTICATED

    def is_awaiting_password(self) -> bool:
        return self.state is SessionState.AWAITING_PASSWORD

    # ----------------- paths -----------------
    def resolve_directory(self, path: Optional[str]) -> str:
        return file_system_manager.resolve_directory(self.base_directory, self.current_directory, path)

    def resolve_file(self, path: Optional[str]) -> str:
        return file_system_manager.resolve_file(self.base_directory, self.current_directory, path)

    def change_directory(self, path: Optional[str]) -> str:
        """Resuelve `path` y lo fija como directorio actual si es válido."""
        self.current_directory = self.resolve_directory(path)
        return self.current_directory

    # ----------------- transfer parameters -----------------
    def set_transfer_type(self, transfer_type: TransferType) -> None:
        self.transfer_type = transfer_type
        logger.debug("Transfer type set to %s for %s", transfer_type.value, self.client_address)

    # ----------------- response sending -----------------
    def send_response(self, code: int, message: str) -> None:
        self.control.send_response(code, message)

    # ----------------- TLS -----------------
    def request_tls(self, context: ssl.SSLContext) -> None:
        """Programa el paso a TLS para después de enviar la respuesta actual."""
        self._pending_tls = context

    def apply_pending_tls(self) -> None:
        """Aplica el cambio de transporte pendiente; solo entre comandos."""
        if self._pending_tls is None:
            return
        context, self._pending_tls = self._pending_tls, None
        self.control.upgrade(context)

    # ----------------- data transfers -----------------
    def run_transfer(self, job: TransferJob) -> Optional[Tuple[int, str]]:
        """
        Abre la conexión de datos negociada, ejecuta `job` y devuelve la
        respuesta final para el canal de control (None si el control cayó).
        """
        if not self.data_channel.is_ready():
            return FtpCode.CANT_OPEN_DATA_CONNECTION, "Use PORT or PASV first"

        mode = self.data_channel.mode.value
        self.send_response(FtpCode.OPENING_DATA_CONNECTION, f"Opening {mode} mode data transfer for {job.command}")

        try:
            with self.data_channel.connect() as data_socket:
                sent = job.run(data_socket, should_abort=self.control.peer_closed)

        except DataChannelError as e:
            logger.warning("Data connection failed for %s: %s", self.client_address, e)
            return FtpCode.CANT_OPEN_DATA_CONNECTION, "Can't open data connection"

        except TransferAborted:
            logger.warning("%s aborted, control connection to %s lost", job.command, self.client_address)
            return None

        except OSError as e:
            logger.warning("%s of %s failed for %s: %s", job.command, job.path, self.client_address, e)
            return FtpCode.TRANSFER_ABORTED, "Connection closed; transfer aborted"

        logger.info("%s of %s complete for %s (%d sent)", job.command, job.path, self.client_address, sent)
        if job.command == "LIST":
            return FtpCode.CLOSING_DATA_CONNECTION, "Transfer complete"
        return FtpCode.CLOSING_DATA_CONNECTION, "File transfer complete"

    # ----------------- util -----------------
    def __str__(self):
        username = self.user.username if self.user else None
        return f"ClientSession(addr={self.client_address}, user={username}, state={self.state.value})"
