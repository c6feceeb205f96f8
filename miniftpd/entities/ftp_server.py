import logging
import socket
import threading
from typing import Optional

from miniftpd.entities.client_session import ClientSession
from miniftpd.entities.command import Command
from miniftpd.entities.control_stream import ControlStream, LineTooLongError
from miniftpd.entities.ftp_codes import FtpCode
from miniftpd.entities.user_manager import UserManager
from miniftpd.handlers_dispatch import FTP_COMMAND_HANDLERS

logger = logging.getLogger("miniftpd.server")

# Cada cuánto revisa el listener si debe detenerse
ACCEPT_POLL_INTERVAL = 0.5


def create_listener_socket(settings, backlog: int = 5) -> socket.socket:
    """Crea el socket de escucha; con IPv6 se usa dual-stack si el SO lo permite."""
    if settings.use_ipv6:
        server_sock = socket.socket(socket.AF_INET6, socket.SOCK_STREAM)
        try:
            server_sock.setsockopt(socket.IPPROTO_IPV6, socket.IPV6_V6ONLY, 0)
        except (AttributeError, OSError):
            logger.warning("Dual-stack IPv6 not available; IPv4 clients may not connect")
        host = settings.host if settings.host not in ("", "0.0.0.0") else "::"
    else:
        server_sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        host = settings.host

    try:
        server_sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        server_sock.bind((host, settings.port))
        server_sock.listen(backlog)
    except OSError:
        server_sock.close()
        raise

    return server_sock


def serve(server_sock: socket.socket, settings, user_manager: UserManager,
          stop_event: Optional[threading.Event] = None) -> None:
    """
    Acepta conexiones y lanza una sesión por cliente en un hilo separado.
    No espera a las sesiones; termina cuando `stop_event` se activa.
    """
    if stop_event is None:
        stop_event = threading.Event()

    server_sock.settimeout(ACCEPT_POLL_INTERVAL)
    address = server_sock.getsockname()
    logger.info("FTP connection listener started on %s:%d", address[0], address[1])

    try:
        while not stop_event.is_set():
            try:
                client_sock, client_addr = server_sock.accept()

            except socket.timeout:
                continue

            except OSError as e:
                if stop_event.is_set():
                    break
                logger.exception("Error accepting connection: %s", e)
                continue

            logger.info("Accepted connection from %s", client_addr)
            t = threading.Thread(target=client_handler, args=(client_sock, client_addr, settings, user_manager),
                                 name=f"ftp-session-{client_addr[0]}:{client_addr[1]}", daemon=True)
            t.start()

    finally:
        try:
            server_sock.close()
        except OSError:
            pass

        logger.info("Connection listener stopped")


def start_connection_listener(settings, user_manager: UserManager, backlog: int = 5,
                              stop_event: Optional[threading.Event] = None) -> None:
    """Punto de entrada para aceptar conexiones según la configuración."""
    server_sock = create_listener_socket(settings, backlog=backlog)
    serve(server_sock, settings, user_manager, stop_event=stop_event)


def client_handler(client_socket: socket.socket, client_address, settings, user_manager: UserManager) -> None:
    """Crear sesión y ejecutar dispatcher para el cliente."""
    logger.info("Handling new client %s", client_address)
    control = ControlStream(client_socket, client_address, idle_timeout=settings.idle_timeout)
    session = ClientSession(control, settings, user_manager)

    try:
        session.send_response(FtpCode.SERVICE_READY, f"{settings.server_name} Ready")
        command_dispatcher(session)

    except Exception:
        # Fallo fatal: solo cae esta sesión
        logger.exception("Error while handling client %s", client_address)

    finally:
        session.close()
        control.close()
        logger.info("Session closed for %s", client_address)


def command_dispatcher(session: ClientSession) -> None:
    """
    Lee la conexión de control línea a línea y despacha cada comando.
    Un comando (y su transferencia) termina antes de leer el siguiente.
    """
    control = session.control
    client_address = session.client_address

    while not session.is_closed():
        try:
            line = control.readline()
        except socket.timeout:
            logger.info("Idle timeout for %s", client_address)
            session.send_response(FtpCode.SERVICE_NOT_AVAILABLE, "Idle timeout, closing control connection")
            return
        except LineTooLongError:
            logger.info("Line too long from %s", client_address)
            session.send_response(FtpCode.SYNTAX_ERROR, "Line too long")
            continue

        if line is None:
            logger.info("Client %s closed the connection", client_address)
            return

        if not line.strip():
            continue

        command = Command(line)
        logger.info("Received command from %s: %s", client_address, command)
        handler = FTP_COMMAND_HANDLERS.get(command.get_name())

        if handler is None:
            logger.info("Unknown command - %s - args %s", command.get_name(), command.get_argument())
            session.send_response(FtpCode.COMMAND_NOT_IMPLEMENTED, "Command not implemented")
            continue

        reply = handler(command, session)
        if reply is not None:
            code, message = reply
            session.send_response(code, message)

        # El cambio a TLS solo ocurre entre comandos
        session.apply_pending_tls()

        if not control.connected:
            logger.info("Control connection to %s lost", client_address)
            return


__all__ = [
    'create_listener_socket',
    'serve',
    'start_connection_listener',
    'client_handler',
    'command_dispatcher',
]
