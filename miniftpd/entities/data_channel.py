import ipaddress
import logging
import socket
import struct
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Optional

logger = logging.getLogger("miniftpd.data_channel")


class DataChannelError(Exception):
    """No se pudo establecer la conexión de datos."""
    pass


class DataConnectionMode(Enum):
    ACTIVE = "Active"
    PASSIVE = "Passive"


@dataclass(frozen=True)
class DataEndpoint:
    """Destino IPv4 de la conexión de datos negociado por PORT/PASV."""

    host: str
    port: int

    def __str__(self):
        return f"{self.host}:{self.port}"


# =============================================================================
# ENCODING h1,h2,h3,h4,p1,p2
# =============================================================================

def decode_endpoint(argument: str) -> DataEndpoint:
    """
    Decodifica el argumento de PORT: cuatro octetos de dirección y el
    puerto de 16 bits en orden de red (p1 * 256 + p2).

    Raises:
        ValueError: si el argumento no tiene exactamente seis números 0-255
    """
    parts = argument.strip().split(",")
    if len(parts) != 6:
        raise ValueError(f"Expected 6 comma separated values, got {len(parts)}")

    # bytes() rechaza valores fuera de 0..255
    raw = bytes(int(part) for part in parts)

    host = str(ipaddress.IPv4Address(raw[:4]))
    (port,) = struct.unpack("!H", raw[4:])
    return DataEndpoint(host, port)


def encode_endpoint(endpoint: DataEndpoint) -> str:
    """Inverso exacto de `decode_endpoint`, usado en la respuesta 227."""
    raw = ipaddress.IPv4Address(endpoint.host).packed + struct.pack("!H", endpoint.port)
    return ",".join(str(b) for b in raw)


def normalize_host(host: str) -> str:
    """Convierte direcciones IPv4-mapped (::ffff:a.b.c.d) a su forma IPv4."""
    try:
        addr = ipaddress.ip_address(host.split("%", 1)[0])
    except ValueError:
        return host

    if addr.version == 6 and addr.ipv4_mapped is not None:
        return str(addr.ipv4_mapped)
    return str(addr)


def same_host(a: str, b: str) -> bool:
    return normalize_host(a) == normalize_host(b)

# =============================================================================
# DATA CHANNEL
# =============================================================================

class DataChannel:
    """
    Negociación y apertura de la conexión de datos de una sesión.

    Solo existe un endpoint pendiente a la vez: un nuevo PORT/PASV cierra
    el listener anterior. El endpoint se consume en la siguiente transferencia.
    """

    def __init__(self, timeout: Optional[float] = 30.0, expected_host: Optional[str] = None):
        self.timeout = timeout
        # Si se indica, las conexiones pasivas deben venir de este host
        self.expected_host = expected_host

        self.mode: Optional[DataConnectionMode] = None
        self.endpoint: Optional[DataEndpoint] = None
        self._listener: Optional[socket.socket] = None
        self._connection: Optional[socket.socket] = None

    def is_ready(self) -> bool:
        return self.mode is not None

    # ----------------- negociación -----------------
    def set_active(self, endpoint: DataEndpoint) -> None:
        """PORT: el servidor se conectará a `endpoint`."""
        self.close()
        self.endpoint = endpoint
        self.mode = DataConnectionMode.ACTIVE
        logger.info("Active mode endpoint set to %s", endpoint)

    def open_passive(self, bind_host: str, advertised_host: Optional[str] = None) -> DataEndpoint:
        """
        PASV: abre un listener en un puerto efímero de `bind_host`.
        Retorna el endpoint a anunciar al cliente.
        """
        self.close()

        listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            listener.bind((bind_host, 0))
            listener.listen(1)
            listener.settimeout(self.timeout)
        except OSError:
            listener.close()
            raise

        self._listener = listener
        port = listener.getsockname()[1]
        self.endpoint = DataEndpoint(advertised_host or bind_host, port)
        self.mode = DataConnectionMode.PASSIVE
        logger.info("PASV listening on %s:%d (advertised %s)", bind_host, port, self.endpoint)
        return self.endpoint

    # ----------------- conexión -----------------
    @contextmanager
    def connect(self):
        """
        Abre la conexión de datos según el modo negociado y la cierra al salir.

        Raises:
            DataChannelError: sin PORT/PASV previo, o si connect/accept falla
        """
        if self.mode is None:
            raise DataChannelError("No data endpoint negotiated")

        try:
            if self.mode is DataConnectionMode.ACTIVE:
                conn = self._connect_active()
            else:
                conn = self._accept_passive()
        finally:
            # El endpoint se usa una sola vez
            self._reset_endpoint()

        self._connection = conn
        try:
            yield conn
        finally:
            self._close_connection()

    def _connect_active(self) -> socket.socket:
        try:
            conn = socket.create_connection((self.endpoint.host, self.endpoint.port), timeout=self.timeout)
        except OSError as e:
            raise DataChannelError(f"Cannot connect to {self.endpoint}: {e}") from e

        logger.info("Active data connection established with %s", self.endpoint)
        return conn

    def _accept_passive(self) -> socket.socket:
        try:
            conn, addr = self._listener.accept()
        except OSError as e:
            raise DataChannelError(f"No passive connection on {self.endpoint}: {e}") from e

        if self.expected_host and not same_host(addr[0], self.expected_host):
            conn.close()
            raise DataChannelError(f"Rejected passive connection from foreign address {addr[0]}")

        conn.settimeout(self.timeout)
        logger.info("Passive data connection established with %s", addr)
        return conn

    # ----------------- limpieza -----------------
    def _reset_endpoint(self):
        if self._listener is not None:
            try:
                self._listener.close()
            except OSError:
                logger.exception("Error closing passive listener")
        self._listener = None
        self.endpoint = None
        self.mode = None

    def _close_connection(self):
        if self._connection is None:
            return
        try:
            self._connection.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        self._connection.close()
        self._connection = None

    def close(self) -> None:
        """Cierra listener y conexión pendientes, si existen."""
        self._close_connection()
        self._reset_endpoint()
