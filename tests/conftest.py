import ftplib
import socket
import threading

import bcrypt
import pytest

from miniftpd.entities.client_session import ClientSession
from miniftpd.entities.ftp_server import create_listener_socket, serve
from miniftpd.entities.user_manager import User, UserManager
from miniftpd.settings import ServerSettings

PASSWORD = "s3cret"


@pytest.fixture
def ftp_root(tmp_path):
    """
    tmp/home/alice      directorio base de alice (sub/, f.txt de 10 bytes)
    tmp/home/aliceX     hermano con prefijo parecido
    tmp/pub             directorio del anónimo
    """
    alice = tmp_path / "home" / "alice"
    (alice / "sub").mkdir(parents=True)
    (alice / "f.txt").write_bytes(b"0123456789")

    sibling = tmp_path / "home" / "aliceX"
    sibling.mkdir()
    (sibling / "secret.txt").write_text("do not leak")

    pub = tmp_path / "pub"
    pub.mkdir()
    (pub / "readme.txt").write_text("hello\n")
    return tmp_path


@pytest.fixture
def alice_home(ftp_root):
    return ftp_root / "home" / "alice"


@pytest.fixture
def user_manager(ftp_root):
    hashed = bcrypt.hashpw(PASSWORD.encode("utf-8"), bcrypt.gensalt(rounds=4)).decode("utf-8")
    alice = User("alice", hashed, str(ftp_root / "home" / "alice"))
    return UserManager([alice], allow_anonymous=True, anonymous_directory=str(ftp_root / "pub"))


@pytest.fixture
def settings():
    return ServerSettings(host="127.0.0.1", port=0, idle_timeout=10.0, data_timeout=5.0)


@pytest.fixture
def server_address(settings, user_manager):
    """Listener real en loopback corriendo en un hilo."""
    server_sock = create_listener_socket(settings)
    address = server_sock.getsockname()
    stop = threading.Event()
    t = threading.Thread(target=serve, args=(server_sock, settings, user_manager, stop), daemon=True)
    t.start()

    yield address

    stop.set()
    t.join(timeout=5)


class RawClient:
    """Cliente de control mínimo para verificar respuestas exactas."""

    def __init__(self, address):
        self.sock = socket.create_connection(address, timeout=5)
        self.reader = self.sock.makefile("rb")
        self.welcome = self.read_reply()

    def send(self, line: str):
        self.sock.sendall((line + "\r\n").encode("utf-8"))

    def read_reply(self) -> str:
        return self.reader.readline().decode("utf-8").rstrip("\r\n")

    def cmd(self, line: str) -> str:
        self.send(line)
        return self.read_reply()

    def login(self, username="alice", password=PASSWORD):
        assert self.cmd(f"USER {username}").startswith("331")
        assert self.cmd(f"PASS {password}").startswith("230")

    def pasv_address(self):
        reply = self.cmd("PASV")
        assert reply.startswith("227"), reply
        numbers = reply[reply.index("(") + 1:reply.index(")")].split(",")
        host = ".".join(numbers[:4])
        port = int(numbers[4]) * 256 + int(numbers[5])
        return host, port

    def close(self):
        self.reader.close()
        self.sock.close()


@pytest.fixture
def raw_client(server_address):
    clients = []

    def _connect():
        client = RawClient(server_address)
        clients.append(client)
        return client

    yield _connect

    for client in clients:
        client.close()


@pytest.fixture
def ftp_client(server_address):
    ftp = ftplib.FTP()
    ftp.connect(server_address[0], server_address[1], timeout=5)

    yield ftp

    ftp.close()




class FakeControl:
    """Sustituto del ControlStream para probar handlers sin red."""

    def __init__(self, client_address=("127.0.0.1", 50000), local_address="127.0.0.1"):
        self.client_address = client_address
        self.local_address = local_address
        self.encrypted = False
        self.connected = True
        self.sent = []
        self.upgraded_with = None

    def send_response(self, code, message):
        self.sent.append((int(code), message))

    def upgrade(self, context):
        self.upgraded_with = context
        self.encrypted = True

    def peer_closed(self):
        return False

    def close(self):
        self.connected = False


@pytest.fixture
def fake_control():
    return FakeControl()


@pytest.fixture
def session(fake_control, settings, user_manager):
    return ClientSession(fake_control, settings, user_manager)


@pytest.fixture
def alice_session(session, user_manager):
    session.authenticate(user_manager.find_by_name("alice"))
    return session
