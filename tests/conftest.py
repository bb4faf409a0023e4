import socket
import threading

import pytest

from portftp.server.entities.client_session import ClientSession
from portftp.server.entities.ftp_server import FTPServer, ServerConfig, load_command_handlers
from portftp.server.entities.user_manager import UserStore, demo_users

TIMEOUT = 5.0


class FakeSocket:
    """Socket de control falso: acumula lo enviado con sendall."""

    def __init__(self):
        self.sent = bytearray()

    def sendall(self, data):
        self.sent += data

    def replies(self):
        return [line + b"\r\n" for line in bytes(self.sent).split(b"\r\n") if line]

    def last_reply(self):
        return self.replies()[-1]

    def clear(self):
        self.sent.clear()


class ControlClient:
    """Cliente crudo de la conexión de control para los tests end-to-end."""

    def __init__(self, address):
        self.sock = socket.create_connection(address, timeout=TIMEOUT)
        self.reader = self.sock.makefile('rb')

    def send(self, data: bytes):
        self.sock.sendall(data)

    def read_line(self) -> bytes:
        return self.reader.readline()

    def command(self, data: bytes) -> bytes:
        self.send(data)
        return self.read_line()

    def at_eof(self) -> bool:
        try:
            return self.reader.read() == b""
        except ConnectionResetError:
            return True

    def close(self):
        self.reader.close()
        self.sock.close()


@pytest.fixture(scope="session")
def users():
    return UserStore.from_plain(demo_users(), rounds=4)


@pytest.fixture(scope="session")
def handlers():
    return load_command_handlers()


@pytest.fixture
def ftp_root(tmp_path):
    (tmp_path / "docs").mkdir()
    (tmp_path / "docs" / "nested").mkdir()
    (tmp_path / "readme.txt").write_text("hello")
    return tmp_path


@pytest.fixture
def fake_socket():
    return FakeSocket()


@pytest.fixture
def session(users, ftp_root):
    return ClientSession(root_directory=str(ftp_root), users=users, client_address=("127.0.0.1", 50000))


@pytest.fixture
def logged_session(session):
    session.set_username("a")
    session.authenticate()
    return session


@pytest.fixture
def make_server(users, ftp_root, handlers):
    """Arranca servidores en 127.0.0.1 con puerto efímero y los detiene al final."""
    started = []

    def _make(**overrides):
        options = dict(users=users, host="127.0.0.1", port=0, root=str(ftp_root))
        options.update(overrides)
        server = FTPServer(ServerConfig(**options), handlers=handlers).bind()
        thread = threading.Thread(target=server.serve_forever, kwargs={"poll_interval": 0.05}, daemon=True)
        thread.start()
        started.append((server, thread))
        return server

    yield _make

    for server, thread in started:
        server.shutdown()
        thread.join(TIMEOUT)


@pytest.fixture
def ftp_server(make_server):
    return make_server()


@pytest.fixture
def control(ftp_server):
    client = ControlClient(ftp_server.server_address)
    yield client
    client.close()


@pytest.fixture
def greeted(control):
    """Conexión de control con el saludo (220 + 332) ya consumido."""
    control.read_line()
    control.read_line()
    return control


@pytest.fixture
def logged_in(greeted):
    assert greeted.command(b"USER a\r\n").startswith(b"331")
    assert greeted.command(b"PASS a\r\n").startswith(b"230")
    return greeted


@pytest.fixture
def data_listener():
    listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    listener.bind(("127.0.0.1", 0))
    listener.listen(1)
    listener.settimeout(TIMEOUT)
    yield listener
    listener.close()


@pytest.fixture
def closed_port():
    """Puerto local en el que no escucha nadie."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return port


def port_argument(port: int) -> bytes:
    return f"127,0,0,1,{port >> 8},{port & 0xFF}".encode("ascii")
