import io

import pytest

from portftp.client import entrypoint
from portftp.client.core.commands import ClientCommandHandler
from portftp.client.core.connection import ControlConnectionManager
from portftp.client.core.parser import build_port_argument, is_error, response_type
from portftp.server.entities.reply import Reply, ReplyCode


@pytest.fixture
def client(ftp_server):
    host, port = ftp_server.server_address
    connection = ControlConnectionManager(host, port, timeout=5.0)
    connection.connect()
    connection.wait_until_code(ReplyCode.SERVICE_READY_FOR_NEW_USER)
    yield ClientCommandHandler(connection)
    connection.disconnect()


def test_build_port_argument():
    assert build_port_argument("192.168.1.20", 1025) == "192,168,1,20,4,1"
    with pytest.raises(ValueError):
        build_port_argument("::1", 21)


def test_response_type():
    assert response_type(Reply(b"150", b" ", "ok\r\n")) == "preliminary"
    assert response_type(Reply(b"331", b" ", "x\r\n")) == "missing_info"
    assert is_error(Reply(b"425", b" ", "x\r\n"))
    assert is_error(Reply(b"xyz", b" ", "x\r\n"))
    assert not is_error(Reply(b"230", b" ", "x\r\n"))


def test_login_skips_pending_greeting(client):
    assert client.login("a", "a")


def test_login_with_bad_password(client):
    assert not client.login("a", "nope")


def test_nlst_with_active_mode(client):
    assert client.login("a", "a")
    reply, names = client.nlst()
    assert reply.code == ReplyCode.CLOSING_DATA_CONNECTION
    assert names == ["docs", "readme.txt"]

    reply, names = client.nlst("docs")
    assert names == ["nested"]


def test_quit(client):
    assert client.quit().code == ReplyCode.SERVICE_CLOSING


def test_console_session(ftp_server):
    host, port = ftp_server.server_address
    stdin = io.StringIO("nosuchuser\na\na\nPWD\nls\nno\nQUIT\nNOOP\n")
    stdout = io.StringIO()

    assert entrypoint.main([host, "--port", str(port)], stdin=stdin, stdout=stdout) == 0

    output = stdout.getvalue()
    assert "220 Server ready for new user." in output
    assert "530 User does not exist." in output
    assert "230 Logged in." in output
    assert "readme.txt" in output
    assert "221 Goodbye!" in output
    # nada se envía después de QUIT
    assert "NOOP" not in output


def test_console_requires_address(capsys):
    with pytest.raises(SystemExit) as excinfo:
        entrypoint.main([])
    assert excinfo.value.code != 0
    assert "usage" in capsys.readouterr().err


def test_console_connection_refused(closed_port):
    assert entrypoint.main(["127.0.0.1", "--port", str(closed_port)], stdin=io.StringIO(), stdout=io.StringIO()) == 1
