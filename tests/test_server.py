"""Pruebas end-to-end sobre sockets reales contra un FTPServer en un hilo."""

import os
import time

from conftest import ControlClient, TIMEOUT, port_argument


def test_greeting(control):
    assert control.read_line() == b"220 Server ready for new user.\r\n"
    assert control.read_line() == b"332 Enter username.\r\n"


def test_login_success(greeted):
    assert greeted.command(b"USER a\r\n") == b"331 Username Ok. Password needed.\r\n"
    assert greeted.command(b"PASS a\r\n") == b"230 Logged in.\r\n"


def test_failed_password_can_be_retried_without_user(greeted):
    assert greeted.command(b"USER a\r\n") == b"331 Username Ok. Password needed.\r\n"
    assert greeted.command(b"PASS wrong\r\n") == b"530 Incorrect password.\r\n"
    assert greeted.command(b"PASS a\r\n") == b"230 Logged in.\r\n"


def test_password_longer_than_bcrypt_limit_is_rejected(greeted):
    assert greeted.command(b"USER a\r\n") == b"331 Username Ok. Password needed.\r\n"
    assert greeted.command(b"PASS " + b"p" * 100 + b"\r\n") == b"530 Incorrect password.\r\n"
    assert greeted.command(b"PASS a\r\n") == b"230 Logged in.\r\n"


def test_unknown_user(greeted):
    assert greeted.command(b"USER nosuchuser\r\n") == b"530 User does not exist.\r\n"


def test_pass_before_user(greeted):
    assert greeted.command(b"PASS a\r\n") == b"503 Expected `USER`.\r\n"


def test_pwd_follows_cwd(logged_in, ftp_root):
    assert logged_in.command(b"PWD\r\n") == f"200 {ftp_root}\r\n".encode()
    assert logged_in.command(b"CWD docs\r\n") == b"200 Changed directory.\r\n"
    assert logged_in.command(b"cwd nested\r\n") == b"200 Changed directory.\r\n"
    expected = os.path.join(str(ftp_root), "docs", "nested")
    assert logged_in.command(b"XPWD\r\n") == f"200 {expected}\r\n".encode()
    assert logged_in.command(b"PWD abc123\r\n") == f"200 {expected}\r\n".encode()


def test_cwd_into_non_directory(logged_in, ftp_root):
    assert logged_in.command(b"CWD readme.txt\r\n") == b"501 Path is not a directory.\r\n"
    assert logged_in.command(b"CWD missing\r\n") == b"501 Path is not a directory.\r\n"
    assert logged_in.command(b"PWD\r\n") == f"200 {ftp_root}\r\n".encode()


def test_mkd_is_idempotent(logged_in, ftp_root):
    first = logged_in.command(b"MKD build\r\n")
    second = logged_in.command(b"MKD build\r\n")
    assert first.startswith(b"257 ")
    assert second == first
    assert (ftp_root / "build").is_dir()


def test_rmd(logged_in, ftp_root):
    assert logged_in.command(b"RMD docs/nested\r\n").startswith(b"250 ")
    assert logged_in.command(b"RMD docs/nested\r\n").startswith(b"550 ")
    (ftp_root / "docs" / "file").write_text("x")
    assert logged_in.command(b"RMD docs\r\n").startswith(b"450 ")


def test_type_validation(logged_in):
    assert logged_in.command(b"TYPE L 8\r\n").startswith(b"200 ")
    assert logged_in.command(b"TYPE L 7\r\n").startswith(b"504 ")
    assert logged_in.command(b"TYPE X\r\n").startswith(b"504 ")
    assert logged_in.command(b"TYPE\r\n").startswith(b"501 ")


def test_unrecognized_and_unimplemented(greeted):
    assert greeted.command(b"XYZZ\r\n") == b"500 Command not recognized.\r\n"
    assert greeted.command(b"AB\r\n") == b"500 Command not recognized.\r\n"
    assert greeted.command(b"RETR file\r\n") == b"502 Command not implemented.\r\n"
    assert greeted.command(b"PASV\r\n") == b"502 Command not implemented.\r\n"


def test_invalid_utf8_token_keeps_session(greeted):
    assert greeted.command(b"\xff\xfe\xfd\xfc oops\r\n") == b"502 Command was not valid UTF-8.\r\n"
    assert greeted.command(b"NOOP\r\n") == b"200 NOOP\r\n"


def test_overlong_command_line_is_rejected_whole(greeted):
    assert greeted.command(b"USER " + b"x" * 8191 + b"QUIT\r\n") == b"500 Command line too long.\r\n"
    assert greeted.command(b"NOOP\r\n") == b"200 NOOP\r\n"


def test_bare_line_feed(greeted):
    assert greeted.command(b"NOOP\n") == b"200 NOOP\r\n"
    assert greeted.command(b"OPTS utf8 on\n") == b"200 Ok, UTF-8 enabled.\r\n"


def test_pipelined_commands_are_answered_in_order(greeted):
    greeted.send(b"NOOP\r\nUSER a\r\nPASS a\r\n")
    assert greeted.read_line() == b"200 NOOP\r\n"
    assert greeted.read_line().startswith(b"331")
    assert greeted.read_line().startswith(b"230")


def test_quit_stops_processing(greeted):
    greeted.send(b"QUIT\r\nNOOP\r\n")
    assert greeted.read_line() == b"221 Goodbye!\r\n"
    assert greeted.at_eof()


def test_nlst_over_active_data_connection(logged_in, data_listener):
    port = data_listener.getsockname()[1]
    assert logged_in.command(b"PORT " + port_argument(port) + b"\r\n") == b"200 Changed port.\r\n"

    logged_in.send(b"NLST\r\n")
    assert logged_in.read_line().startswith(b"150 ")

    conn, _ = data_listener.accept()
    with conn:
        conn.settimeout(TIMEOUT)
        payload = b""
        while True:
            chunk = conn.recv(4096)
            if not chunk:
                break
            payload += chunk

    assert payload == b"docs\r\nreadme.txt\r\n"
    assert logged_in.read_line().startswith(b"226 ")


def test_nlst_refused_data_connection_is_not_fatal(logged_in, closed_port):
    assert logged_in.command(b"PORT " + port_argument(closed_port) + b"\r\n").startswith(b"200")
    assert logged_in.command(b"NLST\r\n").startswith(b"425 ")
    assert logged_in.command(b"NOOP\r\n") == b"200 NOOP\r\n"


def test_sessions_are_independent(ftp_server, logged_in):
    other = ControlClient(ftp_server.server_address)
    try:
        other.read_line()
        other.read_line()
        assert other.command(b"PWD\r\n") == b"530 Not logged in.\r\n"
        assert logged_in.command(b"CWD docs\r\n").startswith(b"200")
    finally:
        other.close()


def test_idle_timeout(make_server):
    server = make_server(idle_timeout=0.2)
    client = ControlClient(server.server_address)
    try:
        client.read_line()
        client.read_line()
        assert client.read_line() == b"421 Idle timeout, closing control connection.\r\n"
        assert client.at_eof()
    finally:
        client.close()


def test_shutdown_closes_sessions(make_server):
    server = make_server()
    client = ControlClient(server.server_address)
    try:
        client.read_line()
        client.read_line()
        assert server.active_sessions() == 1

        server.shutdown()
        assert client.at_eof()

        deadline = time.monotonic() + TIMEOUT
        while server.active_sessions() and time.monotonic() < deadline:
            time.sleep(0.01)
        assert server.active_sessions() == 0
    finally:
        client.close()
