#!/usr/bin/env python3
"""
Cliente de consola para portftp.

Se conecta al servidor, pide usuario y contraseña hasta lograr el login y
después envía cada línea escrita tal cual, mostrando la respuesta. ``ls
[ruta]`` lista nombres usando una conexión de datos en modo activo.
"""

import argparse
import getpass
import logging
import sys

from portftp.client.core.commands import ClientCommandHandler
from portftp.client.core.connection import ControlConnectionManager
from portftp.server.entities.reply import ReplyCode, ReplyDecodeError

logger = logging.getLogger(__name__)


def prompt_login(handler: ClientCommandHandler, stdin, stdout, host: str):
    """Pide credenciales hasta que el servidor responde 230."""
    while True:
        stdout.write(f"User ({host}:(none)): ")
        stdout.flush()
        username = stdin.readline()
        if not username:
            return False

        reply = handler.user(username.strip())
        stdout.write(f"{reply}\n")
        if reply.code != ReplyCode.USER_NAME_OK_PASSWORD_NEEDED:
            continue

        if stdin is sys.stdin and stdin.isatty():
            password = getpass.getpass("Password: ")
        else:
            stdout.write("Password: ")
            stdout.flush()
            password = stdin.readline()

        reply = handler.password(password.strip())
        stdout.write(f"{reply}\n")
        if reply.code == ReplyCode.USER_LOGGED_IN:
            return True


def command_loop(handler: ClientCommandHandler, stdin, stdout):
    """Lee comandos del usuario y muestra las respuestas hasta recibir 221."""
    while True:
        stdout.write("ftp> ")
        stdout.flush()
        line = stdin.readline()
        if not line:
            return

        line = line.strip()
        if len(line) < 3:
            continue

        if line.lower() == "ls" or line.lower().startswith("ls "):
            reply, names = handler.nlst(line[2:].strip())
            for name in names:
                stdout.write(f"{name}\n")
            stdout.write(f"{reply}\n")
            continue

        reply = handler.raw(line)
        stdout.write(f"{reply}\n")

        if reply.code == ReplyCode.SERVICE_CLOSING:
            return


def main(argv=None, stdin=None, stdout=None):
    parser = argparse.ArgumentParser(prog="portftp-client", description="Cliente FTP de consola")
    parser.add_argument("address", help="IP o nombre del servidor")
    parser.add_argument("--port", type=int, default=21, help="Puerto de control")
    parser.add_argument("--timeout", type=float, default=10.0)
    parser.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    args = parser.parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level), format='%(asctime)s %(levelname)s %(message)s')

    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout

    connection = ControlConnectionManager(args.address, args.port, timeout=args.timeout)
    try:
        connection.connect()
    except ConnectionError as e:
        logger.error("%s", e)
        return 1

    handler = ClientCommandHandler(connection)

    try:
        greeting = connection.wait_until_code(ReplyCode.SERVICE_READY_FOR_NEW_USER)
        stdout.write(f"{greeting}\n")

        if prompt_login(handler, stdin, stdout, args.address):
            command_loop(handler, stdin, stdout)

    except (ReplyDecodeError, OSError) as e:
        logger.error("Connection lost: %s", e)
        return 1

    finally:
        connection.disconnect()

    return 0


if __name__ == '__main__':
    sys.exit(main())
