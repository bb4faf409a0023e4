import logging
import socket

from portftp.client.core.connection import ControlConnectionManager
from portftp.client.core.parser import build_port_argument, response_type
from portftp.server.entities.reply import Reply, ReplyCode

logger = logging.getLogger(__name__)


class ClientCommandHandler:
    def __init__(self, connection: ControlConnectionManager):
        self.conn = connection

    def _execute(self, command: str) -> Reply:
        self.conn.send_command(command)
        reply = self.conn.receive_response()
        logger.debug("%s -> %s (%s)", command.split(' ', 1)[0], reply.raw_code, response_type(reply))
        return reply

    def user(self, username: str) -> Reply:
        reply = self._execute(f"USER {username}")
        # El servidor saluda con 220 y luego 332; el 332 puede seguir pendiente
        while reply.code == ReplyCode.NEED_ACCOUNT_FOR_LOGIN:
            reply = self.conn.receive_response()
        return reply

    def password(self, password: str) -> Reply:
        return self._execute(f"PASS {password}")

    def login(self, username: str, password: str) -> bool:
        if self.user(username).code != ReplyCode.USER_NAME_OK_PASSWORD_NEEDED:
            return False
        return self.password(password).code == ReplyCode.USER_LOGGED_IN

    def raw(self, line: str) -> Reply:
        return self._execute(line)

    def quit(self) -> Reply:
        return self._execute("QUIT")

    # Comandos que requieren conexion de datos
    def nlst(self, path: str = ""):
        """Lista nombres en modo activo: abre un listener local y anuncia PORT.

        Returns:
            tuple: (respuesta final, lista de nombres)
        """
        listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        listener.bind((self.conn.local_address(), 0))
        listener.listen(1)
        listener.settimeout(self.conn.timeout)

        try:
            ip, port = listener.getsockname()
            reply = self._execute(f"PORT {build_port_argument(ip, port)}")
            if reply.code != ReplyCode.OK:
                return reply, []

            reply = self._execute(f"NLST {path}".rstrip())
            if reply.code != ReplyCode.FILE_STATUS_OK:
                return reply, []

            data_sock, _ = listener.accept()
            with data_sock:
                payload = receive_all(data_sock)

            reply = self.conn.receive_response()
            names = [name for name in payload.decode('utf-8', errors='replace').split('\r\n') if name]
            return reply, names
        finally:
            listener.close()


def receive_all(sock: socket.socket) -> bytes:
    buffer = []
    while True:
        data = sock.recv(4096)
        if not data:
            break
        buffer.append(data)
    return b''.join(buffer)
