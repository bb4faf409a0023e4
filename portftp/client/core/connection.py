import socket
import logging

from portftp.server.entities.reply import decode_reply, Reply, ReplyCode

logger = logging.getLogger(__name__)


class ControlConnectionManager:
    def __init__(self, host: str, port: int = 21, timeout: float = 10.0):
        self.host = host
        self.port = port
        self.socket: socket.socket = None
        self.reader = None
        self.timeout = timeout

    def connect(self):
        if self.socket is not None:
            raise RuntimeError("Connection already established.")
        try:
            logger.info("Connecting to %s:%d (timeout=%ss)", self.host, self.port, self.timeout)
            self.socket = socket.create_connection((self.host, self.port), timeout=self.timeout)
            self.reader = self.socket.makefile('rb')
            logger.info("Connected to %s:%d", self.host, self.port)
        except OSError as e:
            logger.error("Failed to connect to %s:%d - %s", self.host, self.port, e)
            self.socket = None
            raise ConnectionError(f"Failed to connect to {self.host}:{self.port} - {e}") from e

    def disconnect(self):
        if self.reader:
            self.reader.close()
            self.reader = None
        if self.socket:
            try:
                self.socket.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass
            self.socket.close()
            logger.info("Disconnected from %s:%d", self.host, self.port)
        self.socket = None

    def local_address(self) -> str:
        """IP local de la conexión de control (la que se anuncia en PORT)."""
        return self.socket.getsockname()[0]

    def send_command(self, command: str):
        if self.socket is None:
            raise RuntimeError("No connection established.")
        if not command.endswith('\r\n'):
            command += '\r\n'
        logger.debug("SEND: %s", command.strip())
        self.socket.sendall(command.encode('utf-8'))

    def receive_response(self) -> Reply:
        """Lee una respuesta completa, incluidas las multilínea."""
        if self.socket is None:
            raise RuntimeError("No connection established.")
        reply = decode_reply(self.reader)
        logger.debug("RECV: %s", reply)
        return reply

    def wait_until_code(self, code: ReplyCode) -> Reply:
        """Descarta respuestas hasta recibir `code` (p. ej. el saludo 220)."""
        while True:
            reply = self.receive_response()
            if reply.code == code:
                return reply
