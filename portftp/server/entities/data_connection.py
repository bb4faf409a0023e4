import logging
import socket
from typing import Optional

from portftp.server.entities.reply import LINE_TERMINATOR

logger = logging.getLogger(__name__)


class DataConnectionError(Exception):
    """No se pudo abrir o usar la conexión de datos."""


class DataConnection:
    def __init__(self, ip: str, port: int, timeout: float = None):
        """
        Conexión de datos en modo activo: el servidor se conecta a la
        dirección que el cliente anunció con PORT. Se usa para un único
        envío y después se cierra.
        """
        self.ip = ip
        self.port = port
        self.timeout = timeout
        self.data_socket: Optional[socket.socket] = None

    def open(self) -> 'DataConnection':
        """
        Establece la conexión TCP saliente hacia el cliente.
        """
        try:
            self.data_socket = socket.create_connection((self.ip, self.port), timeout=self.timeout)
        except OSError as e:
            self.data_socket = None
            logger.warning("Failed to open data connection to %s:%d - %s", self.ip, self.port, e)
            raise DataConnectionError(f"Cannot connect to {self.ip}:{self.port}: {e}") from e

        logger.info("Data connection opened to %s:%d", self.ip, self.port)
        return self

    def send(self, payload: bytes):
        """
        Envía todo el payload (terminado en CRLF) y cierra la conexión.
        """
        if self.data_socket is None:
            raise DataConnectionError("Data connection is not open")

        terminator = LINE_TERMINATOR.encode("ascii")
        if not payload.endswith(terminator):
            payload += terminator

        try:
            self.data_socket.sendall(payload)
            logger.info("Sent %d bytes over data connection to %s:%d", len(payload), self.ip, self.port)
        except OSError as e:
            raise DataConnectionError(f"Error sending data to {self.ip}:{self.port}: {e}") from e
        finally:
            self.close()

    def close(self):
        """
        Cierra la conexión de datos en ambos sentidos.
        """
        if self.data_socket:
            try:
                self.data_socket.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass
            self.data_socket.close()
            self.data_socket = None
            logger.info("Data connection to %s:%d closed", self.ip, self.port)
