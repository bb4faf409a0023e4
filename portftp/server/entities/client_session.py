import logging
import socket

from portftp.server.entities.data_connection import DataConnection
from portftp.server.entities.reply import encode_reply
from portftp.server.entities.transfer_params import DataType, DataStructure, TransferMode

logger = logging.getLogger(__name__)


class ClientSession:
    """Representa el estado de sesión de un cliente FTP.

    Cada sesión pertenece a un único hilo (el que atiende su conexión de
    control) y nunca se comparte, por eso no usa locks. Lo único común a
    todas las sesiones es la tabla de usuarios, que es de solo lectura.
    """

    def __init__(self, root_directory: str, users, client_address=None, data_timeout: float = None):
        # Identificación de la conexión
        self.client_address = client_address

        # Tabla de credenciales compartida (solo lectura)
        self.users = users

        # Estado de autenticación / paths
        self.username = None
        self.authenticated = False
        self.root_directory = root_directory
        self.current_directory = root_directory

        # Parámetros de transferencia
        self.data_type = DataType.ASCII
        self.data_structure = DataStructure.FILE
        self.transfer_mode = TransferMode.STREAM

        # PORT / data connection state
        self.data_endpoint = None
        self.data_connection = None
        self.data_timeout = data_timeout

        self.quit_requested = False

    # ----------------- user / auth -----------------
    def set_username(self, username: str):
        """Registra el usuario pendiente de PASS y descarta un login previo."""
        self.username = username
        self.authenticated = False
        logger.info("Username set to: %s", username)

    def authenticate(self):
        """Marca la sesión como autenticada."""
        self.authenticated = True
        logger.info("User %s authenticated successfully", self.username)

    def is_authenticated(self) -> bool:
        """Indica si la sesión está autenticada."""
        return self.authenticated

    # ----------------- working directory -----------------
    def get_current_directory(self):
        return self.current_directory

    def set_current_directory(self, path: str):
        self.current_directory = path
        logger.debug("Working directory for %s is now %s", self.client_address, path)

    # ----------------- session lifecycle -----------------
    def request_quit(self):
        """Marcar la sesión para cierre (QUIT)."""
        self.quit_requested = True

    def can_close(self) -> bool:
        return self.quit_requested

    # ------------------ response sending -----------------
    def send_response(self, client_socket: "socket.socket", code: int, message: str) -> None:
        """Envía una respuesta al cliente por `client_socket` con formato RFC-959.

        `sendall` escribe la respuesta completa antes de volver, nunca queda
        nada en buffer entre comandos. Los errores de socket se propagan:
        una conexión de control rota termina la sesión.
        """
        payload = encode_reply(code, message)
        client_socket.sendall(payload)
        logger.info("Sent response to %s: %s", self.client_address, payload.decode('utf-8', errors='replace').strip())

    # ----------------- PORT / data socket -----------------
    def set_data_endpoint(self, ip: str, port: int):
        """Registra la dirección anunciada por PORT para la próxima transferencia."""
        self.cleanup_data_connection()
        self.data_endpoint = (ip, port)
        logger.info("Data endpoint set to %s:%d for %s", ip, port, self.client_address)

    def open_data_connection(self) -> DataConnection:
        """Abre la conexión de datos hacia el endpoint pendiente y lo consume.

        Lanza `DataConnectionError` si no se puede conectar.
        """
        ip, port = self.data_endpoint
        self.data_endpoint = None
        self.data_connection = DataConnection(ip, port, timeout=self.data_timeout).open()
        return self.data_connection

    def has_data_endpoint(self) -> bool:
        return self.data_endpoint is not None

    def cleanup_data_connection(self):
        """Cierra y limpia la conexión de datos si existe."""
        if self.data_connection is not None:
            self.data_connection.close()
        self.data_connection = None
        logger.debug("Data connection state cleaned up for %s", self.client_address)

    # ----------------- util -----------------
    def __str__(self):
        return f"ClientSession(addr={self.client_address}, user={self.username}, auth={self.authenticated})"
