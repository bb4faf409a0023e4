import importlib
import logging
import os
import socket
import threading
from dataclasses import dataclass
from typing import Optional

import portftp.server.commands as commands_package
from portftp.server.entities.client_session import ClientSession
from portftp.server.entities.command import (
    read_command, SessionClosed, InvalidCommandEncoding, CommandLineTooLong,
)
from portftp.server.entities.reply import MAX_LINE_LENGTH
from portftp.server.entities.user_manager import UserStore

logger = logging.getLogger(__name__)

# Verbos RFC-959 conocidos pero sin implementar: siempre 502
NOT_IMPLEMENTED_COMMANDS = frozenset([
    "ACCT", "CDUP", "SMNT", "REIN", "PASV", "RETR", "STOR", "STOU", "APPE", "ALLO",
    "REST", "RNFR", "RNTO", "ABOR", "DELE", "LIST", "SITE", "SYST", "STAT", "HELP",
])


@dataclass
class ServerConfig:
    """Configuración del servidor. `users` es la tabla de credenciales compartida."""
    users: UserStore
    host: str = '127.0.0.1'
    port: int = 21
    root: str = '.'
    backlog: int = 5
    idle_timeout: Optional[float] = None
    data_timeout: Optional[float] = None
    max_line_length: int = MAX_LINE_LENGTH


def load_command_handlers():
    """Carga handlers desde el paquete `commands`.

    Cada módulo `<verbo>.py` debe exponer `handle_<verbo>`; los alias
    declarados en `ALIASES` apuntan al mismo handler.
    """
    handlers = {}
    commands_path = os.path.dirname(commands_package.__file__)

    for filename in sorted(os.listdir(commands_path)):
        if not filename.endswith('.py') or filename.startswith('_'):
            continue

        name = filename[:-3]
        module = importlib.import_module(f"{commands_package.__name__}.{name}")

        handler_func = getattr(module, f'handle_{name}', None)
        if handler_func is None:
            logger.warning("No handler found for %s", name.upper())
            continue

        for command_name in (name.upper(),) + tuple(getattr(module, 'ALIASES', ())):
            handlers[command_name] = handler_func
            logger.debug("Loaded command: %s", command_name)

    return handlers


class FTPServer:
    """Escucha conexiones de control y lanza un hilo por cliente.

    `serve_forever` bloquea hasta que otro hilo llama a `shutdown`, que deja
    de aceptar conexiones y corta las lecturas bloqueadas de cada sesión.
    """

    def __init__(self, config: ServerConfig, handlers: dict = None):
        self.config = config
        self.handlers = handlers if handlers is not None else load_command_handlers()
        self.server_socket = None

        self._shutdown_request = threading.Event()
        self._stopped = threading.Event()
        self._clients_lock = threading.Lock()
        self._clients = {}
        self._serving = False

    @property
    def server_address(self):
        """Dirección real de escucha (útil cuando se pidió el puerto 0)."""
        return self.server_socket.getsockname()

    def bind(self):
        server_sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        server_sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            server_sock.bind((self.config.host, self.config.port))
            server_sock.listen(self.config.backlog)
        except OSError:
            server_sock.close()
            raise

        self.server_socket = server_sock
        logger.info("FTP connection listener bound to %s:%d", *self.server_address)
        return self

    def serve_forever(self, poll_interval: float = 0.5):
        """Acepta conexiones hasta `shutdown`. Cada cliente corre en su hilo."""
        if self.server_socket is None:
            self.bind()

        self._serving = True
        self._stopped.clear()
        self.server_socket.settimeout(poll_interval)
        logger.info("FTP connection listener started on %s:%d", *self.server_address)

        try:
            while not self._shutdown_request.is_set():
                try:
                    client_sock, client_addr = self.server_socket.accept()

                except socket.timeout:
                    continue

                except OSError as e:
                    if self._shutdown_request.is_set():
                        break
                    logger.exception("Error accepting connection: %s", e)
                    continue

                logger.info("Accepted connection from %s", client_addr)
                client_sock.settimeout(self.config.idle_timeout)

                t = threading.Thread(target=self._run_client, args=(client_sock, client_addr), daemon=True)
                with self._clients_lock:
                    self._clients[t] = client_sock
                t.start()

        finally:
            self.server_socket.close()
            self._serving = False
            self._stopped.set()
            logger.info("Connection listener stopped")

    def shutdown(self, timeout: float = 5.0):
        """Detiene el listener y cierra todas las sesiones activas."""
        self._shutdown_request.set()

        with self._clients_lock:
            clients = list(self._clients.items())

        for _, client_sock in clients:
            try:
                client_sock.shutdown(socket.SHUT_RDWR)
            except OSError:
                # ya cerrado por su propio hilo
                pass

        for thread, _ in clients:
            thread.join(timeout)

        if self._serving:
            self._stopped.wait(timeout)

    def active_sessions(self) -> int:
        with self._clients_lock:
            return len(self._clients)

    def _run_client(self, client_sock, client_addr):
        try:
            client_handler(client_sock, client_addr, self.config, self.handlers)
        finally:
            with self._clients_lock:
                self._clients.pop(threading.current_thread(), None)


def client_handler(client_socket: socket.socket, client_address, config: ServerConfig, handlers: dict):
    """Crear sesión, saludar y ejecutar el dispatcher para el cliente."""
    logger.info("Handling new client %s", client_address)
    session = ClientSession(root_directory=config.root, users=config.users,
                            client_address=client_address, data_timeout=config.data_timeout)

    try:
        session.send_response(client_socket, 220, "Server ready for new user.")
        session.send_response(client_socket, 332, "Enter username.")
        command_dispatcher(client_socket, session, handlers, config.max_line_length)

    except SessionClosed:
        logger.info("Client %s closed the connection", client_address)

    except socket.timeout:
        logger.info("Idle timeout for %s", client_address)
        try:
            session.send_response(client_socket, 421, "Idle timeout, closing control connection.")
        except OSError:
            pass

    except OSError as e:
        logger.info("Control connection with %s failed: %s", client_address, e)

    finally:
        session.cleanup_data_connection()
        try:
            client_socket.close()
        except OSError:
            logger.exception("Error closing client socket in handler for %s", client_address)
        logger.info("Session ended for %s", client_address)


def command_dispatcher(client_socket: socket.socket, session: ClientSession, handlers: dict,
                       max_line_length: int = MAX_LINE_LENGTH):
    """Leer la conexión de control comando a comando y despachar handlers.

    Cada comando se atiende por completo (incluida la conexión de datos)
    antes de leer el siguiente. Tras QUIT no se procesa nada más.
    """
    logger.info("Starting command_dispatcher for %s", session.client_address)
    stream = client_socket.makefile('rb')

    try:
        while not session.can_close():
            try:
                command = read_command(stream, max_line_length)

            except InvalidCommandEncoding as e:
                logger.info("Invalid UTF-8 command token from %s: %s", session.client_address, e)
                session.send_response(client_socket, 502, "Command was not valid UTF-8.")
                continue

            except CommandLineTooLong as e:
                logger.info("Discarded command from %s: %s", session.client_address, e)
                session.send_response(client_socket, 500, "Command line too long.")
                continue

            if command.get_name() == "PASS":
                logger.debug("Received command from %s: PASS ******", session.client_address)
            else:
                logger.debug("Received command from %s: %s", session.client_address, command)

            dispatch_command(command, client_socket, session, handlers)

    finally:
        stream.close()

    logger.info("Command dispatcher stopped for %s", session.client_address)


def dispatch_command(command, client_socket: socket.socket, session: ClientSession, handlers: dict):
    """Ejecuta el handler del comando o responde 500/502 si no existe."""
    handler = handlers.get(command.get_name()) if command.is_significant() else None

    if handler is None:
        if command.get_name() in NOT_IMPLEMENTED_COMMANDS:
            session.send_response(client_socket, 502, "Command not implemented.")
        else:
            logger.debug("Command not recognized: %r", command.token)
            session.send_response(client_socket, 500, "Command not recognized.")
        return

    try:
        handler(command, client_socket, session)

    except OSError:
        # Fallo de la conexión de control: termina la sesión
        raise

    except Exception:
        logger.exception("Error handling command from %s: %s", session.client_address, command)
        session.send_response(client_socket, 451, "Requested action aborted: local error in processing.")


__all__ = [
    'ServerConfig',
    'FTPServer',
    'NOT_IMPLEMENTED_COMMANDS',
    'load_command_handlers',
    'client_handler',
    'command_dispatcher',
    'dispatch_command',
]
