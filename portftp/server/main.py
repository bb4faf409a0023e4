import argparse
import logging
import os
import signal
import sys
import threading

from portftp.server.entities.ftp_server import FTPServer, ServerConfig
from portftp.server.entities.user_manager import UserStore, demo_users

logger = logging.getLogger(__name__)


def build_parser():
    parser = argparse.ArgumentParser(prog="portftp-server", description="Servidor FTP en modo activo")
    parser.add_argument("--host", default="127.0.0.1", help="Dirección de escucha")
    parser.add_argument("--port", type=int, default=21, help="Puerto de la conexión de control")
    parser.add_argument("--root", default=os.environ.get("PORTFTP_ROOT", "."), help="Directorio raíz inicial de cada sesión")
    parser.add_argument("--users", default=os.environ.get("PORTFTP_USERS"),
                        help="Archivo users.json (contraseñas bcrypt). Sin él se usa la tabla de prueba")
    parser.add_argument("--idle-timeout", type=float, default=None, help="Segundos de inactividad antes de cerrar la sesión")
    parser.add_argument("--data-timeout", type=float, default=None, help="Timeout de la conexión de datos")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser


def load_users(users_file):
    if users_file:
        return UserStore.from_file(users_file)

    logger.warning("No users file given, using the built-in test users")
    return UserStore.from_plain(demo_users())


def main(argv=None):
    args = build_parser().parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level), format='%(asctime)s %(levelname)s %(message)s')

    if not os.path.isdir(args.root):
        logger.error("Root directory %s does not exist", args.root)
        return 1

    try:
        users = load_users(args.users)
    except (OSError, ValueError, KeyError) as e:
        logger.error("Cannot load users file %s: %s", args.users, e)
        return 1

    if not users:
        logger.error("Users file %s defines no users", args.users)
        return 1

    config = ServerConfig(users=users, host=args.host, port=args.port, root=args.root,
                          idle_timeout=args.idle_timeout, data_timeout=args.data_timeout)
    server = FTPServer(config)

    try:
        server.bind()
    except OSError as e:
        logger.error("Cannot bind %s:%d: %s", args.host, args.port, e)
        return 1

    def _handle_signal(signum, frame):
        logger.info("Shutting down listener (signal %d)", signum)
        # shutdown espera a serve_forever, que corre en este mismo hilo
        threading.Thread(target=server.shutdown, daemon=True).start()

    signal.signal(signal.SIGINT, _handle_signal)
    signal.signal(signal.SIGTERM, _handle_signal)

    server.serve_forever()
    return 0


if __name__ == "__main__":
    sys.exit(main())
