import logging

from portftp.server.entities.data_connection import DataConnectionError
from portftp.server.entities.file_system_manager import list_directory_names, resolve_path

logger = logging.getLogger(__name__)

INVALID_NAME = b"Invalid UTF-8."


def handle_nlst(command, client_socket, client_session):
    """Maneja comando NLST - lista solo nombres por la conexión de datos"""
    if not client_session.is_authenticated():
        client_session.send_response(client_socket, 530, "Not logged in.")
        return

    if not client_session.has_data_endpoint():
        client_session.send_response(client_socket, 425, "Use PORT first.")
        return

    # Obtener el path a listar (por defecto el directorio actual)
    list_path = resolve_path(client_session.get_current_directory(), command.get_argument())

    file_names = list_directory_names(list_path)
    if file_names is None:
        # El endpoint no se reutiliza aunque no se haya llegado a conectar
        client_session.data_endpoint = None
        client_session.send_response(client_socket, 550, f'Cannot list "{list_path}".')
        return

    payload = file_list_to_bytes(file_names)

    try:
        data_connection = client_session.open_data_connection()
    except DataConnectionError as e:
        client_session.send_response(client_socket, 425, f"Can't open data connection: {e}.")
        return

    client_session.send_response(client_socket, 150, "Here comes the directory listing.")

    try:
        data_connection.send(payload)
    except DataConnectionError as e:
        logger.warning("NLST transfer failed for %s: %s", client_session.client_address, e)
        client_session.send_response(client_socket, 426, "Connection closed; transfer aborted.")
        return
    finally:
        client_session.cleanup_data_connection()

    client_session.send_response(client_socket, 226, "Directory send OK.")


def file_list_to_bytes(file_names):
    """Convierte lista de nombres a bytes (un nombre por línea, CRLF)"""
    return b"\r\n".join(encode_name(name) for name in file_names)


def encode_name(name):
    # os.listdir devuelve los bytes no UTF-8 como surrogates
    try:
        return name.encode('utf-8')
    except UnicodeEncodeError:
        logger.info("Listing entry with invalid UTF-8 name: %r", name)
        return INVALID_NAME
