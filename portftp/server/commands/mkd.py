from portftp.server.entities.file_system_manager import create_directory, resolve_path

ALIASES = ("XMKD",)


def handle_mkd(command, client_socket, client_session):
    """Maneja comando MKD - Make Directory (idempotente)"""

    # Valida autenticación
    if not client_session.is_authenticated():
        client_session.send_response(client_socket, 530, "Not logged in.")
        return

    if not command.get_argument():
        client_session.send_response(client_socket, 501, "Missing argument.")
        return

    path = resolve_path(client_session.get_current_directory(), command.get_argument())

    # Crea el directorio
    success, message = create_directory(path)

    if success:
        client_session.send_response(client_socket, 257, message)
    else:
        client_session.send_response(client_socket, 550, message)
