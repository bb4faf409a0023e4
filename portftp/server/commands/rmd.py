from portftp.server.entities.file_system_manager import remove_directory, resolve_path, path_exists

ALIASES = ("XRMD",)


def handle_rmd(command, client_socket, client_session):
    """Maneja comando RMD - Remove Directory"""

    # Valida autenticación
    if not client_session.is_authenticated():
        client_session.send_response(client_socket, 530, "Not logged in.")
        return

    if not command.get_argument():
        client_session.send_response(client_socket, 501, "Missing argument.")
        return

    path = resolve_path(client_session.get_current_directory(), command.get_argument())

    if not path_exists(path):
        client_session.send_response(client_socket, 550, f'Error removing "{path}": No such file or directory.')
        return

    # Eliminar directorio
    success, message = remove_directory(path)

    if success:
        client_session.send_response(client_socket, 250, message)
    else:
        client_session.send_response(client_socket, 450, message)
