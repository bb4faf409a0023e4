from portftp.server.entities.file_system_manager import resolve_path, directory_exists

ALIASES = ("XCWD",)


def handle_cwd(command, client_socket, client_session):
    """Maneja comando CWD - Change Working Directory"""
    if not client_session.is_authenticated():
        client_session.send_response(client_socket, 530, "Not logged in.")
        return

    new_directory = resolve_path(client_session.get_current_directory(), command.get_argument())

    # El directorio de trabajo solo cambia si el destino existe
    if not directory_exists(new_directory):
        client_session.send_response(client_socket, 501, "Path is not a directory.")
        return

    client_session.set_current_directory(new_directory)
    client_session.send_response(client_socket, 200, "Changed directory.")
