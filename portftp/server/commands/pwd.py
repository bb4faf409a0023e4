ALIASES = ("XPWD",)


def handle_pwd(command, client_socket, client_session):
    """Maneja comando PWD - Print Working Directory. Ignora cualquier argumento."""
    if not client_session.is_authenticated():
        client_session.send_response(client_socket, 530, "Not logged in.")
        return

    client_session.send_response(client_socket, 200, str(client_session.get_current_directory()))
