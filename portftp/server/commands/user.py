def handle_user(command, client_socket, client_session):
    """Maneja comando USER - primer paso de la autenticación."""
    username = command.get_argument()

    if not username:
        client_session.send_response(client_socket, 501, "Username may not be empty.")
        return

    if not client_session.users.user_exists(username):
        client_session.send_response(client_socket, 530, "User does not exist.")
        return

    client_session.set_username(username)
    client_session.send_response(client_socket, 331, "Username Ok. Password needed.")
