def handle_pass(command, client_socket, client_session):
    """Maneja comando PASS - validación de contraseña.

    Un PASS incorrecto no borra el usuario pendiente: el cliente puede
    reintentar PASS sin volver a enviar USER.
    """
    # Verificar que primero se envió USER
    if not client_session.username:
        client_session.send_response(client_socket, 503, "Expected `USER`.")
        return

    password = command.get_argument()

    if client_session.users.validate_password(client_session.username, password):
        client_session.authenticate()
        client_session.send_response(client_socket, 230, "Logged in.")
    else:
        client_session.send_response(client_socket, 530, "Incorrect password.")
