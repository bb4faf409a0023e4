def handle_quit(command, client_socket, client_session):
    """Maneja comando QUIT.

    Responde 221 y marca la sesión para que el dispatcher deje de leer
    comandos, aunque queden bytes pendientes en el socket.
    """
    client_session.request_quit()
    client_session.send_response(client_socket, 221, "Goodbye!")
