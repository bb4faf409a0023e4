def handle_noop(command, client_socket, client_session):
    """Maneja comando NOOP - no operation (mantener conexión activa)."""
    client_session.send_response(client_socket, 200, "NOOP")
