def handle_opts(command, client_socket, client_session):
    """Maneja comando OPTS - solo se reconoce ``UTF8 ON``."""
    if command.get_argument().lower() == "utf8 on":
        client_session.send_response(client_socket, 200, "Ok, UTF-8 enabled.")
    else:
        client_session.send_response(client_socket, 502, "Unknown option.")
