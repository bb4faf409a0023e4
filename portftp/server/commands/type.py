from portftp.server.entities.transfer_params import DataType, MissingParameter, UnsupportedParameter


def handle_type(command, client_socket, client_session):
    """Maneja comando TYPE - configurar tipo de representación"""
    if not client_session.is_authenticated():
        client_session.send_response(client_socket, 530, "Not logged in.")
        return

    try:
        data_type = DataType.parse(command.get_argument())
    except MissingParameter as e:
        client_session.send_response(client_socket, 501, str(e))
        return
    except UnsupportedParameter as e:
        client_session.send_response(client_socket, 504, str(e))
        return

    client_session.data_type = data_type
    client_session.send_response(client_socket, 200, f"Type is now {data_type}.")
