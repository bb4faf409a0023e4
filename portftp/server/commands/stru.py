from portftp.server.entities.transfer_params import DataStructure, MissingParameter, UnsupportedParameter


def handle_stru(command, client_socket, client_session):
    """Maneja comando STRU - estructura de archivo (File, Record, Page)"""
    if not client_session.is_authenticated():
        client_session.send_response(client_socket, 530, "Not logged in.")
        return

    try:
        data_structure = DataStructure.parse(command.get_argument())
    except MissingParameter as e:
        client_session.send_response(client_socket, 501, str(e))
        return
    except UnsupportedParameter as e:
        client_session.send_response(client_socket, 504, str(e))
        return

    client_session.data_structure = data_structure
    client_session.send_response(client_socket, 200, f"Structure is now {data_structure}.")
