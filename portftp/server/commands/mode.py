from portftp.server.entities.transfer_params import TransferMode, MissingParameter, UnsupportedParameter


def handle_mode(command, client_socket, client_session):
    """Maneja comando MODE - modo de transferencia (Stream, Block, Compressed)"""
    if not client_session.is_authenticated():
        client_session.send_response(client_socket, 530, "Not logged in.")
        return

    try:
        transfer_mode = TransferMode.parse(command.get_argument())
    except MissingParameter as e:
        client_session.send_response(client_socket, 501, str(e))
        return
    except UnsupportedParameter as e:
        client_session.send_response(client_socket, 504, str(e))
        return

    client_session.transfer_mode = transfer_mode
    client_session.send_response(client_socket, 200, f"Transfer mode is now {transfer_mode}.")
