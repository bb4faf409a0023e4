import ipaddress


def handle_port(command, client_socket, client_session):
    """Maneja comando PORT h1,h2,h3,h4,p1,p2 - endpoint de datos en modo activo"""
    if not client_session.is_authenticated():
        client_session.send_response(client_socket, 530, "Not logged in.")
        return

    try:
        ip, port = parse_port_argument(command.get_argument())
    except ValueError:
        client_session.send_response(client_socket, 501, "IP not in valid format.")
        return

    client_session.set_data_endpoint(ip, port)
    client_session.send_response(client_socket, 200, "Changed port.")


def parse_port_argument(argument: str):
    """Convierte ``"h1,h2,h3,h4,p1,p2"`` en (ip, puerto).

    Lanza ValueError si el formato, la IP o alguno de los bytes del
    puerto no son válidos.
    """
    parts = argument.split(',')
    if len(parts) != 6:
        raise ValueError(f"Expected 6 comma separated values, got {len(parts)}")

    ip = str(ipaddress.IPv4Address('.'.join(part.strip() for part in parts[:4])))

    p1, p2 = (int(part) for part in parts[4:])
    if not (0 <= p1 <= 255 and 0 <= p2 <= 255):
        raise ValueError("Port bytes must be in range 0-255")

    return ip, (p1 << 8) + p2
