import logging

from portftp.server.entities.reply import Reply

logger = logging.getLogger(__name__)

RESPONSE_TYPES = {
    '1': 'preliminary',
    '2': 'success',
    '3': 'missing_info',
    '4': 'error',
    '5': 'error'
}


def response_type(reply: Reply) -> str:
    """Clasifica la respuesta por el primer dígito de su código."""
    first = reply.raw_code[:1].decode('ascii', errors='replace')
    return RESPONSE_TYPES.get(first, 'unknown')


def is_error(reply: Reply) -> bool:
    return response_type(reply) in ('error', 'unknown')


def build_port_argument(ip: str, port: int) -> str:
    """Construye el argumento de PORT: ``h1,h2,h3,h4,p1,p2``."""
    octets = ip.split('.')
    if len(octets) != 4:
        raise ValueError(f"Not an IPv4 address: {ip}")
    return ','.join(octets + [str(port >> 8), str(port & 0xFF)])
