from portftp.server.entities.reply import read_exact, read_line, MAX_LINE_LENGTH

TOKEN_SIZE = 4


class SessionClosed(Exception):
    """El cliente cerró la conexión de control."""


class InvalidCommandEncoding(Exception):
    """El token de 4 bytes no es UTF-8 válido."""


class CommandLineTooLong(Exception):
    """La línea superó el máximo permitido; ya fue descartada entera."""


class Command:
    """Comando FTP ya leído: verbo de 4 caracteres y argumento único.

    El verbo se lee como un campo fijo de 4 bytes, de modo que ``"PWD\\r"``
    y ``"PWD "`` son tokens distintos que se normalizan al mismo nombre.
    """

    def __init__(self, token: str, argument: str = ""):
        self.token = token.upper()
        self.name = self.token.rstrip(" \r\n")
        self.argument = argument.strip()

    def __str__(self):
        return f"Command(name='{self.name}', argument='{self.argument}')"

    def get_name(self):
        return self.name

    def get_argument(self):
        """Argumento completo, ya recortado"""
        return self.argument

    def is_significant(self):
        """Un verbo con menos de 3 caracteres útiles nunca es un comando."""
        return len(self.name) >= 3


def discard_line(stream, max_length: int = MAX_LINE_LENGTH):
    """Consume el flujo hasta el próximo fin de línea."""
    while True:
        chunk = read_line(stream, max_length)
        if not chunk:
            raise SessionClosed()
        if chunk.endswith(b"\n"):
            return


def read_command(stream, max_length: int = MAX_LINE_LENGTH) -> Command:
    """Lee un comando desde el flujo binario de la conexión de control.

    Lanza `SessionClosed` si llega EOF, `InvalidCommandEncoding` si el
    token no es UTF-8 y `CommandLineTooLong` si la línea no cabe en
    `max_length`. En los dos últimos casos la línea ya fue consumida.
    """
    raw_token = read_exact(stream, TOKEN_SIZE)
    if len(raw_token) < TOKEN_SIZE:
        raise SessionClosed()

    # "PWD\n": la línea terminó dentro del token, no hay argumento que leer
    if raw_token.endswith(b"\n"):
        raw_argument = b""
    else:
        raw_argument = read_line(stream, max_length)

    # readline solo corta sin "\n" al llegar al límite o a EOF
    too_long = len(raw_argument) >= max_length and not raw_argument.endswith(b"\n")
    if too_long:
        discard_line(stream, max_length)

    try:
        token = raw_token.decode("utf-8")
    except UnicodeDecodeError:
        raise InvalidCommandEncoding(repr(raw_token))

    if too_long:
        raise CommandLineTooLong(f"{token.strip()} line exceeds {max_length} bytes")

    argument = raw_argument.decode("utf-8", errors="replace")
    return Command(token, argument)
