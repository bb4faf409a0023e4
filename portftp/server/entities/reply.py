import logging
from enum import IntEnum

logger = logging.getLogger(__name__)

LINE_TERMINATOR = "\r\n"
MAX_LINE_LENGTH = 8192


class ReplyCode(IntEnum):
    """Códigos de respuesta RFC-959 usados por el servidor y el cliente."""

    RESTART_MARKER_REPLY = 110
    SERVICE_READY_IN_MINUTES = 120
    DATA_CONNECTION_ALREADY_OPEN = 125
    FILE_STATUS_OK = 150
    OK = 200
    COMMAND_SUPERFLUOUS = 202
    SYSTEM_STATUS = 211
    DIRECTORY_STATUS = 212
    FILE_STATUS = 213
    HELP_MESSAGE = 214
    SYSTEM_TYPE_NAME = 215
    SERVICE_READY_FOR_NEW_USER = 220
    SERVICE_CLOSING = 221
    DATA_CONNECTION_OPEN = 225
    CLOSING_DATA_CONNECTION = 226
    ENTERING_PASSIVE_MODE = 227
    USER_LOGGED_IN = 230
    REQUESTED_FILE_ACTION_COMPLETE = 250
    PATH_NAME_CREATED = 257
    USER_NAME_OK_PASSWORD_NEEDED = 331
    NEED_ACCOUNT_FOR_LOGIN = 332
    REQUEST_PENDING_MORE_INFORMATION = 350
    SERVICE_NOT_AVAILABLE = 421
    CANNOT_OPEN_DATA_CONNECTION = 425
    CONNECTION_CLOSED = 426
    ACTION_NOT_TAKEN = 450
    ACTION_ABORTED = 451
    INSUFFICIENT_STORAGE = 452
    COMMAND_UNRECOGNIZED = 500
    INVALID_PARAMETERS = 501
    COMMAND_NOT_IMPLEMENTED = 502
    BAD_SEQUENCE_OF_COMMANDS = 503
    NOT_IMPLEMENTED_FOR_PARAMETER = 504
    NOT_LOGGED_IN = 530
    NEED_ACCOUNT_FOR_STORING = 532
    FILE_UNAVAILABLE = 550
    PAGE_TYPE_UNKNOWN = 551
    EXCEEDED_STORAGE_ALLOCATION = 552
    FILE_NAME_NOT_ALLOWED = 553

    @classmethod
    def from_bytes(cls, raw: bytes):
        """Devuelve el ReplyCode para 3 dígitos ASCII, o None si no es conocido."""
        if len(raw) != 3 or not raw.isdigit():
            return None
        try:
            return cls(int(raw))
        except ValueError:
            return None


class ReplyDecodeError(Exception):
    """La respuesta recibida no respeta el formato <código><sep><texto>."""


class Reply:
    """Respuesta ya decodificada: código (bytes crudos), separador y texto."""

    def __init__(self, raw_code: bytes, separator: bytes, message: str):
        self.raw_code = raw_code
        self.separator = separator
        self.message = message

    @property
    def code(self):
        return ReplyCode.from_bytes(self.raw_code)

    @property
    def is_multiline(self) -> bool:
        return self.separator == b"-"

    def to_bytes(self) -> bytes:
        """Reconstruye la respuesta tal como llegó por el socket."""
        return self.raw_code + self.separator + self.message.encode("utf-8")

    def __str__(self):
        return self.to_bytes().decode("utf-8", errors="replace").rstrip("\r\n")

    def __repr__(self):
        return f"Reply(code={self.raw_code!r}, message={self.message!r})"


def encode_reply(code: int, message: str) -> bytes:
    """Codifica una respuesta en formato RFC-959.

    Si el texto no tiene saltos de línea se emite ``"<code> <text>\\r\\n"``.
    Si los tiene, la primera línea va precedida de ``"<code>-"``, las
    intermedias van tal cual (con dos espacios delante si empiezan por un
    dígito, para no confundirse con una línea de estado) y la última se
    emite como ``"<code> <line>\\r\\n"``.
    """
    code = int(code)

    if "\n" not in message:
        return f"{code} {message}{LINE_TERMINATOR}".encode("utf-8")

    parts = [f"{code}-"]
    lines = [line.rstrip("\r") for line in message.split("\n")]

    for line in lines[:-1]:
        if line[:1].isdigit() and line[:1].isascii():
            parts.append("  ")
        parts.append(f"{line}{LINE_TERMINATOR}")

    parts.append(f"{code} {lines[-1]}{LINE_TERMINATOR}")
    return "".join(parts).encode("utf-8")


def read_exact(stream, size: int) -> bytes:
    """Lee exactamente `size` bytes o lo que haya hasta EOF.

    Un `read` sobre un socket puede devolver menos bytes que los pedidos,
    así que se acumula hasta completar o hasta que el peer cierre.
    """
    chunks = []
    remaining = size

    while remaining > 0:
        chunk = stream.read(remaining)
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)

    return b"".join(chunks)


def read_line(stream, max_length: int = MAX_LINE_LENGTH) -> bytes:
    """Lee hasta el fin de línea (incluido) o hasta `max_length` bytes."""
    return stream.readline(max_length)


def decode_reply(stream, max_length: int = MAX_LINE_LENGTH) -> Reply:
    """Lee una respuesta completa (simple o multilínea) desde `stream`.

    `stream` es un objeto binario tipo fichero (``socket.makefile('rb')``).
    El código solo se compara byte a byte, nunca se asume UTF-8 válido.
    """
    raw_code = read_exact(stream, 3)
    if len(raw_code) < 3:
        raise ReplyDecodeError("Connection closed while reading reply code")

    separator = read_exact(stream, 1)
    if separator not in (b" ", b"-"):
        raise ReplyDecodeError(f"Unexpected separator {separator!r} after code {raw_code!r}")

    message = bytearray(read_line(stream, max_length))

    if separator == b"-":
        terminal_prefix = raw_code + b" "

        while True:
            line = read_line(stream, max_length)
            if not line:
                raise ReplyDecodeError(f"Connection closed inside multiline reply {raw_code!r}")
            message += line
            if line.startswith(terminal_prefix):
                break

    logger.debug("Decoded reply %r (%d bytes)", raw_code, len(message))
    return Reply(raw_code, separator, message.decode("utf-8", errors="replace"))


__all__ = [
    'ReplyCode',
    'Reply',
    'ReplyDecodeError',
    'encode_reply',
    'decode_reply',
    'read_exact',
    'read_line',
]
