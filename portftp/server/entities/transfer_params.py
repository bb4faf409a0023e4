from enum import Enum

SUPPORTED_BYTE_SIZE = 8


class MissingParameter(ValueError):
    """El comando requería un parámetro y llegó vacío."""


class UnsupportedParameter(ValueError):
    """El parámetro es sintácticamente válido pero no está soportado."""


class DataTypeKind(Enum):
    ASCII = "A"
    EBCDIC = "E"
    IMAGE = "I"
    LOCAL = "L"


class DataType:
    """
    Tipo de representación negociado con TYPE.

    .Campos:
        . kind : variante (ASCII, EBCDIC, IMAGE, LOCAL)
        . byte_size : tamaño de byte lógico, solo para LOCAL (siempre 8)
    """

    _NAMES = {
        DataTypeKind.ASCII: "ASCII",
        DataTypeKind.EBCDIC: "EBCDIC",
        DataTypeKind.IMAGE: "Image",
        DataTypeKind.LOCAL: "Local byte",
    }

    def __init__(self, kind: DataTypeKind, byte_size: int = None):
        if kind is DataTypeKind.LOCAL:
            if byte_size != SUPPORTED_BYTE_SIZE:
                raise UnsupportedParameter("Only 8-bit bytes are supported.")
        elif byte_size is not None:
            raise ValueError(f"{kind.name} does not take a byte size")

        self.kind = kind
        self.byte_size = byte_size

    @classmethod
    def local(cls, byte_size: int) -> 'DataType':
        return cls(DataTypeKind.LOCAL, byte_size)

    @classmethod
    def parse(cls, argument: str) -> 'DataType':
        """Construye el tipo a partir del argumento de TYPE (``"A"``, ``"L 8"``...)."""
        if not argument:
            raise MissingParameter("Missing argument.")

        letter = argument[0].upper()

        if letter == DataTypeKind.LOCAL.value:
            size = argument[1:].strip()
            if size != str(SUPPORTED_BYTE_SIZE):
                raise UnsupportedParameter("Only 8-bit bytes are supported.")
            return cls.local(SUPPORTED_BYTE_SIZE)

        try:
            return cls(DataTypeKind(letter))
        except ValueError:
            raise UnsupportedParameter(f"Unknown TYPE: {argument[0]}.")

    def __eq__(self, other):
        if not isinstance(other, DataType):
            return False
        return self.kind == other.kind and self.byte_size == other.byte_size

    def __hash__(self):
        return hash((self.kind, self.byte_size))

    def __str__(self):
        if self.kind is DataTypeKind.LOCAL:
            return f"{self._NAMES[self.kind]} {self.byte_size}"
        return self._NAMES[self.kind]

    def __repr__(self):
        return f"DataType({self})"


DataType.ASCII = DataType(DataTypeKind.ASCII)
DataType.EBCDIC = DataType(DataTypeKind.EBCDIC)
DataType.IMAGE = DataType(DataTypeKind.IMAGE)


class DataStructure(Enum):
    FILE = "F"
    RECORD = "R"
    PAGE = "P"

    @classmethod
    def parse(cls, argument: str) -> 'DataStructure':
        if not argument:
            raise MissingParameter("Missing argument.")
        try:
            return cls(argument[0].upper())
        except ValueError:
            raise UnsupportedParameter(f"Unknown STRUcture: {argument[0]}.")

    def __str__(self):
        return self.name.capitalize()


class TransferMode(Enum):
    STREAM = "S"
    BLOCK = "B"
    COMPRESSED = "C"

    @classmethod
    def parse(cls, argument: str) -> 'TransferMode':
        if not argument:
            raise MissingParameter("Missing argument.")
        try:
            return cls(argument[0].upper())
        except ValueError:
            raise UnsupportedParameter(f"Unknown transfer mode: {argument[0]}.")

    def __str__(self):
        return self.name.capitalize()
