import json
import logging
import os
from types import MappingProxyType

import bcrypt

logger = logging.getLogger(__name__)

DEFAULT_USERS_FILE = os.path.join("data", "users.json")
MAX_PASSWORD_BYTES = 72


class UserStore:
    """Tabla de credenciales username -> hash bcrypt.

    Se construye una sola vez al arrancar y se comparte en modo solo
    lectura entre todas las sesiones, por eso no necesita locks.
    """

    def __init__(self, hashed_users: dict):
        self._users = MappingProxyType(dict(hashed_users))

    @classmethod
    def from_plain(cls, users: dict, rounds: int = 12) -> 'UserStore':
        """Crea la tabla a partir de contraseñas en claro, encriptándolas."""
        hashed = {}
        for username, password in users.items():
            hashed[username] = hash_password(password, rounds=rounds)
        return cls(hashed)

    @classmethod
    def from_file(cls, users_file: str) -> 'UserStore':
        """Carga el archivo de usuarios (formato ``{"users": [...]}``)."""
        with open(users_file, 'r') as f:
            data = json.load(f)

        hashed = {}
        for user in data.get('users', []):
            hashed[user['username']] = user['password']

        logger.info("Loaded %d users from %s", len(hashed), users_file)
        return cls(hashed)

    def user_exists(self, username: str) -> bool:
        """Verifica si un usuario existe"""
        return username in self._users

    def validate_password(self, username: str, password: str) -> bool:
        """Valida la contraseña de un usuario"""
        hashed = self._users.get(username)
        if hashed is None:
            return False

        encoded = password.encode('utf-8')
        # bcrypt solo mira los primeros 72 bytes; algo más largo nunca coincide
        if len(encoded) > MAX_PASSWORD_BYTES:
            return False
        return bcrypt.checkpw(encoded, hashed.encode('utf-8'))

    def __len__(self):
        return len(self._users)


def hash_password(password: str, rounds: int = 12) -> str:
    """Devuelve el hash bcrypt de `password` como str."""
    encoded = password.encode('utf-8')
    if len(encoded) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password longer than {MAX_PASSWORD_BYTES} bytes")
    return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=rounds)).decode('utf-8')


def demo_users() -> dict:
    """Tabla estática de usuarios de prueba (contraseñas en claro)."""
    return {
        "a": "a",
        "b": "b",
    }
