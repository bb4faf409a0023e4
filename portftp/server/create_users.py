import argparse
import json
import os
import sys

from portftp.server.entities.user_manager import hash_password, DEFAULT_USERS_FILE, MAX_PASSWORD_BYTES


def parse_credential(value):
    username, sep, password = value.partition(':')
    if not sep or not username:
        raise argparse.ArgumentTypeError(f"Expected user:password, got {value!r}")
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise argparse.ArgumentTypeError(f"Password for {username!r} is longer than {MAX_PASSWORD_BYTES} bytes")
    return username, password


def create_users_file(credentials, output=DEFAULT_USERS_FILE, rounds=12):
    """Escribe el archivo de usuarios con las contraseñas encriptadas (bcrypt)."""
    directory = os.path.dirname(output)
    if directory:
        os.makedirs(directory, exist_ok=True)

    users = []
    for username, plain_password in credentials:
        users.append({
            "username": username,
            "password": hash_password(plain_password, rounds=rounds),
        })

    with open(output, 'w') as f:
        json.dump({"users": users}, f, indent=2)

    return users


def main(argv=None):
    parser = argparse.ArgumentParser(prog="portftp-create-users", description="Genera users.json para portftp-server")
    parser.add_argument("credentials", nargs="+", type=parse_credential, metavar="USER:PASSWORD")
    parser.add_argument("-o", "--output", default=DEFAULT_USERS_FILE, help="Archivo de salida")
    parser.add_argument("--rounds", type=int, default=12, help="Coste de bcrypt")
    args = parser.parse_args(argv)

    users = create_users_file(args.credentials, args.output, args.rounds)

    print(f"Archivo {args.output} creado exitosamente")
    print("Usuarios creados:")
    for user in users:
        print(f"  - {user['username']}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
