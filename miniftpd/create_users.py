import argparse
import json
import os

import bcrypt


def hash_password(plain_password: str, rounds: int = 12) -> str:
    """Encripta la contraseña con bcrypt y la devuelve como texto."""
    hashed = bcrypt.hashpw(plain_password.encode('utf-8'), bcrypt.gensalt(rounds=rounds))
    return hashed.decode('utf-8')


def add_user(users_file: str, username: str, password: str, home_directory: str, rounds: int = 12) -> dict:
    """Agrega o reemplaza un usuario en el archivo de usuarios y lo retorna."""
    data = {"users": []}
    if os.path.exists(users_file):
        with open(users_file, 'r', encoding='utf-8') as f:
            data = json.load(f)

    user = {
        "username": username,
        "password": hash_password(password, rounds),
        "home_directory": os.path.abspath(home_directory),
    }

    users = [u for u in data.get("users", []) if u.get("username") != username]
    users.append(user)
    data["users"] = users

    directory = os.path.dirname(users_file)
    if directory:
        os.makedirs(directory, exist_ok=True)

    with open(users_file, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2)

    return user


def main(argv=None):
    parser = argparse.ArgumentParser(description="Crear o actualizar usuarios del servidor FTP")
    parser.add_argument("users_file", help="Ruta del archivo users.json")
    parser.add_argument("username")
    parser.add_argument("password")
    parser.add_argument("home_directory", help="Directorio base del usuario")
    parser.add_argument("--rounds", type=int, default=12, help="Coste de bcrypt")
    args = parser.parse_args(argv)

    user = add_user(args.users_file, args.username, args.password, args.home_directory, args.rounds)
    print(f"Usuario {user['username']} guardado en {args.users_file}: {user['home_directory']}")


if __name__ == "__main__":
    main()
