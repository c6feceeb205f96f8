import json
import logging
import os
from dataclasses import dataclass
from typing import Dict, Iterable, Optional

import bcrypt

logger = logging.getLogger("miniftpd.users")

ANONYMOUS_USERNAME = "anonymous"


@dataclass(frozen=True)
class User:
    """Principal de autenticación. Inmutable durante la vida de la sesión."""

    username: str
    password: Optional[str]
    base_directory: str
    anonymous: bool = False

    @staticmethod
    def anonymous_user(base_directory: str) -> "User":
        return User(username=ANONYMOUS_USERNAME, password=None, base_directory=base_directory, anonymous=True)

    @staticmethod
    def from_dict(data: dict) -> "User":
        return User(username=data["username"], password=data.get("password"), base_directory=data["home_directory"])

    def to_dict(self) -> dict:
        return {"username": self.username, "password": self.password, "home_directory": self.base_directory}


class UserManager:
    """Almacén de usuarios consultado por USER / PASS."""

    def __init__(self, users: Iterable[User] = (), allow_anonymous: bool = False, anonymous_directory: Optional[str] = None):
        self._users: Dict[str, User] = {u.username: u for u in users}
        self.allow_anonymous = bool(allow_anonymous and anonymous_directory)
        self._anonymous = User.anonymous_user(anonymous_directory) if self.allow_anonymous else None

        if allow_anonymous and not anonymous_directory:
            logger.warning("Anonymous login requested but no anonymous directory configured; disabled")

    @classmethod
    def from_file(cls, users_file: str, allow_anonymous: bool = False, anonymous_directory: Optional[str] = None) -> "UserManager":
        """Carga usuarios desde un JSON con el formato {"users": [...]}.

        Un archivo inexistente equivale a un almacén vacío (solo anónimo).
        """
        users = []
        if users_file and os.path.exists(users_file):
            with open(users_file, "r", encoding="utf-8") as f:
                data = json.load(f)
            users = [User.from_dict(entry) for entry in data.get("users", [])]
            logger.info("Loaded %d users from %s", len(users), users_file)
        else:
            logger.warning("Users file %s not found; starting with no users", users_file)

        return cls(users, allow_anonymous=allow_anonymous, anonymous_directory=anonymous_directory)

    @property
    def anonymous_user(self) -> Optional[User]:
        return self._anonymous

    def is_anonymous_login(self, username: str) -> bool:
        return self.allow_anonymous and username.lower() == ANONYMOUS_USERNAME

    def find_by_name(self, username: str) -> Optional[User]:
        """Busca un usuario por nombre, retorna el usuario completo o None"""
        return self._users.get(username)

    def validate_password(self, user: User, password: Optional[str]) -> bool:
        """Valida la contraseña contra el hash bcrypt almacenado."""
        if user.anonymous or not user.password or password is None:
            return False
        try:
            return bcrypt.checkpw(password.encode("utf-8"), user.password.encode("utf-8"))
        except ValueError:
            # Hash mal formado en el archivo de usuarios
            logger.error("Invalid password hash stored for user %s", user.username)
            return False
