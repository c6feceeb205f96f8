from typing import Optional


class Command:
    """Línea de comando FTP: verbo + argumento crudo.

    El argumento es el resto de la línea tras el primer espacio, sin
    interpretar comillas (los nombres de archivo pueden contener espacios).
    """

    def __init__(self, raw_command: str):
        self.raw_command = raw_command.strip("\r\n")
        self.parse_command()

    def parse_command(self):
        """Separa el verbo (en mayúsculas) del argumento."""
        verb, _, rest = self.raw_command.partition(" ")
        self.name = verb.strip().upper()
        # Argumento vacío o solo espacios equivale a ausente
        self.argument = rest if rest.strip() else None

    def __str__(self):
        # Nunca exponer contraseñas en los logs
        if self.name == "PASS" and self.argument is not None:
            return "Command(name='PASS', argument='****')"
        return f"Command(name='{self.name}', argument={self.argument!r})"

    def get_name(self) -> str:
        """Devuelve el nombre del comando"""
        return self.name

    def get_argument(self) -> Optional[str]:
        """Devuelve el argumento crudo o None"""
        return self.argument

    def has_argument(self) -> bool:
        return self.argument is not None

    def get_args(self) -> list:
        """Devuelve el argumento separado por espacios (TYPE A N, etc.)"""
        if self.argument is None:
            return []
        return self.argument.split()

    def get_arg(self, index, default=None):
        """Devuelve un argumento específico por índice"""
        try:
            return self.get_args()[index]
        except IndexError:
            return default
