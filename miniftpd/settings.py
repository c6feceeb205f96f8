import json
import logging
import os
from dataclasses import dataclass, fields
from typing import Optional

logger = logging.getLogger("miniftpd.settings")

# Intervalos aceptados por TimedRotatingFileHandler
LOG_ROLLING_INTERVALS = ("S", "M", "H", "D", "MIDNIGHT")

# Variable de entorno -> (campo, conversión)
ENVIRONMENT_OVERRIDES = {
    "MINIFTPD_HOST": ("host", str),
    "MINIFTPD_PORT": ("port", int),
    "MINIFTPD_PUBLIC_IP": ("passive_address", str),
}


class SettingsError(ValueError):
    """Configuración inválida."""
    pass


@dataclass
class ServerSettings:
    """Configuración del servidor; los valores por defecto sirven para desarrollo local."""

    server_name: str = "miniftpd"
    host: str = "0.0.0.0"
    port: int = 21221
    use_ipv6: bool = False

    tls_certfile: Optional[str] = None
    tls_keyfile: Optional[str] = None

    users_file: str = os.path.join("data", "users.json")
    allow_anonymous: bool = False
    anonymous_directory: Optional[str] = None

    passive_address: Optional[str] = None
    permit_foreign_addresses: bool = False
    idle_timeout: float = 300.0
    data_timeout: float = 30.0

    log_directory: Optional[str] = None
    log_file: Optional[str] = None
    log_rolling: str = "D"

    def __post_init__(self):
        if not 0 <= self.port <= 65535:
            raise SettingsError(f"port out of range: {self.port}")
        if self.log_rolling.upper() not in LOG_ROLLING_INTERVALS:
            raise SettingsError(f"log_rolling must be one of {LOG_ROLLING_INTERVALS}")
        if self.idle_timeout is not None and self.idle_timeout <= 0:
            raise SettingsError("idle_timeout must be positive")
        if self.data_timeout is not None and self.data_timeout <= 0:
            raise SettingsError("data_timeout must be positive")

    @property
    def log_path(self) -> Optional[str]:
        if not self.log_file:
            return None
        return os.path.join(self.log_directory or ".", self.log_file)


def _check_type(name: str, default, value):
    """Valida `value` contra el tipo del valor por defecto del campo."""
    if value is None:
        if default is None or name in ("idle_timeout", "data_timeout"):
            return None
        raise SettingsError(f"{name} cannot be null")

    if isinstance(default, bool):
        if not isinstance(value, bool):
            raise SettingsError(f"{name} must be a boolean")
        return value

    if isinstance(default, int):
        if isinstance(value, bool) or not isinstance(value, int):
            raise SettingsError(f"{name} must be an integer")
        return value

    if isinstance(default, float):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise SettingsError(f"{name} must be a number")
        return float(value)

    if not isinstance(value, str):
        raise SettingsError(f"{name} must be a string")
    return value


def settings_from_dict(data: dict) -> ServerSettings:
    defaults = {f.name: f.default for f in fields(ServerSettings)}

    unknown = set(data) - set(defaults)
    if unknown:
        raise SettingsError(f"Unknown settings: {', '.join(sorted(unknown))}")

    values = {name: _check_type(name, defaults[name], value) for name, value in data.items()}
    return ServerSettings(**values)


def load_settings(path: Optional[str] = None, environ=None, **overrides) -> ServerSettings:
    """
    Carga la configuración: valores por defecto, archivo JSON, variables
    de entorno y por último `overrides` (argumentos de línea de comandos).
    Los overrides con valor None se ignoran.
    """
    data = {}

    if path:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data.update(json.load(f))
        except (OSError, json.JSONDecodeError) as e:
            raise SettingsError(f"Cannot read settings file {path}: {e}") from e
        logger.info("Loaded settings from %s", path)

    if environ is None:
        environ = os.environ

    for variable, (name, convert) in ENVIRONMENT_OVERRIDES.items():
        if variable in environ:
            try:
                data[name] = convert(environ[variable])
            except ValueError as e:
                raise SettingsError(f"Invalid value for {variable}: {environ[variable]}") from e

    data.update({name: value for name, value in overrides.items() if value is not None})
    return settings_from_dict(data)
