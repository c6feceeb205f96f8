import argparse
import logging
import logging.handlers
import os
import signal
import sys
import threading

from miniftpd.entities.ftp_server import start_connection_listener
from miniftpd.entities.user_manager import UserManager
from miniftpd.settings import ServerSettings, SettingsError, load_settings

LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s %(message)s'

logger = logging.getLogger("miniftpd.main")


def configure_logging(settings: ServerSettings, level: int = logging.INFO) -> None:
    """Consola siempre; archivo rotativo si la configuración lo indica."""
    logging.basicConfig(level=level, format=LOG_FORMAT)

    log_path = settings.log_path
    if log_path:
        os.makedirs(os.path.dirname(log_path) or ".", exist_ok=True)
        handler = logging.handlers.TimedRotatingFileHandler(log_path, when=settings.log_rolling, encoding="utf-8")
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logging.getLogger("miniftpd").addHandler(handler)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="miniftpd", description="Minimal RFC-959 FTP server")
    parser.add_argument("--config", help="Archivo JSON de configuración")
    parser.add_argument("--host", help="Dirección de escucha")
    parser.add_argument("--port", type=int, help="Puerto de escucha")
    parser.add_argument("--ipv6", dest="use_ipv6", action="store_true", default=None, help="Escuchar en IPv6 (dual-stack)")
    parser.add_argument("--users-file", help="Archivo JSON de usuarios")
    parser.add_argument("--allow-anonymous", action="store_true", default=None, help="Permitir login anónimo")
    parser.add_argument("--anonymous-dir", dest="anonymous_directory", help="Directorio base del usuario anónimo")
    parser.add_argument("--certfile", dest="tls_certfile", help="Certificado PEM para AUTH TLS")
    parser.add_argument("--keyfile", dest="tls_keyfile", help="Clave privada PEM (si no está en el certificado)")
    parser.add_argument("--public-ip", dest="passive_address", help="IP anunciada en respuestas PASV")
    parser.add_argument("--log-file", help="Nombre del archivo de log rotativo")
    parser.add_argument("--log-dir", dest="log_directory", help="Directorio del archivo de log")
    parser.add_argument("--debug", action="store_true", help="Logging en nivel DEBUG")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    overrides = vars(args)
    config_path = overrides.pop("config")
    debug = overrides.pop("debug")

    try:
        settings = load_settings(config_path, **overrides)
    except SettingsError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2

    configure_logging(settings, logging.DEBUG if debug else logging.INFO)

    user_manager = UserManager.from_file(settings.users_file, allow_anonymous=settings.allow_anonymous,
                                         anonymous_directory=settings.anonymous_directory)

    stop_event = threading.Event()

    def _handle_sigint(signum, frame):
        print('\nShutting down listener')
        stop_event.set()

    signal.signal(signal.SIGINT, _handle_sigint)

    start_connection_listener(settings, user_manager, stop_event=stop_event)
    return 0


if __name__ == "__main__":
    sys.exit(main())
