import logging
import os
import ssl
from typing import Optional

logger = logging.getLogger("miniftpd.certificates")


class CertificateError(Exception):
    """El certificado configurado no se pudo cargar."""
    pass


def certificate_exists(certfile: Optional[str]) -> bool:
    """Indica si hay un certificado de servidor configurado y presente en disco."""
    return bool(certfile) and os.path.isfile(certfile)


def load_server_context(certfile: str, keyfile: Optional[str] = None) -> ssl.SSLContext:
    """
    Construye el contexto TLS de servidor a partir de un certificado PEM.
    Si `keyfile` es None la clave privada debe estar en el mismo archivo.
    """
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
    try:
        context.load_cert_chain(certfile=certfile, keyfile=keyfile)
    except (OSError, ssl.SSLError) as e:
        raise CertificateError(f"Cannot load certificate {certfile}: {e}") from e

    logger.info("Loaded TLS certificate from %s", certfile)
    return context
