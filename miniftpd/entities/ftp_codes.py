from enum import IntEnum


class FtpCode(IntEnum):
    """Códigos de respuesta RFC-959 usados por el servidor."""

    # =========================
    # Preliminares / conexión
    # =========================
    OPENING_DATA_CONNECTION = 150
    COMMAND_OK = 200
    SYSTEM_TYPE = 215
    SERVICE_READY = 220
    CLOSING_CONTROL_CONNECTION = 221
    CLOSING_DATA_CONNECTION = 226
    ENTERING_PASSIVE_MODE = 227
    USER_LOGGED_IN = 230
    SECURITY_EXCHANGE_COMPLETE = 234
    FILE_ACTION_COMPLETED = 250
    PATH_CREATED = 257

    # =========================
    # Intermedios
    # =========================
    USER_OK_NEED_PASSWORD = 331

    # =========================
    # Errores transitorios
    # =========================
    SERVICE_NOT_AVAILABLE = 421
    CANT_OPEN_DATA_CONNECTION = 425
    TRANSFER_ABORTED = 426
    FILE_ACTION_NOT_TAKEN = 450

    # =========================
    # Errores permanentes
    # =========================
    SYNTAX_ERROR = 500
    SYNTAX_ERROR_IN_PARAMETERS = 501
    COMMAND_NOT_IMPLEMENTED = 502
    COMMAND_NOT_IMPLEMENTED_FOR_PARAMETER = 504
    NOT_LOGGED_IN = 530
    FILE_UNAVAILABLE = 550
