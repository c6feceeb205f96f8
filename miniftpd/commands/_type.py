from miniftpd.entities.command import Command
from miniftpd.entities.ftp_codes import FtpCode
from miniftpd.entities.transfer import TransferType

TYPE_MESSAGES = {
    TransferType.ASCII: "Type set to ASCII",
    TransferType.BINARY: "Type set to binary",
}


def handle_type(cmd: Command, session) -> tuple:
    """
    Maneja el comando TYPE <code> [<format>].
    Solo A e I; como formato solo N (non-print).
    """
    if not session.is_authenticated():
        return FtpCode.NOT_LOGGED_IN, "Not logged in"

    if not cmd.has_argument():
        return FtpCode.SYNTAX_ERROR_IN_PARAMETERS, "Syntax error in parameters"

    type_code = cmd.get_arg(0).upper()
    format_control = cmd.get_arg(1)

    if type_code not in ("A", "I"):
        return FtpCode.COMMAND_NOT_IMPLEMENTED_FOR_PARAMETER, "Command not implemented for that parameter"

    if format_control is not None and format_control.upper() != "N":
        return FtpCode.COMMAND_NOT_IMPLEMENTED_FOR_PARAMETER, "Command not implemented for that parameter"

    transfer_type = TransferType(type_code)
    session.set_transfer_type(transfer_type)
    return FtpCode.COMMAND_OK, TYPE_MESSAGES[transfer_type]
