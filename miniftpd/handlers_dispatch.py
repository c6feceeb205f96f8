from miniftpd.commands import *

# Diccionario de handlers
FTP_COMMAND_HANDLERS = {
    "AUTH": handle_auth,
    "USER": handle_user,
    "PASS": handle_pass,
    "CWD": handle_cwd,
    "CDUP": handle_cdup,
    "PORT": handle_port,
    "PASV": handle_pasv,
    "PWD": handle_pwd,
    "TYPE": handle_type,
    "LIST": handle_list,
    "RETR": handle_retr,
    "QUIT": handle_quit,
    "NOOP": handle_noop,
    "SYST": handle_syst,
}
