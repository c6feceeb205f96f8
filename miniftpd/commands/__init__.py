__all__ = ["handle_auth", "handle_user", "handle_pass", "handle_cwd", "handle_cdup", "handle_port",
           "handle_pasv", "handle_pwd", "handle_type", "handle_list", "handle_retr", "handle_quit",
           "handle_noop", "handle_syst"]

def __getattr__(name: str):
    if name == "handle_auth":
        from ._auth import handle_auth
        return handle_auth
    if name == "handle_user":
        from ._user import handle_user
        return handle_user
    if name == "handle_pass":
        from ._pass import handle_pass
        return handle_pass
    if name == "handle_cwd":
        from ._cwd import handle_cwd
        return handle_cwd
    if name == "handle_cdup":
        from ._cdup import handle_cdup
        return handle_cdup
    if name == "handle_port":
        from ._port import handle_port
        return handle_port
    if name == "handle_pasv":
        from ._pasv import handle_pasv
        return handle_pasv
    if name == "handle_pwd":
        from ._pwd import handle_pwd
        return handle_pwd
    if name == "handle_type":
        from ._type import handle_type
        return handle_type
    if name == "handle_list":
        from ._list import handle_list
        return handle_list
    if name == "handle_retr":
        from ._retr import handle_retr
        return handle_retr
    if name == "handle_quit":
        from ._quit import handle_quit
        return handle_quit
    if name == "handle_noop":
        from ._noop import handle_noop
        return handle_noop
    if name == "handle_syst":
        from ._syst import handle_syst
        return handle_syst
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

def __dir__():
    return __all__
