import json
import os

import pytest

from miniftpd.settings import ServerSettings, SettingsError, load_settings


def test_defaults():
    settings = load_settings(environ={})
    assert settings == ServerSettings()
    assert settings.port == 21221
    assert not settings.allow_anonymous
    assert settings.log_path is None


def test_file_environment_and_overrides(tmp_path):
    config = tmp_path / "miniftpd.json"
    config.write_text(json.dumps({"server_name": "files", "port": 2121, "allow_anonymous": True,
                                  "anonymous_directory": "/srv/ftp"}))

    settings = load_settings(str(config), environ={"MINIFTPD_PORT": "2222", "MINIFTPD_PUBLIC_IP": "198.51.100.4"},
                             port=2323, host=None)

    assert settings.server_name == "files"
    assert settings.port == 2323
    assert settings.host == "0.0.0.0"
    assert settings.passive_address == "198.51.100.4"
    assert settings.allow_anonymous


def test_unknown_key_is_rejected(tmp_path):
    config = tmp_path / "bad.json"
    config.write_text(json.dumps({"prot": 21}))
    with pytest.raises(SettingsError):
        load_settings(str(config), environ={})


@pytest.mark.parametrize("data", [{"port": "21"}, {"use_ipv6": "yes"}, {"port": 70000}, {"log_rolling": "W"}])
def test_invalid_values_are_rejected(tmp_path, data):
    config = tmp_path / "bad.json"
    config.write_text(json.dumps(data))
    with pytest.raises(SettingsError):
        load_settings(str(config), environ={})


def test_invalid_environment_value():
    with pytest.raises(SettingsError):
        load_settings(environ={"MINIFTPD_PORT": "ftp"})


def test_unreadable_file_is_reported(tmp_path):
    with pytest.raises(SettingsError):
        load_settings(str(tmp_path / "missing.json"), environ={})


def test_log_path_joins_directory():
    settings = ServerSettings(log_directory="/var/log/miniftpd", log_file="ftp.log")
    assert settings.log_path == os.path.join("/var/log/miniftpd", "ftp.log")
