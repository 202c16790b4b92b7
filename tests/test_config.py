import logging

import pytest

from webseed_torznab.config import (
    DEFAULT_MAX_RESULTS,
    ServerConfig,
    get_configuration,
    load_configuration,
)


def test_load_configuration_happy_path(mocker):
    config_data = """
[server]
host = 127.0.0.1
port = 9117
base_url = https://torrents.example.com/

[torrents]
directory = /srv/torrents

[torznab]
title = My Seeds
description = Web seeded files
max_results = 25

[logging]
level = debug
"""
    mocker.patch("builtins.open", mocker.mock_open(read_data=config_data))
    mocker.patch("os.path.exists", return_value=True)

    config = load_configuration(environ={})

    assert config == ServerConfig(
        torrents_dir="/srv/torrents",
        host="127.0.0.1",
        port=9117,
        base_url="https://torrents.example.com",
        title="My Seeds",
        description="Web seeded files",
        max_results=25,
        log_level="DEBUG",
    )


def test_load_configuration_missing_file_uses_defaults(mocker):
    mocker.patch("os.path.exists", return_value=False)
    open_mock = mocker.patch("builtins.open")

    config = load_configuration(environ={})

    open_mock.assert_not_called()
    assert config.port == 8080
    assert config.base_url == "http://localhost:8080"
    assert config.torrents_dir == "./torrents"
    assert config.max_results == DEFAULT_MAX_RESULTS
    assert config.log_level == "INFO"


def test_environment_overrides_file(tmp_path):
    config_file = tmp_path / "config.ini"
    config_file.write_text(
        "[server]\nport = 9000\nbase_url = http://file.example\n"
        "[torrents]\ndirectory = /from/file\n"
    )
    environ = {
        "PORT": "7000",
        "BASE_URL": "http://env.example/",
        "TORRENTS_DIR": "/from/env",
        "LOG_LEVEL": "warning",
    }

    config = load_configuration(str(config_file), environ=environ)

    assert config.port == 7000
    assert config.base_url == "http://env.example"
    assert config.torrents_dir == "/from/env"
    assert config.log_level == "WARNING"


def test_command_line_directory_wins(tmp_path):
    config = load_configuration(
        str(tmp_path / "missing.ini"),
        torrents_dir="/from/argv",
        environ={"TORRENTS_DIR": "/from/env"},
    )
    assert config.torrents_dir == "/from/argv"


def test_base_url_defaults_to_resolved_port(tmp_path):
    config = load_configuration(str(tmp_path / "missing.ini"), environ={"PORT": "9999"})
    assert config.base_url == "http://localhost:9999"


@pytest.mark.parametrize(
    "contents, environ, message",
    [
        ("[server]\nport = abc\n", {}, "integer"),
        ("[server]\nport = 70000\n", {}, "between"),
        ("", {"PORT": "0"}, "between"),
        ("[torznab]\nmax_results = 0\n", {}, "positive"),
        ("[logging]\nlevel = chatty\n", {}, "log level"),
    ],
)
def test_invalid_values_raise_value_error(tmp_path, contents, environ, message):
    config_file = tmp_path / "config.ini"
    config_file.write_text(contents)

    with pytest.raises(ValueError, match=message):
        load_configuration(str(config_file), environ=environ)


def test_get_configuration_exits_on_invalid_file(tmp_path, mocker):
    config_file = tmp_path / "config.ini"
    config_file.write_text("this is not an ini file")
    critical_mock = mocker.patch("webseed_torznab.config.logger.critical")

    with pytest.raises(SystemExit):
        get_configuration(str(config_file))

    critical_mock.assert_called_once()


def test_get_configuration_sets_root_log_level(tmp_path, mocker):
    config_file = tmp_path / "config.ini"
    config_file.write_text("[logging]\nlevel = ERROR\n")
    mocker.patch.dict("os.environ", {}, clear=True)
    root = logging.getLogger()
    previous = root.level
    try:
        config = get_configuration(str(config_file), "/data")
        assert root.level == logging.ERROR
        assert config.torrents_dir == "/data"
    finally:
        root.setLevel(previous)
