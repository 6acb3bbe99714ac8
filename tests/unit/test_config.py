"""
Unit tests for configuration and the command line.
"""

import logging
from pathlib import Path

import pytest

from minihttp import HTTPServer
from minihttp.__main__ import build_parser, load_config, main
from minihttp.config import ServerConfig
from minihttp.http.request import HTTPRequest, RequestLine
from minihttp.storage import DirectoryStorage


ENV_VARS = (
    "HTTP_HOST", "HTTP_PORT", "HTTP_DIRECTORY", "HTTP_CONFINE_FILES",
    "HTTP_TIMEOUT", "HTTP_MAX_BODY_SIZE", "HTTP_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestServerConfig:

    def test_defaults(self):
        config = ServerConfig()

        assert config.host == "127.0.0.1"
        assert config.port == 4221
        assert config.directory is None
        assert config.confine_files is False
        assert config.timeout is None
        assert config.max_body_size is None
        assert config.log_level == "INFO"
        config.validate()

    def test_from_env_defaults(self):
        assert ServerConfig.from_env() == ServerConfig()

    def test_from_env(self, monkeypatch, tmp_path: Path):
        monkeypatch.setenv("HTTP_HOST", "0.0.0.0")
        monkeypatch.setenv("HTTP_PORT", "8080")
        monkeypatch.setenv("HTTP_DIRECTORY", str(tmp_path))
        monkeypatch.setenv("HTTP_CONFINE_FILES", "true")
        monkeypatch.setenv("HTTP_TIMEOUT", "2.5")
        monkeypatch.setenv("HTTP_MAX_BODY_SIZE", "1024")
        monkeypatch.setenv("HTTP_LOG_LEVEL", "DEBUG")

        config = ServerConfig.from_env()

        assert config == ServerConfig(
            host="0.0.0.0",
            port=8080,
            directory=str(tmp_path),
            confine_files=True,
            timeout=2.5,
            max_body_size=1024,
            log_level="DEBUG",
        )

    def test_from_env_bad_number(self, monkeypatch):
        monkeypatch.setenv("HTTP_PORT", "eighty")

        with pytest.raises(ValueError):
            ServerConfig.from_env()

    @pytest.mark.parametrize("kwargs", [
        {"port": -1},
        {"port": 65536},
        {"backlog": 0},
        {"timeout": 0},
        {"max_body_size": -1},
        {"log_level": "CHATTY"},
        {"directory": "/definitely/not/a/real/dir"},
    ])
    def test_validate_rejects(self, kwargs):
        with pytest.raises(ValueError):
            ServerConfig(**kwargs).validate()

    def test_port_zero_allowed(self):
        ServerConfig(port=0).validate()

    def test_log_level_value(self):
        assert ServerConfig(log_level="debug").log_level_value == logging.DEBUG


class TestHTTPServerSetup:

    def test_directory_builds_storage(self, tmp_path: Path):
        server = HTTPServer(ServerConfig(directory=str(tmp_path), confine_files=True))

        assert isinstance(server.storage, DirectoryStorage)
        assert server.storage.root == str(tmp_path)
        assert server.storage.confine is True
        assert "files.get" in [route.name for route in server.router.routes()]

    def test_no_directory_keeps_file_routes(self):
        server = HTTPServer(ServerConfig())

        assert server.storage is None
        assert [route.name for route in server.router.routes()] == [
            "index", "echo", "user_agent", "files.get", "files.post",
        ]

        request = HTTPRequest(RequestLine("DELETE", "/files/x.txt", "HTTP/1.1"))
        assert server.router.handle(request).status_code == 405

    def test_invalid_config_rejected(self):
        with pytest.raises(ValueError):
            HTTPServer(ServerConfig(port=70000))


class TestCommandLine:

    def test_cli_overrides_env(self, monkeypatch, tmp_path: Path):
        monkeypatch.setenv("HTTP_PORT", "9000")
        monkeypatch.setenv("HTTP_HOST", "0.0.0.0")

        args = build_parser().parse_args([
            "--port", "1234",
            "--directory", str(tmp_path),
            "--confine",
            "--log-level", "debug",
        ])
        config = load_config(args)

        assert config.port == 1234
        assert config.host == "0.0.0.0"
        assert config.directory == str(tmp_path)
        assert config.confine_files is True
        assert config.log_level == "DEBUG"

    def test_no_options_means_env_and_defaults(self):
        config = load_config(build_parser().parse_args([]))
        assert config == ServerConfig()

    def test_invalid_config_exits_1(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--directory", "/definitely/not/a/real/dir"])

        assert exc_info.value.code == 1
        assert "invalid configuration" in capsys.readouterr().err

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])

        assert exc_info.value.code == 0
        assert "minihttp" in capsys.readouterr().out
