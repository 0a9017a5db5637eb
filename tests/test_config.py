"""Tests for configuration models and loading."""

import json

import pytest
from pydantic import ValidationError

from core.config import Config, NotifierConfig, load_config


class TestNotifierConfig:
    def test_defaults(self):
        config = NotifierConfig(url="https://hooks.example.com")
        assert config.body is None
        assert config.headers is None
        assert config.timeout == 10.0

    def test_is_immutable(self):
        config = NotifierConfig(url="https://hooks.example.com")
        with pytest.raises(ValidationError):
            config.url = "https://elsewhere.example.com"

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            NotifierConfig(url="https://hooks.example.com", timeout=0)


class TestLoadConfig:
    def test_creates_default_when_missing(self, tmp_path):
        path = tmp_path / "nested" / "config.json"
        config = load_config(path)

        assert config == Config()
        assert json.loads(path.read_text())["server"]["port"] == 8080

    def test_loads_notifier_section(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(
            json.dumps(
                {
                    "notifier": {
                        "url": "https://hooks.example.com/notify",
                        "body": "ping",
                        "headers": {"X-Token": "abc"},
                    },
                    "upstream": {"base_url": "http://127.0.0.1:9000"},
                }
            )
        )
        config = load_config(path)

        assert config.notifier.url == "https://hooks.example.com/notify"
        assert config.notifier.body == "ping"
        assert config.notifier.headers == {"X-Token": "abc"}
        assert config.upstream.base_url == "http://127.0.0.1:9000"
        assert config.limits.shutdown_grace == 0.0

    @pytest.mark.parametrize("content", ["{not json", '{"server": {"port": "eighty"}}'])
    def test_corrupted_file_is_backed_up(self, tmp_path, content):
        path = tmp_path / "config.json"
        path.write_text(content)

        config = load_config(path)

        assert config == Config()
        assert (tmp_path / "config.json.bak").read_text() == content
        assert path.exists()

    def test_corrupted_file_reports_error_and_backup(self, tmp_path, capsys):
        path = tmp_path / "config.json"
        path.write_text('{"server": {"port": "eighty"}}')

        load_config(path)

        err = capsys.readouterr().err
        assert "server.port" in err
        assert "int_parsing" in err
        assert str(tmp_path / "config.json.bak") in err
