"""Tests for the CLI entry point (server start is not exercised)."""

import json

import pytest

import cli


@pytest.fixture
def config_file(tmp_path):
    def _write(notifier: dict) -> str:
        path = tmp_path / "config.json"
        path.write_text(
            json.dumps(
                {
                    "notifier": notifier,
                    "logging": {"dir": str(tmp_path / "logs"), "console": False},
                }
            )
        )
        return str(path)

    return _write


def test_help(capsys):
    cli.main(["--help"])
    assert "request-notifier --plain" in capsys.readouterr().out


def test_show_config(config_file, capsys):
    path = config_file({"url": "https://hooks.example.com/notify"})
    cli.main(["--config", path, "--show-config"])
    assert "https://hooks.example.com/notify" in capsys.readouterr().out


def test_config_flag_requires_path():
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["--config"])
    assert exc_info.value.code == 2


def test_invalid_webhook_refuses_to_start(config_file, restore_logging, monkeypatch):
    path = config_file({"url": "https://hooks.example.com", "headers": {"Bad\nName": "x"}})
    started = []
    monkeypatch.setattr(cli.Dashboard, "start", lambda self: started.append(self))

    with pytest.raises(SystemExit) as exc_info:
        cli.main(["--config", path])

    assert exc_info.value.code == 1
    assert started == []
