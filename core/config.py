"""Configuration models and loading."""

import json
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from rich.console import Console
from rich.markup import escape

CONFIG_DIR = Path.home() / ".config" / "request-notifier"
CONFIG_FILE = CONFIG_DIR / "config.json"

# Logging is not configured yet when the config loads
console = Console(stderr=True)


class ServerSettings(BaseModel):
    host: str = "127.0.0.1"
    port: int = 8080


class NotifierConfig(BaseModel):
    """Static description of the webhook target."""

    model_config = ConfigDict(frozen=True)

    url: str = ""
    body: str | None = None
    headers: dict[str, str] | None = None
    timeout: float = Field(default=10.0, gt=0)


class UpstreamSettings(BaseModel):
    base_url: str | None = None
    timeout: float = 300.0


class LimitSettings(BaseModel):
    max_connections: int = 100
    max_keepalive_connections: int = 20
    # Seconds to wait for in-flight notifications at shutdown before cancelling
    shutdown_grace: float = Field(default=0.0, ge=0)


class LoggingSettings(BaseModel):
    dir: str = "logs"
    file: str = "request-notifier.log"
    level: str = "INFO"
    console: bool = True


class Config(BaseModel):
    server: ServerSettings = Field(default_factory=ServerSettings)
    notifier: NotifierConfig = Field(default_factory=NotifierConfig)
    upstream: UpstreamSettings = Field(default_factory=UpstreamSettings)
    limits: LimitSettings = Field(default_factory=LimitSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


def load_config(path: Path = CONFIG_FILE) -> Config:
    """Load configuration from JSON file, creating default if needed."""
    if not path.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
        default = Config()
        path.write_text(default.model_dump_json(indent=2))
        return default

    try:
        data = json.loads(path.read_text())
        return Config.model_validate(data)
    except (json.JSONDecodeError, ValidationError) as e:
        # Backup corrupted config and recreate default
        backup = path.with_suffix(".json.bak")
        path.rename(backup)
        console.print(f"[yellow][WARN][/yellow] Invalid config {escape(str(path))}:", soft_wrap=True)
        console.print(escape(str(e)), soft_wrap=True)
        console.print(
            f"[dim]Moved it to {escape(str(backup))} and wrote defaults[/dim]", soft_wrap=True
        )
        default = Config()
        path.write_text(default.model_dump_json(indent=2))
        return default
