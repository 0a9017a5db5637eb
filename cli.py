"""CLI entry point for request-notifier."""

import logging
import sys
from datetime import datetime
from pathlib import Path

from rich.console import Console

from app import create_app
from core.config import CONFIG_FILE, load_config
from core.exceptions import ConfigurationError
from ui.dashboard import Dashboard
from ui.log_utils import setup_logging

console = Console()
logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None):
    """Main CLI entry point."""
    args = list(sys.argv[1:] if argv is None else argv)

    if "--help" in args or "-h" in args:
        _print_help()
        return

    config_path = CONFIG_FILE
    if "--config" in args:
        index = args.index("--config")
        if index + 1 >= len(args):
            console.print("[red][ERROR][/red] --config requires a path")
            sys.exit(2)
        config_path = Path(args[index + 1]).expanduser()

    config = load_config(config_path)

    if "--show-config" in args:
        console.print(f"[bold]Config:[/bold] {config_path}")
        console.print(config.model_dump_json(indent=2))
        return

    plain = "--plain" in args
    dashboard = None if plain else Dashboard(config)
    file_handler = setup_logging(
        config.logging.dir,
        config.logging.file,
        config.logging.level,
        console=console if plain and config.logging.console else None,
    )

    # Fails before the server starts if the webhook target is unusable
    try:
        app = create_app(config, dashboard)
    except ConfigurationError as e:
        console.print(f"[red][ERROR][/red] {e}")
        console.print(f"[dim]Edit {config_path} and fix notifier settings[/dim]")
        sys.exit(1)

    import uvicorn

    uvicorn_config = uvicorn.Config(
        app,
        host=config.server.host,
        port=config.server.port,
        log_level="info" if plain else "warning",
    )
    server = uvicorn.Server(uvicorn_config)

    if dashboard:
        dashboard.start()
    start_time = datetime.now()
    logger.info("Request notifier started on %s:%d", config.server.host, config.server.port)
    try:
        server.run()
    finally:
        logger.info("Request notifier stopped after %s", datetime.now() - start_time)
        if dashboard:
            dashboard.stop()
        file_handler.close()


def _print_help():
    """Print help message."""
    help_text = """
[bold cyan]Request Notifier[/bold cyan]

Serves HTTP and POSTs to a webhook on every request, without delaying responses.

[bold]Usage:[/bold]
    request-notifier                     Start with live dashboard
    request-notifier --plain             Start with console logging instead
    request-notifier --config PATH       Use a config file other than the default
    request-notifier --show-config       Print the effective configuration
    request-notifier --help              Show this help

[bold]Webhook:[/bold]
    Set notifier.url (and optionally notifier.body, notifier.headers) in the config file.
"""
    console.print(help_text)


if __name__ == "__main__":
    main()
