"""Shared logging utilities."""

import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from urllib.parse import urlsplit

from rich.console import Console
from rich.logging import RichHandler

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_SECRET_MARKERS = ("authorization", "key", "token", "secret", "cookie")


def setup_logging(
    log_dir: str | Path,
    file_name: str,
    level: str = "INFO",
    *,
    console: Console | None = None,
) -> TimedRotatingFileHandler:
    """Configure the root logger once at startup.

    Logs go to an hourly rotating file and, when a console is given, to a
    rich console handler as well.

    Returns:
        The file handler, so the caller can close it at shutdown.
    """
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    file_handler = TimedRotatingFileHandler(
        log_path / file_name,
        when="H",
        encoding="utf-8",
    )
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root = logging.getLogger()
    root.setLevel(level.upper())
    root.addHandler(file_handler)
    if console is not None:
        root.addHandler(RichHandler(console=console, show_path=False, rich_tracebacks=True))
    # httpx logs every request at INFO; one line per notification is enough
    logging.getLogger("httpx").setLevel(logging.WARNING)
    return file_handler


def redact_headers(headers: dict[str, str]) -> dict[str, str]:
    """Redact sensitive headers."""
    redacted = {}
    for key, value in headers.items():
        if any(marker in key.lower() for marker in _SECRET_MARKERS):
            redacted[key] = _mask(value)
        else:
            redacted[key] = value
    return redacted


def _mask(value: str) -> str:
    if len(value) <= 10:
        return "***"
    return value[:6] + "..." + value[-4:]


def redact_url(url: str) -> str:
    """Scheme, host and port only; path and query are masked."""
    try:
        parts = urlsplit(url)
        port = parts.port
    except ValueError:
        return "***"
    base = f"{parts.scheme}://{parts.hostname or ''}"
    if port:
        base += f":{port}"
    if parts.path not in ("", "/") or parts.query:
        return base + "/***"
    return base + parts.path
