"""Shared fixtures: a fake webhook target, a recording sink and an app factory."""

import asyncio
import logging

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse, PlainTextResponse

from app import create_app
from core.config import Config, NotifierConfig
from core.request_types import DeliveryOutcome

WEBHOOK_URL = "https://hooks.example.com/notify"


class FakeWebhook:
    """MockTransport handler that records every webhook POST."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.error: Exception | None = None
        self.hold: asyncio.Event | None = None

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.hold is not None:
            await self.hold.wait()
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, text="ok")


class RecordingRecorder:
    def __init__(self) -> None:
        self.requests: list[tuple[str, str]] = []
        self.outcomes: list[DeliveryOutcome] = []

    def log_request(self, method: str, path: str) -> None:
        self.requests.append((method, path))

    def log_outcome(self, outcome: DeliveryOutcome) -> None:
        self.outcomes.append(outcome)


def add_sample_routes(app: FastAPI) -> None:
    """Routes standing in for the wrapped application."""

    @app.get("/items")
    async def items():
        return JSONResponse(
            {"items": [1, 2, 3]},
            headers={"X-Inner": "yes", "Cache-Control": "no-store"},
        )

    @app.post("/echo")
    async def echo(payload: dict):
        return PlainTextResponse(f"got {sorted(payload)}", status_code=201)

    @app.get("/missing")
    async def missing():
        raise HTTPException(status_code=404, detail="nope")

    @app.get("/boom")
    async def boom():
        raise RuntimeError("handler exploded")


@pytest.fixture
def webhook() -> FakeWebhook:
    return FakeWebhook()


@pytest.fixture
def recorder() -> RecordingRecorder:
    return RecordingRecorder()


@pytest_asyncio.fixture
async def webhook_client(webhook):
    async with httpx.AsyncClient(transport=httpx.MockTransport(webhook.handler)) as client:
        yield client


@pytest.fixture
def make_app(webhook_client, recorder):
    """Build the notifying app around the sample routes."""

    def _make(upstream_client: httpx.AsyncClient | None = None, **notifier) -> FastAPI:
        config = Config(notifier=NotifierConfig(url=WEBHOOK_URL, **notifier))
        app = create_app(
            config,
            recorder,
            webhook_client=webhook_client,
            upstream_client=upstream_client,
        )
        add_sample_routes(app)
        return app

    return _make


@pytest.fixture
def restore_logging():
    """Undo root logger changes made by setup_logging."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
