"""FastAPI application factory."""

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request

from api.handlers import handle_health, handle_proxy
from api.middleware import NotifyingMiddleware
from core.config import Config
from core.protocols import OutcomeRecorder
from services.notifier import WebhookNotifier, prepare_notifier
from services.upstream import UpstreamClient

PROXY_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]


def create_app(
    config: Config,
    recorder: OutcomeRecorder | None = None,
    *,
    webhook_client: httpx.AsyncClient | None = None,
    upstream_client: httpx.AsyncClient | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    The webhook config is validated here, so a broken notifier stops the
    server from starting instead of failing per request.

    Raises:
        ConfigurationError: The notifier URL or headers are invalid.
    """
    prepared = prepare_notifier(config.notifier)

    limits = httpx.Limits(
        max_connections=config.limits.max_connections,
        max_keepalive_connections=config.limits.max_keepalive_connections,
    )
    # Injected clients belong to the caller and stay open at shutdown
    owned_clients: list[httpx.AsyncClient] = []
    if webhook_client is None:
        webhook_client = httpx.AsyncClient(timeout=config.notifier.timeout, limits=limits)
        owned_clients.append(webhook_client)
    if upstream_client is None and config.upstream.base_url:
        upstream_client = httpx.AsyncClient(
            base_url=config.upstream.base_url,
            timeout=config.upstream.timeout,
            limits=limits,
        )
        owned_clients.append(upstream_client)

    notifier = WebhookNotifier(prepared, webhook_client, recorder)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        try:
            yield
        finally:
            await notifier.aclose(grace=config.limits.shutdown_grace)
            for client in owned_clients:
                await client.aclose()

    app = FastAPI(title="Request Notifier", version="0.1.0", lifespan=lifespan)
    app.state.notifier = notifier
    app.state.upstream_client = UpstreamClient(upstream_client) if upstream_client else None
    app.add_middleware(NotifyingMiddleware, notifier=notifier, recorder=recorder)

    @app.get("/health")
    async def health(request: Request):
        return await handle_health(request)

    if upstream_client is not None:

        @app.api_route("/{path:path}", methods=PROXY_METHODS, include_in_schema=False)
        async def proxy(request: Request):
            return await handle_proxy(request)

    return app
