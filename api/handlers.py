"""FastAPI route handlers."""

from typing import Any

from fastapi import Request, Response
from fastapi.responses import StreamingResponse


async def handle_health(request: Request) -> dict[str, Any]:
    """Report liveness and the number of unfinished notifications."""
    notifier = request.app.state.notifier
    return {
        "status": "ok",
        "service": "request-notifier",
        "pending_notifications": notifier.pending,
    }


async def handle_proxy(request: Request) -> Response | StreamingResponse:
    """Forward any other request to the configured upstream."""
    upstream = request.app.state.upstream_client
    return await upstream.forward(request)
