"""HTTP proxying utilities for upstream requests."""

import json
import logging
from collections.abc import AsyncIterator

import httpx
from fastapi import Request, Response
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from core.exceptions import UpstreamConnectionError, UpstreamError, UpstreamTimeoutError
from core.headers import HeaderBuilder

logger = logging.getLogger(__name__)


class UpstreamClient:
    """Proxy requests to the upstream service with streaming support."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        header_builder: HeaderBuilder | None = None,
    ) -> None:
        self._client = client
        self._headers = header_builder or HeaderBuilder()

    async def forward(self, request: Request) -> Response | StreamingResponse:
        """Forward the request as-is and stream the upstream response back."""
        try:
            return await self._streaming_request(request)
        except UpstreamTimeoutError as e:
            logger.warning("Upstream timeout: %s %s", request.method, request.url.path)
            return _error_response(504, str(e))
        except UpstreamError as e:
            logger.warning("Upstream error: %s", e)
            return _error_response(502, str(e))

    async def _streaming_request(self, request: Request) -> StreamingResponse:
        """Handle streaming request with proper status code propagation."""
        target = request.url.path
        if request.url.query:
            target = f"{target}?{request.url.query}"

        req = self._client.build_request(
            request.method,
            target,
            headers=self._headers.build_upstream_headers(request.headers),
            content=await request.body(),
        )
        try:
            response = await self._client.send(req, stream=True)
        except httpx.TimeoutException as e:
            raise UpstreamTimeoutError("Upstream timeout") from e
        except httpx.RequestError as e:
            raise UpstreamConnectionError(f"Upstream connection error: {e}") from e

        return StreamingResponse(
            self._iter_body(response),
            status_code=response.status_code,
            headers=self._headers.build_downstream_headers(response.headers),
            background=BackgroundTask(self._cleanup_streaming, response),
        )

    async def _iter_body(self, response: httpx.Response) -> AsyncIterator[bytes]:
        """Raw upstream bytes; transports may hand back an already-read body."""
        if response.is_stream_consumed:
            yield response.content
            return
        async for chunk in response.aiter_raw():
            yield chunk

    async def _cleanup_streaming(self, response: httpx.Response) -> None:
        """Clean up streaming resources."""
        await response.aclose()


def _error_response(status_code: int, message: str) -> Response:
    return Response(
        content=json.dumps({"error": message}),
        status_code=status_code,
        media_type="application/json",
    )
