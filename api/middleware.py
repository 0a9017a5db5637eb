"""Middleware that notifies a webhook on every request."""

import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from core.protocols import OutcomeRecorder
from services.notifier import WebhookNotifier

logger = logging.getLogger(__name__)


class NotifyingMiddleware(BaseHTTPMiddleware):
    """Schedule a webhook POST per request without touching the response."""

    def __init__(
        self,
        app: ASGIApp,
        notifier: WebhookNotifier,
        recorder: OutcomeRecorder | None = None,
    ) -> None:
        super().__init__(app)
        self.notifier = notifier
        self.recorder = recorder

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        # Scheduled before the inner handler runs so its outcome cannot gate it
        try:
            self.notifier.schedule()
            if self.recorder is not None:
                self.recorder.log_request(request.method, request.url.path)
        except Exception:
            logger.warning("Failed to schedule webhook notification", exc_info=True)

        return await call_next(request)
