"""Fire-and-forget webhook notifications."""

import asyncio
import logging
import time

import httpx

from core.config import NotifierConfig
from core.exceptions import DeliveryError, InvalidUrlError
from core.headers import HeaderBuilder
from core.protocols import OutcomeRecorder
from core.request_types import (
    DeliveryOutcome,
    DeliveryState,
    OutboundNotification,
    PreparedNotifierConfig,
)
from ui.log_utils import redact_headers, redact_url

logger = logging.getLogger(__name__)


def prepare_notifier(
    config: NotifierConfig,
    header_builder: HeaderBuilder | None = None,
) -> PreparedNotifierConfig:
    """Validate the webhook config once, before any request is served.

    Raises:
        InvalidUrlError: URL is empty, unparsable, not http(s) or has no host.
        InvalidHeaderError: A header name or value is malformed.
    """
    _validate_url(config.url)
    builder = header_builder or HeaderBuilder()
    headers = builder.prepare_webhook_headers(config.headers)
    logger.info(
        "Webhook notifier configured: url=%s headers=%s body=%s",
        redact_url(config.url),
        redact_headers(dict(headers)),
        "yes" if config.body is not None else "no",
    )
    return PreparedNotifierConfig(
        url=config.url,
        headers=headers,
        body=config.body,
        timeout=config.timeout,
    )


def _validate_url(url: str) -> None:
    if not url:
        raise InvalidUrlError(url, "URL is empty")
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL as e:
        raise InvalidUrlError(url, str(e)) from e
    if parsed.scheme not in ("http", "https"):
        raise InvalidUrlError(url, "scheme must be http or https")
    if not parsed.host:
        raise InvalidUrlError(url, "URL has no host")


async def deliver(
    notification: OutboundNotification,
    client: httpx.AsyncClient,
    recorder: OutcomeRecorder | None = None,
) -> DeliveryOutcome:
    """POST one notification and log the outcome. Never raises DeliveryError."""
    start = time.perf_counter()
    try:
        response = await _send(notification, client)
    except DeliveryError as e:
        logger.debug("Failed to send notification to webhook: %s", e)
        outcome = DeliveryOutcome(
            state=DeliveryState.FAILED,
            url=notification.url,
            status_code=e.status_code,
            error=str(e),
            elapsed_ms=_elapsed_ms(start),
        )
    else:
        logger.debug(
            "Successfully sent notification to webhook: %s %d",
            redact_url(notification.url),
            response.status_code,
        )
        outcome = DeliveryOutcome(
            state=DeliveryState.SUCCEEDED,
            url=notification.url,
            status_code=response.status_code,
            elapsed_ms=_elapsed_ms(start),
        )

    if recorder is not None:
        try:
            recorder.log_outcome(outcome)
        except Exception:
            logger.warning("Failed to record webhook outcome", exc_info=True)
    return outcome


async def _send(
    notification: OutboundNotification,
    client: httpx.AsyncClient,
) -> httpx.Response:
    """Single attempt; no retry."""
    try:
        response = await client.post(
            notification.url,
            headers=notification.build_headers(),
            content=notification.content(),
            timeout=notification.timeout,
        )
    except httpx.TimeoutException as e:
        raise DeliveryError(f"Webhook timeout: {e!r}", notification.url) from e
    except httpx.HTTPError as e:
        raise DeliveryError(f"Webhook connection error: {e!r}", notification.url) from e

    if not response.is_success:
        raise DeliveryError(
            f"Webhook returned {response.status_code}",
            notification.url,
            status_code=response.status_code,
        )
    return response


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)


class WebhookNotifier:
    """Schedule one detached webhook POST per request.

    Tasks are kept in a set until they finish so the event loop does not
    garbage-collect them mid-flight. Nothing here is ever awaited by the
    request path.
    """

    def __init__(
        self,
        config: PreparedNotifierConfig,
        client: httpx.AsyncClient,
        recorder: OutcomeRecorder | None = None,
    ) -> None:
        self._config = config
        self._client = client
        self._recorder = recorder
        self._tasks: set[asyncio.Task[DeliveryOutcome]] = set()
        # SCHEDULED, SUCCEEDED and FAILED are running totals; IN_FLIGHT is current
        self._stats = {state: 0 for state in DeliveryState}

    @classmethod
    def from_config(
        cls,
        config: NotifierConfig,
        client: httpx.AsyncClient,
        recorder: OutcomeRecorder | None = None,
    ) -> "WebhookNotifier":
        return cls(prepare_notifier(config), client, recorder)

    @property
    def config(self) -> PreparedNotifierConfig:
        return self._config

    @property
    def pending(self) -> int:
        """Tasks scheduled but not finished yet."""
        return len(self._tasks)

    @property
    def stats(self) -> dict[DeliveryState, int]:
        return dict(self._stats)

    def schedule(self) -> asyncio.Task[DeliveryOutcome]:
        """Start a notification in the background and return immediately."""
        notification = OutboundNotification.from_config(self._config)
        task = asyncio.create_task(self._run(notification))
        self._stats[DeliveryState.SCHEDULED] += 1
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    async def _run(self, notification: OutboundNotification) -> DeliveryOutcome:
        self._stats[DeliveryState.IN_FLIGHT] += 1
        try:
            outcome = await deliver(notification, self._client, self._recorder)
        finally:
            self._stats[DeliveryState.IN_FLIGHT] -= 1
        self._stats[outcome.state] += 1
        return outcome

    def _on_done(self, task: asyncio.Task[DeliveryOutcome]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            logger.debug("Webhook notification cancelled")
            return
        exc = task.exception()
        if exc is not None:
            logger.warning("Webhook notification task crashed", exc_info=exc)

    async def drain(self, timeout: float | None = None) -> None:
        """Wait until every scheduled notification has finished (or timeout)."""
        if not self._tasks:
            return
        await asyncio.wait(set(self._tasks), timeout=timeout)

    async def aclose(self, grace: float = 0.0) -> None:
        """Give in-flight notifications `grace` seconds, then abandon them."""
        if grace > 0:
            await self.drain(grace)
        abandoned = list(self._tasks)
        for task in abandoned:
            task.cancel()
        if abandoned:
            logger.info("Abandoned %d in-flight webhook notifications", len(abandoned))
