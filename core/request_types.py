"""Shared request data types."""

from dataclasses import dataclass
from enum import Enum

import httpx

PreparedHeaders = tuple[tuple[str, str], ...]


class DeliveryState(str, Enum):
    """Lifecycle of a single notification attempt."""

    SCHEDULED = "scheduled"
    IN_FLIGHT = "in_flight"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class PreparedNotifierConfig:
    """Validated webhook target, built once at setup."""

    url: str
    headers: PreparedHeaders
    body: str | None
    timeout: float


@dataclass(frozen=True)
class OutboundNotification:
    """Data for one webhook POST."""

    url: str
    headers: PreparedHeaders
    body: str | None
    timeout: float

    @classmethod
    def from_config(cls, config: PreparedNotifierConfig) -> "OutboundNotification":
        return cls(config.url, config.headers, config.body, config.timeout)

    def build_headers(self) -> httpx.Headers:
        """Fresh header object for this dispatch only."""
        return httpx.Headers([(name, value.encode("utf-8")) for name, value in self.headers])

    def content(self) -> bytes:
        return self.body.encode("utf-8") if self.body is not None else b""


@dataclass(frozen=True)
class DeliveryOutcome:
    """Result of a finished notification attempt."""

    state: DeliveryState
    url: str
    status_code: int | None = None
    error: str | None = None
    elapsed_ms: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.state is DeliveryState.SUCCEEDED
