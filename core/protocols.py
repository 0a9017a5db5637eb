"""Shared protocol definitions."""

from typing import Protocol

from core.request_types import DeliveryOutcome


class OutcomeRecorder(Protocol):
    """Protocol for observing requests and notification outcomes (Dashboard)."""

    def log_request(self, method: str, path: str) -> None: ...
    def log_outcome(self, outcome: DeliveryOutcome) -> None: ...
