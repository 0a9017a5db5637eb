"""Custom exception hierarchy for the request notifier."""


class NotifierError(Exception):
    """Base exception for all notifier errors."""


class ConfigurationError(NotifierError):
    """Raised when configuration is missing or invalid."""


class InvalidUrlError(ConfigurationError):
    """Raised when the webhook URL is not a usable http(s) URL."""

    def __init__(self, url: str, reason: str = "not a valid http(s) URL") -> None:
        super().__init__(f"Invalid webhook URL {url!r}: {reason}")
        self.url = url
        self.reason = reason


class InvalidHeaderError(ConfigurationError):
    """Raised when a configured webhook header is malformed.

    Attributes:
        name: Header name as configured
        reason: Why the header was rejected
    """

    def __init__(self, name: str, reason: str) -> None:
        super().__init__(f"Invalid webhook header {name!r}: {reason}")
        self.name = name
        self.reason = reason


class DeliveryError(NotifierError):
    """Raised inside a notification task when the webhook call fails.

    Attributes:
        url: Webhook URL
        status_code: HTTP status returned by the webhook (None on transport errors)
    """

    def __init__(
        self,
        message: str,
        url: str,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class UpstreamError(NotifierError):
    """Raised when the proxied upstream cannot be reached."""


class UpstreamTimeoutError(UpstreamError):
    """Raised when an upstream request times out."""


class UpstreamConnectionError(UpstreamError):
    """Raised when unable to connect to the upstream."""
