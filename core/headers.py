"""Header validation and construction for webhook and upstream requests."""

import re
from typing import Any

from core.exceptions import InvalidHeaderError
from core.request_types import PreparedHeaders

# RFC 9110 token
_HEADER_NAME = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")
# Visible ASCII, space, tab and obs-text (non-ASCII is sent UTF-8 encoded)
_HEADER_VALUE = re.compile(r"[\t\x20-\x7e\x80-\U0010ffff]*")

# RFC 9110 section 7.6.1 plus headers httpx recomputes itself
_HOP_BY_HOP = frozenset(
    {
        "connection",
        "keep-alive",
        "proxy-authenticate",
        "proxy-authorization",
        "proxy-connection",
        "te",
        "trailer",
        "transfer-encoding",
        "upgrade",
        "host",
        "content-length",
    }
)


class HeaderBuilder:
    """Build outbound headers for the webhook and the upstream."""

    def prepare_webhook_headers(self, headers: dict[str, str] | None) -> PreparedHeaders:
        """Validate configured webhook headers once, at setup.

        Raises:
            InvalidHeaderError: On the first malformed name or value, or a
                name repeated with different case.
        """
        if not headers:
            return ()

        seen: set[str] = set()
        prepared = []
        for name, value in headers.items():
            if not _HEADER_NAME.fullmatch(name):
                raise InvalidHeaderError(name, "name is not a valid HTTP token")
            if not isinstance(value, str) or not _HEADER_VALUE.fullmatch(value):
                raise InvalidHeaderError(name, "value contains characters not allowed in a header")
            lowered = name.lower()
            if lowered in seen:
                raise InvalidHeaderError(name, "duplicate header name")
            seen.add(lowered)
            prepared.append((name, value.strip(" \t")))
        return tuple(prepared)

    def build_upstream_headers(self, headers: Any) -> list[tuple[str, str]]:
        """Pass through end-to-end request headers."""
        return [
            (key, value)
            for key, value in headers.items()
            if key.lower() not in _HOP_BY_HOP
        ]

    def build_downstream_headers(self, headers: Any) -> dict[str, str]:
        """Pass through end-to-end upstream response headers."""
        return {
            key: value
            for key, value in headers.items()
            if key.lower() not in _HOP_BY_HOP
        }
