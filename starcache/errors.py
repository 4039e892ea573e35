"""Exceptions raised across the fetch-through path."""


class StarcacheError(Exception):
    """Base exception for the service."""


class UpstreamError(StarcacheError):
    """The upstream was unreachable, answered non-2xx, or sent a malformed body."""

    def __init__(self, url: str, reason: str, status_code: int | None = None):
        self.url = url
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"{url}: {reason}")


class FallbackExhausted(UpstreamError):
    """Upstream failed and the fallback snapshot had nothing to offer."""

    def __init__(self, original: UpstreamError):
        super().__init__(original.url, f"no fallback for failed fetch ({original.reason})", original.status_code)
        self.original = original
