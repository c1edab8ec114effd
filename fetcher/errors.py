"""Error taxonomy for retrieval sequences."""

from __future__ import annotations

import requests

# Transport failures (refused connections, TLS, DNS, timeouts) are raised by
# requests and propagate unwrapped; this alias lets callers catch them by kind.
TransportError = requests.RequestException


class FetchError(Exception):
    """Base class for failures decided by the fetcher itself."""


class InvalidReferenceError(FetchError, ValueError):
    """Raised when a target string is not an absolute http(s) URI."""

    def __init__(self, reference: str, reason: str) -> None:
        self.reference = reference
        self.reason = reason
        super().__init__(f"invalid reference {reference!r}: {reason}")


class RedirectLoopExceededError(FetchError):
    """Raised when the redirect budget is exhausted."""

    def __init__(self, max_redirects: int, last_url: str) -> None:
        self.max_redirects = max_redirects
        self.last_url = last_url
        super().__init__(f"redirects exceeded {max_redirects} (last hop: {last_url})")


class HttpStatusError(FetchError):
    """Raised when a terminal response is not usable by the caller."""

    def __init__(self, status_code: int, status_message: str, url: str) -> None:
        self.status_code = status_code
        self.status_message = status_message
        self.url = url
        status = f"{status_code} {status_message}".strip()
        super().__init__(f"{status} for {url}")
