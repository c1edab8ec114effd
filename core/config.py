"""
Default fetch configuration for uri-fetch.

These settings are class-level constants read by the fetcher at call time.
Per-call overrides go through `UriFetcher` keyword arguments; the constants
themselves are not meant to be mutated at runtime.

Design: secure defaults. TLS verification is on and can only be turned off
by an explicit caller opt-in.
"""

from typing import Set, Tuple


class FetchConfig:
    """
    Fetch-layer settings.
    """

    # ========================================================================
    # Redirect Policy
    # ========================================================================

    # Redirect budget: number of hops followed before failing
    MAX_REDIRECTS: int = 6
    """Maximum redirect hops per retrieval sequence."""

    # Allow-list of redirect statuses (unknown 3xx are terminal errors)
    REDIRECT_STATUS_CODES: frozenset[int] = frozenset({301, 302, 303, 307})
    """Statuses that continue the redirect loop."""

    # ========================================================================
    # Transport
    # ========================================================================

    # Protocol whitelist: only http(s)
    ALLOWED_PROTOCOLS: Set[str] = {"http", "https"}
    """Only HTTP(S) allowed."""

    DEFAULT_PORTS: dict[str, int] = {"http": 80, "https": 443}
    """Port used when a reference omits one."""

    # Per-hop timeouts (a chain of N hops may take N x timeout)
    FETCH_CONNECT_TIMEOUT_SECONDS: float = 10.0
    """Seconds to wait for a connection to open."""

    FETCH_READ_TIMEOUT_SECONDS: float = 30.0
    """Seconds to wait for response data."""

    # TLS certificate verification: on unless the caller opts out
    VERIFY_TLS_DEFAULT: bool = True
    """Verify server certificates on https hops."""

    USER_AGENT: str = "uri-fetch/0.1 (+https://github.com/uri-fetch/uri-fetch)"
    """User-Agent header sent on every hop."""

    # ========================================================================
    # Proxy Discovery
    # ========================================================================

    # Checked in order; first non-empty value wins
    PROXY_ENV_VARS: Tuple[str, ...] = ("HTTP_PROXY", "http_proxy")
    """Environment variables consulted for proxy routing."""

    DEFAULT_PROXY_PORT: int = 80
    """Proxy port used when the variable omits one."""

    # ========================================================================
    # Output
    # ========================================================================

    # Content types persisted in binary mode (regex, matched on media type)
    BINARY_CONTENT_TYPE_PATTERNS: Tuple[str, ...] = (
        r"^image/",
        r"^application/(x-)?zip(-compressed)?$",
        r"^application/(x-)?gzip$",
        r"^application/x-g?tar$",
        r"^application/x-bzip2?$",
        r"^application/x-7z-compressed$",
        r"^application/(x-)?rar(-compressed)?$",
        r"^application/(x-)?vnd\.rar$",
        r"^application/x-xz$",
        r"^application/x-compress(ed)?$",
    )
    """Media types written in binary mode by the output writer."""

    DEFAULT_TEXT_ENCODING: str = "utf-8"
    """Encoding used when a text response declares no charset."""

    @classmethod
    def validate(cls) -> None:
        """
        Validate configuration at startup.

        Raises:
            AssertionError: If any constraint is violated.
        """
        assert cls.MAX_REDIRECTS >= 0, "MAX_REDIRECTS must be >= 0"

        assert all(
            300 <= code <= 399 for code in cls.REDIRECT_STATUS_CODES
        ), "REDIRECT_STATUS_CODES must be 3xx"

        assert (
            cls.ALLOWED_PROTOCOLS <= set(cls.DEFAULT_PORTS)
        ), "Every allowed protocol needs a default port"

        assert (
            cls.FETCH_CONNECT_TIMEOUT_SECONDS > 0
            and cls.FETCH_READ_TIMEOUT_SECONDS > 0
        ), "Timeouts must be > 0"

        assert cls.VERIFY_TLS_DEFAULT is True, "VERIFY_TLS_DEFAULT must stay True"

        assert cls.PROXY_ENV_VARS, "PROXY_ENV_VARS must not be empty"


# Validate at module import time
FetchConfig.validate()
