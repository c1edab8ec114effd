"""
Core Pydantic models for uri-fetch.

Design principles:
- Value objects are frozen: a redirect hop replaces a target, never edits it
- Absence is explicit (no "cached but empty" entries, no null proxy fields)
- Deterministic rendering for cache keys and logs
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Optional
from urllib.parse import quote
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ============================================================================
# Enums
# ============================================================================

class FetchErrorCode(str, Enum):
    """Why did a retrieval sequence fail?"""
    INVALID_REFERENCE = "INVALID_REFERENCE"
    REDIRECT_LIMIT = "REDIRECT_LIMIT"
    HTTP_STATUS = "HTTP_STATUS"
    TIMEOUT = "TIMEOUT"
    TRANSPORT_ERROR = "TRANSPORT_ERROR"  # Connection refused, TLS, DNS, ...


# ============================================================================
# Target Reference
# ============================================================================

class TargetReference(BaseModel):
    """
    A resolved HTTP(S) address.

    Example:
      scheme = "https"
      host = "example.com"
      port = 443
      path = "/docs"
      query = "page=2"
      canonical = "https://example.com:443/docs?page=2"
      url = "https://example.com/docs?page=2"
    """
    model_config = ConfigDict(frozen=True)

    scheme: str
    host: str
    port: int = Field(ge=1, le=65535)
    path: str = "/"
    query: str = ""

    @property
    def is_tls(self) -> bool:
        return self.scheme == "https"

    @property
    def netloc(self) -> str:
        host = f"[{self.host}]" if ":" in self.host else self.host
        return f"{host}:{self.port}"

    @property
    def request_uri(self) -> str:
        """Path plus query, as sent on the request line."""
        return f"{self.path}?{self.query}" if self.query else self.path

    @property
    def canonical(self) -> str:
        """Cache-key rendering with an explicit port."""
        return f"{self.scheme}://{self.netloc}{self.request_uri}"

    @property
    def url(self) -> str:
        """Request URL, omitting the scheme's default port."""
        default_port = 443 if self.is_tls else 80
        if self.port == default_port:
            host = f"[{self.host}]" if ":" in self.host else self.host
            return f"{self.scheme}://{host}{self.request_uri}"
        return f"{self.scheme}://{self.netloc}{self.request_uri}"

    def __str__(self) -> str:
        return self.canonical


# ============================================================================
# Proxy Configuration
# ============================================================================

class ProxyConfig(BaseModel):
    """Proxy routing resolved once per retrieval sequence."""
    model_config = ConfigDict(frozen=True)

    host: str
    port: int = Field(ge=1, le=65535)
    user: Optional[str] = None
    password: Optional[str] = None

    @property
    def enabled(self) -> bool:
        return True

    @property
    def url(self) -> str:
        credentials = ""
        if self.user is not None:
            credentials = quote(self.user, safe="")
            if self.password is not None:
                credentials += ":" + quote(self.password, safe="")
            credentials += "@"
        return f"http://{credentials}{self.host}:{self.port}"

    def as_requests_proxies(self) -> dict[str, str]:
        return {"http": self.url, "https": self.url}


class DirectConnection(BaseModel):
    """Explicit "no proxy" routing."""
    model_config = ConfigDict(frozen=True)

    @property
    def enabled(self) -> bool:
        return False

    def as_requests_proxies(self) -> dict[str, str]:
        return {}


NO_PROXY = DirectConnection()


# ============================================================================
# Cache Entry
# ============================================================================

class CacheEntry(BaseModel):
    """
    Conditional-request validators for one resource.

    An entry with both validators absent is equivalent to no entry.
    """
    model_config = ConfigDict(frozen=True)

    etag: Optional[str] = None
    last_modified: Optional[str] = None

    @field_validator("etag", "last_modified")
    @classmethod
    def blank_is_absent(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v

    @property
    def is_empty(self) -> bool:
        return self.etag is None and self.last_modified is None


# ============================================================================
# Fetch Logging
# ============================================================================

class FetchLog(BaseModel):
    """
    Log entry for a single retrieval sequence.
    """
    id: str = Field(default_factory=lambda: str(uuid4()))
    url: str
    final_url: Optional[str] = None

    status_code: Optional[int] = None  # Terminal HTTP status
    redirects_followed: int = 0
    latency_ms: Optional[int] = None  # Whole sequence, all hops
    bytes_received: Optional[int] = None

    error_code: Optional[FetchErrorCode] = None

    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    run_id: Optional[str] = None
