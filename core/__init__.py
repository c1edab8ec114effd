"""Core module for uri-fetch."""

from core.models import (
    CacheEntry,
    DirectConnection,
    FetchErrorCode,
    FetchLog,
    NO_PROXY,
    ProxyConfig,
    TargetReference,
)
from core.config import FetchConfig

__all__ = [
    "CacheEntry",
    "DirectConnection",
    "FetchErrorCode",
    "FetchLog",
    "NO_PROXY",
    "ProxyConfig",
    "TargetReference",
    "FetchConfig",
]
