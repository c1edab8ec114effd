"""Fetcher subsystem: redirect-following retrieval with conditional requests."""

from fetcher.cache import InMemoryValidatorCache, ValidatorCache, remember_validators
from fetcher.classify import ResponseAction, classify_status
from fetcher.errors import (
    FetchError,
    HttpStatusError,
    InvalidReferenceError,
    RedirectLoopExceededError,
    TransportError,
)
from fetcher.http import UriFetcher, retrieve
from fetcher.logging import emit_event, emit_fetch_log
from fetcher.outcome import RetrievalOutcome
from fetcher.proxy import resolve_proxy
from fetcher.target import parse_target, resolve_location
from fetcher.writer import WriteMode, infer_write_mode, write_outcome

__all__ = [
    "InMemoryValidatorCache",
    "ValidatorCache",
    "remember_validators",
    "ResponseAction",
    "classify_status",
    "FetchError",
    "HttpStatusError",
    "InvalidReferenceError",
    "RedirectLoopExceededError",
    "TransportError",
    "UriFetcher",
    "retrieve",
    "emit_event",
    "emit_fetch_log",
    "RetrievalOutcome",
    "resolve_proxy",
    "parse_target",
    "resolve_location",
    "WriteMode",
    "infer_write_mode",
    "write_outcome",
]
