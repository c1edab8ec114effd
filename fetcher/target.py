"""Target reference parsing and redirect resolution."""

from __future__ import annotations

from urllib.parse import urljoin, urlsplit

from core.config import FetchConfig
from core.models import TargetReference
from fetcher.errors import InvalidReferenceError


def parse_target(reference: str | TargetReference) -> TargetReference:
    """
    Parse an absolute http(s) URI into a TargetReference.

    Scheme and host are lower-cased, an empty path becomes "/", and the
    fragment is dropped. Already-parsed references are returned unchanged.

    Raises:
        InvalidReferenceError: If the string is not an absolute URI with an
            allowed scheme and a host, or its port is invalid.
    """
    if isinstance(reference, TargetReference):
        return reference
    if not isinstance(reference, str):
        raise InvalidReferenceError(repr(reference), "reference must be a string")

    text = reference.strip()
    try:
        parsed = urlsplit(text)
        port = parsed.port
    except ValueError as exc:
        raise InvalidReferenceError(reference, str(exc)) from exc

    scheme = parsed.scheme.lower()
    if not scheme:
        raise InvalidReferenceError(reference, "not an absolute URI")
    if scheme not in FetchConfig.ALLOWED_PROTOCOLS:
        raise InvalidReferenceError(reference, f"unsupported scheme {scheme!r}")

    host = parsed.hostname or ""
    if not host:
        raise InvalidReferenceError(reference, "missing host")
    if port == 0:
        raise InvalidReferenceError(reference, "port 0 is not addressable")

    return TargetReference(
        scheme=scheme,
        host=host,
        port=port if port is not None else FetchConfig.DEFAULT_PORTS[scheme],
        path=parsed.path or "/",
        query=parsed.query,
    )


def resolve_location(current: TargetReference, location: str) -> TargetReference:
    """Resolve a redirect location (absolute or relative) against the current target."""
    return parse_target(urljoin(current.url, location.strip()))


def canonical_key(reference: str | TargetReference) -> str:
    """Render the cache key for a reference."""
    return parse_target(reference).canonical
