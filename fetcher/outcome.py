"""Retrieval outcome: the terminal value of a retrieval sequence."""

from __future__ import annotations

import codecs
from collections.abc import Iterable
from dataclasses import dataclass, field

from requests.structures import CaseInsensitiveDict
from requests.utils import get_encoding_from_headers

from core.config import FetchConfig


def normalize_headers(pairs: Iterable[tuple[str, str]]) -> CaseInsensitiveDict:
    """Lower-case header names, keeping transport order."""
    headers: CaseInsensitiveDict = CaseInsensitiveDict()
    for name, value in pairs:
        headers[name.lower()] = value
    return headers


def response_charset(headers: CaseInsensitiveDict) -> str:
    """Charset declared by content-type, or the configured default."""
    content_type = headers.get("content-type") or ""
    if "charset" not in content_type.lower():
        return FetchConfig.DEFAULT_TEXT_ENCODING
    encoding = get_encoding_from_headers(headers) or FetchConfig.DEFAULT_TEXT_ENCODING
    try:
        codecs.lookup(encoding)
    except LookupError:
        return FetchConfig.DEFAULT_TEXT_ENCODING
    return encoding


@dataclass(frozen=True, slots=True)
class RetrievalOutcome:
    """Status, headers and body of the response that ended the redirect loop."""

    status_code: int
    status_message: str
    headers: CaseInsensitiveDict = field(default_factory=CaseInsensitiveDict)
    body: bytes = b""
    final_url: str = ""
    redirects_followed: int = 0

    @property
    def is_success(self) -> bool:
        return self.status_code == 200

    @property
    def media_type(self) -> str:
        """Content-type without parameters, lower-cased."""
        return (self.content_type or "").split(";", 1)[0].strip().lower()

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")

    @property
    def etag(self) -> str | None:
        return self.headers.get("etag")

    @property
    def last_modified(self) -> str | None:
        return self.headers.get("last-modified")

    @property
    def encoding(self) -> str:
        return response_charset(self.headers)

    @property
    def text(self) -> str:
        return self.body.decode(self.encoding, errors="replace")
