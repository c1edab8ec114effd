"""Output writer: persist a successful body in binary or text mode."""

from __future__ import annotations

import re
from enum import Enum
from pathlib import Path

from core.config import FetchConfig
from fetcher.errors import HttpStatusError
from fetcher.outcome import RetrievalOutcome


_BINARY_PATTERNS = [re.compile(pattern) for pattern in FetchConfig.BINARY_CONTENT_TYPE_PATTERNS]


class WriteMode(str, Enum):
    """How a body is persisted."""
    BINARY = "binary"
    TEXT = "text"


def infer_write_mode(content_type: str | None) -> WriteMode:
    """Binary for images and archives, text for everything else."""
    media_type = (content_type or "").split(";", 1)[0].strip().lower()
    if any(pattern.search(media_type) for pattern in _BINARY_PATTERNS):
        return WriteMode.BINARY
    return WriteMode.TEXT


def write_outcome(
    outcome: RetrievalOutcome,
    destination: str | Path,
    mode: WriteMode | str | None = None,
) -> WriteMode:
    """
    Write a terminal-success body to `destination` and return the mode used.

    An explicit `mode` overrides the one inferred from content-type. Text mode
    decodes the body with the response charset and writes it with the same
    encoding; undecodable bytes round-trip through `surrogateescape`, so the
    file always holds the full body.

    Raises:
        HttpStatusError: If the outcome is not a 200.
        OSError: If the destination cannot be written.
    """
    if not outcome.is_success:
        raise HttpStatusError(outcome.status_code, outcome.status_message, outcome.final_url)

    selected = WriteMode(mode) if mode is not None else infer_write_mode(outcome.content_type)
    path = Path(destination)
    path.parent.mkdir(parents=True, exist_ok=True)

    if selected is WriteMode.BINARY:
        with open(path, "wb") as handle:
            handle.write(outcome.body)
    else:
        encoding = outcome.encoding
        with open(path, "w", encoding=encoding, errors="surrogateescape", newline="") as handle:
            handle.write(outcome.body.decode(encoding, errors="surrogateescape"))
    return selected
