"""Transport stubs shared by the fetcher tests."""

from __future__ import annotations

import json


class DummyResponse:
    """Minimal response object for exercising fetcher logic."""

    def __init__(
        self,
        status_code: int,
        headers: dict[str, str] | None = None,
        body: bytes = b"",
        reason: str = "",
    ) -> None:
        self.status_code = status_code
        self.headers = headers or {}
        self.content = body
        self.reason = reason
        self.closed = False

    def close(self) -> None:
        self.closed = True


class DummySession:
    """Sequence-driven session for deterministic HTTP behavior."""

    def __init__(self, responses: list[object] | None = None) -> None:
        self.responses = list(responses or [])
        self.calls: list[tuple[str, dict[str, object]]] = []

    @property
    def urls(self) -> list[str]:
        return [url for url, _ in self.calls]

    def get(self, url: str, **kwargs: object):
        self.calls.append((url, kwargs))
        if not self.responses:
            raise AssertionError("No more stubbed responses available")
        next_item = self.responses.pop(0)
        if isinstance(next_item, Exception):
            raise next_item
        return next_item


def redirect(location: str | None, status_code: int = 302) -> DummyResponse:
    """Build a redirect response, optionally without a location header."""
    headers = {"Location": location} if location is not None else {}
    return DummyResponse(status_code, headers=headers, reason="Found")


def ok(body: bytes = b"OK", content_type: str = "text/html", **headers: str) -> DummyResponse:
    """Build a 200 response."""
    return DummyResponse(
        200,
        headers={"Content-Type": content_type, **headers},
        body=body,
        reason="OK",
    )


def json_lines(captured: str) -> list[dict[str, object]]:
    """Decode structured log lines."""
    lines = [line for line in captured.splitlines() if line.strip()]
    return [json.loads(line) for line in lines]
