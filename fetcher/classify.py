"""Response classification: status code to loop action."""

from __future__ import annotations

from enum import Enum

from core.config import FetchConfig


class ResponseAction(str, Enum):
    """What the request loop does with a response."""
    SUCCESS = "terminal-success"
    NOT_MODIFIED = "terminal-not-modified"
    REDIRECT = "continue-redirect"
    ERROR = "terminal-error"

    @property
    def is_terminal(self) -> bool:
        return self is not ResponseAction.REDIRECT


def classify_status(status_code: int) -> ResponseAction:
    """Map a status code to an action; redirects are an allow-list, not any 3xx."""
    if status_code == 200:
        return ResponseAction.SUCCESS
    if status_code == 304:
        return ResponseAction.NOT_MODIFIED
    if status_code in FetchConfig.REDIRECT_STATUS_CODES:
        return ResponseAction.REDIRECT
    return ResponseAction.ERROR
