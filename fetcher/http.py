"""HTTP retrieval with bounded redirect following and conditional requests."""

from __future__ import annotations

import time
from collections.abc import Callable, Mapping
from pathlib import Path

import requests

from core.config import FetchConfig
from core.models import DirectConnection, FetchErrorCode, FetchLog, ProxyConfig, TargetReference
from fetcher.cache import ValidatorCache, conditional_headers, remember_validators
from fetcher.classify import ResponseAction, classify_status
from fetcher.errors import HttpStatusError, InvalidReferenceError, RedirectLoopExceededError
from fetcher.logging import emit_event, emit_fetch_log
from fetcher.outcome import RetrievalOutcome, normalize_headers
from fetcher.proxy import resolve_proxy
from fetcher.target import parse_target, resolve_location
from fetcher.writer import WriteMode, write_outcome

EventHook = Callable[[str, dict[str, object]], None]


def _new_session() -> requests.Session:
    """Session that never reads proxy settings from the environment on its own."""
    session = requests.Session()
    session.trust_env = False
    return session


def _default_timeout() -> tuple[float, float]:
    """Per-hop (connect, read) timeouts."""
    return (FetchConfig.FETCH_CONNECT_TIMEOUT_SECONDS, FetchConfig.FETCH_READ_TIMEOUT_SECONDS)


def _request_once(
    session: requests.Session,
    target: TargetReference,
    headers: dict[str, str],
    proxy: ProxyConfig | DirectConnection,
    verify_tls: bool,
    timeout: tuple[float, float],
    redirects_followed: int,
) -> RetrievalOutcome:
    """Issue one GET and read the full response before returning."""
    response = session.get(
        target.url,
        headers=headers,
        proxies=proxy.as_requests_proxies(),
        verify=verify_tls,
        timeout=timeout,
        allow_redirects=False,
    )
    try:
        body = response.content or b""
        return RetrievalOutcome(
            status_code=response.status_code,
            status_message=response.reason or "",
            headers=normalize_headers(response.headers.items()),
            body=body,
            final_url=target.url,
            redirects_followed=redirects_followed,
        )
    finally:
        response.close()


def _follow_redirects(
    session: requests.Session,
    target: TargetReference,
    proxy: ProxyConfig | DirectConnection,
    cache: ValidatorCache | None,
    consult_cache: bool,
    user_agent: str,
    verify_tls: bool,
    timeout: tuple[float, float],
    max_redirects: int,
    emit: EventHook,
) -> RetrievalOutcome:
    """Drive single requests until a terminal response or an exhausted budget."""
    budget = max_redirects
    current = target
    followed = 0

    while True:
        headers = {"User-Agent": user_agent}
        if consult_cache and cache is not None:
            validators = conditional_headers(cache.lookup(current))
            if validators:
                headers.update(validators)
                emit(
                    "conditional_request",
                    {"url": current.url, "validators": sorted(validators)},
                )

        if current.is_tls and not verify_tls:
            emit("insecure_tls", {"url": current.url, "level": "warning"})

        outcome = _request_once(
            session,
            current,
            headers=headers,
            proxy=proxy,
            verify_tls=verify_tls,
            timeout=timeout,
            redirects_followed=followed,
        )

        if classify_status(outcome.status_code).is_terminal:
            return outcome

        location = outcome.headers.get("location")
        if not location:
            # A redirect without a target ends the loop as an error.
            return outcome

        if budget == 0:
            raise RedirectLoopExceededError(max_redirects, current.url)
        budget -= 1

        next_target = resolve_location(current, location)
        emit(
            "redirect_followed",
            {
                "from_url": current.url,
                "to_url": next_target.url,
                "status_code": outcome.status_code,
                "remaining_budget": budget,
            },
        )
        current = next_target
        followed += 1


def retrieve(
    url: str | TargetReference,
    session: requests.Session | None = None,
    cache: ValidatorCache | None = None,
    use_cache: bool | None = None,
    proxy: ProxyConfig | DirectConnection | None = None,
    environ: Mapping[str, str] | None = None,
    verify_tls: bool = FetchConfig.VERIFY_TLS_DEFAULT,
    timeout: tuple[float, float] | None = None,
    user_agent: str = FetchConfig.USER_AGENT,
    max_redirects: int = FetchConfig.MAX_REDIRECTS,
    event_hook: EventHook | None = None,
) -> RetrievalOutcome:
    """
    Retrieve one resource, following allow-listed redirects.

    The proxy is resolved once (from `environ`, defaulting to the process
    environment) unless passed explicitly. The cache is consulted when
    `use_cache` is True, or when it is None and the cache is enabled.

    Returns:
        The terminal RetrievalOutcome (success, not-modified, or error).

    Raises:
        InvalidReferenceError: If `url` or a redirect location is not http(s).
        ValueError: If `max_redirects` is negative.
        RedirectLoopExceededError: If more than `max_redirects` hops are needed.
        requests.RequestException: Transport failures, unwrapped.
    """
    if max_redirects < 0:
        raise ValueError("max_redirects must be >= 0")

    target = parse_target(url)
    routing = proxy if proxy is not None else resolve_proxy(environ)
    consult_cache = cache is not None and (cache.enabled if use_cache is None else use_cache)

    def _emit(event_type: str, payload: dict[str, object]) -> None:
        if event_hook:
            event_hook(event_type, payload)

    return _follow_redirects(
        session or _new_session(),
        target,
        proxy=routing,
        cache=cache,
        consult_cache=consult_cache,
        user_agent=user_agent,
        verify_tls=verify_tls,
        timeout=timeout or _default_timeout(),
        max_redirects=max_redirects,
        emit=_emit,
    )


def _error_code_for(exc: Exception) -> FetchErrorCode:
    if isinstance(exc, InvalidReferenceError):
        return FetchErrorCode.INVALID_REFERENCE
    if isinstance(exc, RedirectLoopExceededError):
        return FetchErrorCode.REDIRECT_LIMIT
    if isinstance(exc, requests.Timeout):
        return FetchErrorCode.TIMEOUT
    return FetchErrorCode.TRANSPORT_ERROR


class UriFetcher:
    """Retrieval worker backed by `retrieve` + structured logging."""

    def __init__(
        self,
        session: requests.Session | None = None,
        cache: ValidatorCache | None = None,
        environ: Mapping[str, str] | None = None,
        verify_tls: bool = FetchConfig.VERIFY_TLS_DEFAULT,
        timeout: tuple[float, float] | None = None,
        user_agent: str = FetchConfig.USER_AGENT,
        max_redirects: int = FetchConfig.MAX_REDIRECTS,
        record_validators: bool = False,
        log_fetches: bool = True,
        event_logger: EventHook | None = None,
    ) -> None:
        """Initialize transport settings, the validator cache, and event sinks.

        `verify_tls=False` disables certificate checks on every https hop and
        weakens transport security; it is never enabled implicitly.
        """
        if max_redirects < 0:
            raise ValueError("max_redirects must be >= 0")

        self.session = session or _new_session()
        self.cache = cache
        self.environ = environ
        self.verify_tls = verify_tls
        self.timeout = timeout or _default_timeout()
        self.user_agent = user_agent
        self.max_redirects = max_redirects
        self.record_validators = record_validators
        self.log_fetches = log_fetches
        self.event_logger = event_logger or self._default_event_logger

    @staticmethod
    def _default_event_logger(event_type: str, payload: dict[str, object]) -> None:
        """Default event sink writing structured JSON to stderr."""
        emit_event(event_type, **payload)

    def retrieve(
        self,
        url: str | TargetReference,
        use_cache: bool | None = None,
        run_id: str | None = None,
    ) -> RetrievalOutcome:
        """Run one retrieval sequence and emit its fetch log."""
        start = time.monotonic()
        url_text = url.url if isinstance(url, TargetReference) else str(url)

        def _log(**fields: object) -> None:
            if self.log_fetches:
                emit_fetch_log(
                    FetchLog(
                        url=url_text,
                        run_id=run_id,
                        latency_ms=int((time.monotonic() - start) * 1000),
                        **fields,
                    )
                )

        try:
            outcome = retrieve(
                url,
                session=self.session,
                cache=self.cache,
                use_cache=use_cache,
                environ=self.environ,
                verify_tls=self.verify_tls,
                timeout=self.timeout,
                user_agent=self.user_agent,
                max_redirects=self.max_redirects,
                event_hook=self.event_logger,
            )
        except (InvalidReferenceError, RedirectLoopExceededError, requests.RequestException) as exc:
            _log(error_code=_error_code_for(exc))
            raise

        action = classify_status(outcome.status_code)
        _log(
            final_url=outcome.final_url,
            status_code=outcome.status_code,
            redirects_followed=outcome.redirects_followed,
            bytes_received=len(outcome.body),
            error_code=FetchErrorCode.HTTP_STATUS
            if action in {ResponseAction.ERROR, ResponseAction.REDIRECT}
            else None,
        )

        if self.record_validators and self.cache is not None and outcome.is_success:
            if remember_validators(self.cache, outcome):
                self.event_logger(
                    "validators_recorded",
                    {"url": outcome.final_url, "etag": outcome.etag, "last_modified": outcome.last_modified},
                )
        return outcome

    def fetch(
        self,
        url: str | TargetReference,
        use_cache: bool | None = None,
        run_id: str | None = None,
    ) -> RetrievalOutcome:
        """Return a success or not-modified outcome; raise HttpStatusError otherwise."""
        outcome = self.retrieve(url, use_cache=use_cache, run_id=run_id)
        if classify_status(outcome.status_code) not in {
            ResponseAction.SUCCESS,
            ResponseAction.NOT_MODIFIED,
        }:
            raise HttpStatusError(outcome.status_code, outcome.status_message, outcome.final_url)
        return outcome

    def read(
        self,
        url: str | TargetReference,
        binary: bool = False,
        use_cache: bool | None = False,
        run_id: str | None = None,
    ) -> str | bytes:
        """Return the body of a 200 response as text (or bytes when `binary`)."""
        outcome = self.retrieve(url, use_cache=use_cache, run_id=run_id)
        if not outcome.is_success:
            raise HttpStatusError(outcome.status_code, outcome.status_message, outcome.final_url)
        return outcome.body if binary else outcome.text

    def copy(
        self,
        url: str | TargetReference,
        destination: str | Path,
        mode: WriteMode | str | None = None,
        use_cache: bool | None = None,
        run_id: str | None = None,
    ) -> RetrievalOutcome:
        """Write a 200 body to `destination`; a 304 leaves the destination untouched."""
        outcome = self.fetch(url, use_cache=use_cache, run_id=run_id)
        if outcome.is_success:
            write_outcome(outcome, destination, mode=mode)
        return outcome
