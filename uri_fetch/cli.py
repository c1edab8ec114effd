"""Minimal CLI entrypoint for uri-fetch."""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any
from typing import Sequence
from uuid import uuid4

import requests

from core.models import CacheEntry
from core.structured_logging import emit_json_event
from fetcher import (
    HttpStatusError,
    InMemoryValidatorCache,
    InvalidReferenceError,
    RedirectLoopExceededError,
    UriFetcher,
    WriteMode,
)

EXIT_OK = 0
EXIT_HTTP_STATUS = 1
EXIT_INVALID = 2
EXIT_TRANSPORT = 3
EXIT_LOCAL_IO = 4


def _resolve_command_run_id(args: argparse.Namespace) -> str:
    """Resolve run_id from CLI args or create one for command-level tracing."""
    explicit = getattr(args, "run_id", None)
    if explicit:
        return str(explicit)
    return str(uuid4())


def _emit_cli_event(
    event_type: str,
    *,
    run_id: str,
    command: str,
    **payload: Any,
) -> str:
    """Emit one structured CLI event line with standard fields."""
    return emit_json_event(
        event_type=event_type,
        run_id=run_id,
        command=command,
        **payload,
    )


def _build_fetcher(args: argparse.Namespace) -> UriFetcher:
    """Create a fetcher, seeding the validator cache from --etag/--last-modified."""
    cache = InMemoryValidatorCache()
    entry = CacheEntry(etag=args.etag, last_modified=args.last_modified)
    if not entry.is_empty:
        cache.upsert(args.url, entry)
    return UriFetcher(cache=cache, verify_tls=not args.insecure)


def _cmd_get(args: argparse.Namespace) -> int:
    """Print a resource body to stdout; a 304 prints nothing."""
    run_id = _resolve_command_run_id(args)
    outcome = _build_fetcher(args).fetch(args.url, run_id=run_id)
    if outcome.is_success:
        if args.binary:
            sys.stdout.buffer.write(outcome.body)
            sys.stdout.buffer.flush()
        else:
            sys.stdout.write(outcome.text)
            sys.stdout.flush()
    _emit_cli_event(
        "cli_get_completed",
        run_id=run_id,
        command="get",
        url=args.url,
        final_url=outcome.final_url,
        status_code=outcome.status_code,
        bytes_received=len(outcome.body),
    )
    return EXIT_OK


def _cmd_copy(args: argparse.Namespace) -> int:
    """Write a resource body to a destination path."""
    run_id = _resolve_command_run_id(args)
    outcome = _build_fetcher(args).copy(
        args.url,
        args.destination,
        mode=args.mode,
        run_id=run_id,
    )
    _emit_cli_event(
        "cli_copy_completed",
        run_id=run_id,
        command="copy",
        url=args.url,
        destination=args.destination,
        status_code=outcome.status_code,
        written=outcome.is_success,
    )
    return EXIT_OK


def _cmd_head(args: argparse.Namespace) -> int:
    """Print the terminal status and headers as JSON."""
    run_id = _resolve_command_run_id(args)
    outcome = _build_fetcher(args).retrieve(args.url, run_id=run_id)
    payload = {
        "final_url": outcome.final_url,
        "status_code": outcome.status_code,
        "status_message": outcome.status_message,
        "redirects_followed": outcome.redirects_followed,
        "headers": dict(outcome.headers.items()),
    }
    sys.stdout.write(json.dumps(payload, indent=2, ensure_ascii=False) + "\n")
    _emit_cli_event(
        "cli_head_completed",
        run_id=run_id,
        command="head",
        url=args.url,
        status_code=outcome.status_code,
    )
    return EXIT_OK


def _add_fetch_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("url", help="Absolute http(s) URI")
    parser.add_argument("--etag", help="Send If-None-Match with this validator")
    parser.add_argument("--last-modified", help="Send If-Modified-Since with this validator")
    parser.add_argument(
        "--insecure",
        action="store_true",
        help="Disable TLS certificate verification (reduces security)",
    )
    parser.add_argument("--run-id", help="Optional explicit run ID for logging")


def build_parser() -> argparse.ArgumentParser:
    """Create argument parser for the uri-fetch CLI."""
    parser = argparse.ArgumentParser(
        prog="uri-fetch",
        description="Retrieve one HTTP(S) resource with redirect and cache-validator support",
    )
    parser.add_argument("--version", action="version", version="uri-fetch 0.1.0")

    subparsers = parser.add_subparsers(dest="command")

    get_parser = subparsers.add_parser("get", help="Print a resource body to stdout")
    _add_fetch_arguments(get_parser)
    get_parser.add_argument("--binary", action="store_true", help="Write raw bytes")
    get_parser.set_defaults(func=_cmd_get)

    copy_parser = subparsers.add_parser("copy", help="Write a resource body to a file")
    _add_fetch_arguments(copy_parser)
    copy_parser.add_argument("destination", help="Destination file path")
    copy_parser.add_argument(
        "--mode",
        choices=[mode.value for mode in WriteMode],
        help="Override the write mode inferred from content-type",
    )
    copy_parser.set_defaults(func=_cmd_copy)

    head_parser = subparsers.add_parser("head", help="Print terminal status and headers as JSON")
    _add_fetch_arguments(head_parser)
    head_parser.set_defaults(func=_cmd_head)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Execute CLI and return process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return EXIT_OK

    try:
        return int(args.func(args))
    except Exception as exc:
        run_id = _resolve_command_run_id(args)
        if isinstance(exc, HttpStatusError):
            exit_code = EXIT_HTTP_STATUS
        elif isinstance(exc, (InvalidReferenceError, RedirectLoopExceededError)):
            exit_code = EXIT_INVALID
        elif isinstance(exc, requests.RequestException):
            exit_code = EXIT_TRANSPORT
        elif isinstance(exc, OSError):
            # requests exceptions are OSErrors too, so this branch follows them.
            exit_code = EXIT_LOCAL_IO
        else:
            # Anything unclassified is a generic failure.
            exit_code = EXIT_HTTP_STATUS
        _emit_cli_event(
            "cli_error",
            run_id=run_id,
            level="error",
            command=str(getattr(args, "command", "unknown")),
            error_type=type(exc).__name__,
            error=str(exc),
            exit_code=exit_code,
        )
        return exit_code


def cli() -> None:
    """Console-script entrypoint."""
    raise SystemExit(main())


if __name__ == "__main__":
    raise SystemExit(main())
