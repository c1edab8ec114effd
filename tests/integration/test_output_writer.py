"""Tests for write-mode inference and body persistence."""

from __future__ import annotations

import pytest

from fetcher.errors import HttpStatusError
from fetcher.outcome import RetrievalOutcome, normalize_headers
from fetcher.writer import WriteMode, infer_write_mode, write_outcome


def _outcome(
    body: bytes,
    content_type: str | None,
    status_code: int = 200,
) -> RetrievalOutcome:
    headers = [("Content-Type", content_type)] if content_type else []
    return RetrievalOutcome(
        status_code=status_code,
        status_message="OK" if status_code == 200 else "Error",
        headers=normalize_headers(headers),
        body=body,
        final_url="https://example.com/resource",
    )


@pytest.mark.unit
@pytest.mark.parametrize(
    ("content_type", "expected"),
    [
        ("image/png", WriteMode.BINARY),
        ("IMAGE/JPEG", WriteMode.BINARY),
        ("image/svg+xml; charset=utf-8", WriteMode.BINARY),
        ("application/zip", WriteMode.BINARY),
        ("application/x-zip-compressed", WriteMode.BINARY),
        ("application/gzip", WriteMode.BINARY),
        ("application/x-gzip", WriteMode.BINARY),
        ("application/x-tar", WriteMode.BINARY),
        ("application/x-bzip2", WriteMode.BINARY),
        ("application/x-7z-compressed", WriteMode.BINARY),
        ("application/vnd.rar", WriteMode.BINARY),
        ("text/html", WriteMode.TEXT),
        ("text/html; charset=utf-8", WriteMode.TEXT),
        ("application/json", WriteMode.TEXT),
        ("application/zipper", WriteMode.TEXT),
        (None, WriteMode.TEXT),
        ("", WriteMode.TEXT),
    ],
)
def test_infer_write_mode(content_type, expected):
    assert infer_write_mode(content_type) is expected


@pytest.mark.integration
def test_image_body_written_as_binary(tmp_path):
    body = b"\x89PNG\r\n\x1a\n\x00\x01"
    destination = tmp_path / "logo.png"

    mode = write_outcome(_outcome(body, "image/png"), destination)

    assert mode is WriteMode.BINARY
    assert destination.read_bytes() == body


@pytest.mark.integration
def test_html_body_written_as_text_with_declared_charset(tmp_path):
    destination = tmp_path / "page.html"

    mode = write_outcome(_outcome(b"caf\xe9", "text/html; charset=iso-8859-1"), destination)

    assert mode is WriteMode.TEXT
    assert destination.read_text(encoding="iso-8859-1") == "café"


@pytest.mark.integration
def test_text_mode_keeps_line_endings(tmp_path):
    destination = tmp_path / "notes.txt"

    write_outcome(_outcome(b"a\r\nb\n", "text/plain"), destination)

    assert destination.read_bytes() == b"a\r\nb\n"


@pytest.mark.integration
@pytest.mark.parametrize("override", [WriteMode.BINARY, "binary"])
def test_explicit_mode_overrides_inference(tmp_path, override):
    body = "héllo".encode("utf-16")
    destination = tmp_path / "raw.bin"

    mode = write_outcome(_outcome(body, "text/html"), destination, mode=override)

    assert mode is WriteMode.BINARY
    assert destination.read_bytes() == body


@pytest.mark.integration
def test_parent_directories_are_created(tmp_path):
    destination = tmp_path / "nested" / "dir" / "file.txt"

    write_outcome(_outcome(b"ok", "text/plain"), destination)

    assert destination.read_text(encoding="utf-8") == "ok"


@pytest.mark.integration
@pytest.mark.parametrize("status_code", [304, 404, 500])
def test_non_success_outcome_is_never_written(tmp_path, status_code):
    destination = tmp_path / "out.txt"

    with pytest.raises(HttpStatusError) as excinfo:
        write_outcome(_outcome(b"error page", "text/html", status_code=status_code), destination)

    assert excinfo.value.status_code == status_code
    assert not destination.exists()


@pytest.mark.integration
def test_write_failure_propagates(tmp_path):
    with pytest.raises(IsADirectoryError):
        write_outcome(_outcome(b"ok", "text/plain"), tmp_path)


@pytest.mark.unit
def test_invalid_mode_is_rejected(tmp_path):
    with pytest.raises(ValueError):
        write_outcome(_outcome(b"ok", "text/plain"), tmp_path / "x", mode="hex")


@pytest.mark.integration
@pytest.mark.parametrize(
    ("body", "content_type"),
    [
        (b"%PDF-1.4\n\xe2\xe3\xcf\xd3\n\xff\x00\x80", "application/pdf"),
        (b"\x00\x01\xfe\xff", "application/octet-stream"),
        (b"caf\xe9 au lait", "text/html; charset=utf-8"),
    ],
)
def test_text_mode_preserves_undecodable_bytes(tmp_path, body, content_type):
    destination = tmp_path / "download"

    mode = write_outcome(_outcome(body, content_type), destination)

    assert mode is WriteMode.TEXT
    assert destination.read_bytes() == body
