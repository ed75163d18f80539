"""Tests for multipart/form-data body construction."""

from __future__ import annotations

import re
import typing as t

import pytest

from oiapi import build_multipart
from oiapi.multipart import mime_type

if t.TYPE_CHECKING:
    from pathlib import Path


class _FakeImage:
    """Stand-in for an in-memory image such as a Pillow ``Image``."""

    format = "PNG"


def test_plain_fields_in_order() -> None:
    """Test that N fields give N opening delimiters and one closing line."""
    body = build_multipart({"first": "1", "second": 2, "third": "three"}, boundary="XyZ")

    expected_delimiters = 4
    assert body.count(b"--XyZ") == expected_delimiters
    assert body.endswith(b"--XyZ--\r\n")
    assert body.index(b'name="first"') < body.index(b'name="second"') < body.index(b'name="third"')
    assert b'Content-Disposition: form-data; name="second"\r\n\r\n2\r\n' in body


def test_exact_framing() -> None:
    """Test the byte layout of a single plain field."""
    body = build_multipart({"name": "value"}, boundary="b")
    assert body == b'--b\r\nContent-Disposition: form-data; name="name"\r\n\r\nvalue\r\n--b--\r\n'


def test_generated_boundary() -> None:
    """Test that a boundary is generated when none is supplied."""
    body = build_multipart({"a": "1"})
    match = re.match(rb"--(----[0-9a-f]+)\r\n", body)
    assert match is not None
    assert body.endswith(b"--" + match.group(1) + b"--\r\n")


def test_file_upload(tmp_path: Path) -> None:
    """Test that an existing file path becomes a file section."""
    upload = tmp_path / "photo.PNG"
    upload.write_bytes(b"\x89PNG-bytes")

    body = build_multipart({"file": str(upload), "note": "hi"}, boundary="B")

    assert b'Content-Disposition: form-data; name="file"; filename="photo.PNG"\r\n' in body
    assert b"Content-Type: image/png\r\n\r\n\x89PNG-bytes\r\n--B\r\n" in body
    assert body.count(b"--B") == 3  # noqa: PLR2004


def test_missing_file_is_plain_field(tmp_path: Path) -> None:
    """Test that a path that does not exist is sent as text."""
    missing = str(tmp_path / "nope.txt")
    body = build_multipart({"file": missing}, boundary="B")
    assert b"filename=" not in body
    assert missing.encode() in body


def test_image_section_has_no_bytes() -> None:
    """Test that in-memory images only get their section headers."""
    body = build_multipart({"img": _FakeImage(), "after": "x"}, boundary="B")

    assert re.search(rb'name="img"; filename="[0-9a-f]+\.png"\r\n', body)
    assert b"Content-Type: image/png\r\n\r\n--B\r\n" in body


@pytest.mark.parametrize(
    ("filename", "expected"),
    [
        ("a.png", "image/png"),
        ("a.JPG", "image/jpeg"),
        ("a.jpeg", "image/jpeg"),
        ("a.gif", "image/gif"),
        ("a.bmp", "image/bmp"),
        ("doc.pdf", "application/pdf"),
        ("notes.txt", "text/plain"),
        ("archive.zip", "application/octet-stream"),
        ("noext", "application/octet-stream"),
    ],
)
def test_mime_type(filename: str, expected: str) -> None:
    """Test the extension lookup table."""
    assert mime_type(filename) == expected
