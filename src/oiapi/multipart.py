"""multipart/form-data body construction."""

from __future__ import annotations

import os
import secrets
import typing as t
from pathlib import Path

if t.TYPE_CHECKING:
    from collections.abc import Mapping

EOL = b"\r\n"

MIME_TYPES = {
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "bmp": "image/bmp",
    "pdf": "application/pdf",
    "txt": "text/plain",
}
DEFAULT_MIME_TYPE = "application/octet-stream"


def new_boundary() -> str:
    return "----" + secrets.token_hex(8)


def mime_type(filename: str | os.PathLike[str]) -> str:
    """Guess a Content-Type from the file extension."""
    extension = Path(filename).suffix.lstrip(".").lower()
    return MIME_TYPES.get(extension, DEFAULT_MIME_TYPE)


def _is_file(value: t.Any) -> bool:
    if not isinstance(value, (str, os.PathLike)):
        return False
    try:
        return bool(str(value)) and Path(value).is_file()
    except (OSError, ValueError):
        return False


def _is_image(value: t.Any) -> bool:
    # Pillow-style images expose their encoded format as ``.format``.
    if isinstance(value, (str, bytes, os.PathLike)):
        return False
    return isinstance(getattr(value, "format", None), str)


def _disposition(name: str, filename: str | None = None) -> bytes:
    line = f'Content-Disposition: form-data; name="{name}"'
    if filename is not None:
        line += f'; filename="{filename}"'
    return line.encode("utf-8") + EOL


def _value_bytes(value: t.Any) -> bytes:
    if isinstance(value, bytes):
        return value
    return str(value).encode("utf-8")


def build_multipart(fields: Mapping[str, t.Any], boundary: str | None = None) -> bytes:
    """Build a multipart/form-data body from ``fields``.

    Sections are emitted in the mapping's iteration order:

    * a value naming an existing file is uploaded with its base name and a
      Content-Type from ``MIME_TYPES``;
    * an in-memory image (anything with a string ``format``, such as a
      Pillow image) gets a random ``<token>.<format>`` filename and an
      ``image/<format>`` type, but its pixels are not written and the
      section body stays empty;
    * anything else is a plain field holding ``str(value)``.

    Args:
        fields: Field name to value mapping.
        boundary: Boundary token; a random one is generated when omitted.

    Returns:
        bytes: The encoded body, closed by ``--boundary--``.

    """
    boundary = boundary or new_boundary()
    delimiter = f"--{boundary}".encode("ascii")
    parts: list[bytes] = []

    for name, value in fields.items():
        parts.append(delimiter + EOL)
        if _is_file(value):
            path = Path(value)
            parts.append(_disposition(name, path.name))
            parts.append(f"Content-Type: {mime_type(path)}".encode("ascii") + EOL + EOL)
            parts.append(path.read_bytes() + EOL)
        elif _is_image(value):
            subtype = value.format.lower()
            parts.append(_disposition(name, f"{secrets.token_hex(6)}.{subtype}"))
            parts.append(f"Content-Type: image/{subtype}".encode("utf-8") + EOL + EOL)
        else:
            parts.append(_disposition(name) + EOL)
            parts.append(_value_bytes(value) + EOL)

    parts.append(delimiter + b"--" + EOL)
    return b"".join(parts)


def content_type(boundary: str) -> str:
    return f"multipart/form-data; boundary={boundary}"
