"""Response body decoding."""

from __future__ import annotations

import json
import types
import typing as t

from .errors import DecodeError
from .types import NO_VALUE, AcceptFormat


def _as_namespace(mapping: dict[str, t.Any]) -> types.SimpleNamespace:
    return types.SimpleNamespace(**mapping)


def decode_text(body: bytes, charset: str | None = None) -> str:
    try:
        return body.decode(charset or "utf-8", errors="replace")
    except LookupError:
        return body.decode("utf-8", errors="replace")


def decode_body(
    body: bytes,
    accept: AcceptFormat,
    charset: str | None = None,
) -> tuple[t.Any, DecodeError | None]:
    """Decode ``body`` into the shape named by ``accept``.

    Args:
        body: Raw response body.
        accept: Requested shape.
        charset: Charset announced by the response, if any.

    Returns:
        tuple: ``(value, None)`` on success. When a JSON shape was requested
        and the body is not JSON, ``(NO_VALUE, DecodeError)``.

    """
    if accept is AcceptFormat.BYTES:
        return body, None

    text = decode_text(body, charset)
    if accept is AcceptFormat.STRING:
        return text, None

    hook = _as_namespace if accept is AcceptFormat.OBJECT else None
    try:
        return json.loads(text, object_hook=hook), None
    except ValueError as e:
        return NO_VALUE, DecodeError("Failed to parse JSON response", cause=e)
