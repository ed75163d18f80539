"""URL and query string encoding."""

from __future__ import annotations

import json
import re
import typing as t
from collections.abc import Iterable, Iterator, Mapping, Sequence
from urllib.parse import quote, quote_from_bytes

# Runs of DEL and non-ASCII bytes; only runs of three or more get escaped.
_EXTENDED_RUN = re.compile(rb"[\x7f-\xff]+")
_MIN_ESCAPED_RUN = 3


def _escape_run(match: re.Match[bytes]) -> bytes:
    run = match.group(0)
    if len(run) < _MIN_ESCAPED_RUN:
        return run
    return quote_from_bytes(run, safe="").encode("ascii")


def encode_url(url: str) -> str:
    """Percent-encode long runs of non-ASCII bytes in ``url``.

    The URL is scanned as UTF-8. Every maximal run of bytes in 0x7F-0xFF of
    length three or more is percent-encoded byte by byte; shorter runs (a
    lone DEL, a two-byte character) are left literal. ASCII is untouched.
    """
    raw = url.encode("utf-8", errors="surrogateescape")
    if not _EXTENDED_RUN.search(raw):
        return url
    return _EXTENDED_RUN.sub(_escape_run, raw).decode("utf-8", errors="surrogateescape")


def _scalar(value: t.Any) -> str:
    if value is True:
        return "1"
    if value is False:
        return "0"
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def _pairs(prefix: str, value: t.Any) -> Iterator[tuple[str, str]]:
    if value is None:
        return
    if isinstance(value, Mapping):
        items: Iterable[tuple[t.Any, t.Any]] = value.items()
    elif isinstance(value, (list, tuple)):
        items = enumerate(value)
    else:
        yield prefix, _scalar(value)
        return
    for key, sub in items:
        yield from _pairs(f"{prefix}[{key}]", sub)


def build_query(data: Mapping[str, t.Any] | Sequence[t.Any]) -> str:
    """Render ``data`` as an RFC 3986 query string.

    Spaces become ``%20``. Nested mappings and lists use bracket keys
    (``a[b]=1``, ``a[0]=1``), booleans render as ``1``/``0`` and None values
    are skipped.
    """
    items = data.items() if isinstance(data, Mapping) else enumerate(data)
    parts = []
    for key, value in items:
        for name, scalar in _pairs(str(key), value):
            parts.append(f"{quote(name, safe='')}={quote(scalar, safe='')}")
    return "&".join(parts)


def is_json(text: str | bytes | None) -> bool:
    """Return whether ``text`` is a complete JSON document."""
    if text is None:
        return False
    try:
        json.loads(text)
    except ValueError:
        return False
    return True
