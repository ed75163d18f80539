"""Response head handling: head/body split, header and cookie parsing."""

from __future__ import annotations

import re
import typing as t

from aiohttp import hdrs

if t.TYPE_CHECKING:
    from collections.abc import Iterable

_SET_COOKIE = re.compile(r"Set-Cookie: (.+?);", re.IGNORECASE | re.MULTILINE)
_COOKIE_PAIR = re.compile(r"(.+?)=(.+)")
_STATUS_LINE = re.compile(r"^HTTP/\S+\s+\d{3}")


def split_response(payload: bytes, header_size: int) -> tuple[bytes, bytes]:
    """Split a raw response into ``(head, body)`` at ``header_size``.

    A zero head size means the whole payload is body.
    """
    if not header_size:
        return b"", payload
    return payload[:header_size], payload[header_size:]


def render_head(
    version: str,
    status: int,
    reason: str,
    raw_headers: Iterable[tuple[bytes, bytes]],
) -> bytes:
    """Serialize one response head as it appeared on the wire."""
    lines = [f"HTTP/{version} {status} {reason}".rstrip().encode("latin-1")]
    lines.extend(name + b": " + value for name, value in raw_headers)
    return b"\r\n".join(lines) + b"\r\n\r\n"


def cookie_pairs(cookie: str) -> dict[str, str]:
    """Parse ``"a=1; b=2"`` into ``{"a": "1", "b": "2"}``."""
    cookies: dict[str, str] = {}
    for piece in cookie.split(";"):
        match = _COOKIE_PAIR.search(piece)
        if match:
            cookies[match.group(1).strip()] = match.group(2)
    return cookies


def extract_cookies(head: str) -> dict[str, str]:
    """Collect the ``name=value`` part of every Set-Cookie line in ``head``.

    Only lines carrying attributes (a ``;`` after the value) are matched.
    """
    values = _SET_COOKIE.findall(head)
    if not values:
        return {}
    return cookie_pairs(";".join(values))


def parse_headers(head: str) -> dict[str, str]:
    """Parse the headers of the last response block in ``head``.

    Repeated names are joined with ``", "``, except Set-Cookie which keeps
    the last value.
    """
    blocks = [block for block in re.split(r"\r?\n\r?\n", head) if _STATUS_LINE.match(block)]
    if not blocks:
        return {}
    headers: dict[str, str] = {}
    for line in blocks[-1].splitlines()[1:]:
        name, sep, value = line.partition(":")
        if not sep:
            continue
        name, value = name.strip(), value.strip()
        if name in headers and name.lower() != hdrs.SET_COOKIE.lower():
            headers[name] = f"{headers[name]}, {value}"
        else:
            headers[name] = value
    return headers
