"""Cookie header parsing and Set-Cookie serialization.

Handles the subset of RFC 6265 needed for signed session cookies: a
strict serializer that refuses to emit a malformed ``Set-Cookie`` header,
and a lenient parser that never raises on client input.

References:
    RFC 7230 sec 3.2: field-content grammar
    RFC 6265 sec 4.1: Set-Cookie attributes
"""

import math
import re
import urllib.parse
from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from email.utils import format_datetime
from typing import Any

from src.lambdas.shared.errors.session_errors import InvalidCookieError

# field-content = field-vchar [ 1*( SP / HTAB ) field-vchar ]
# field-vchar   = VCHAR / obs-text
# obs-text      = %x80-FF
FIELD_CONTENT_RE = re.compile(r"[\t\x20-\x7e\x80-\xff]+")

# Characters left alone by JavaScript's encodeURIComponent, beyond the
# letters, digits and "_.-~" that urllib always keeps
_URI_COMPONENT_SAFE = "!*'()"

_PRIORITIES = {"low": "Low", "medium": "Medium", "high": "High"}
_SAMESITE = {"lax": "Lax", "strict": "Strict", "none": "None"}


def percent_encode(value: str) -> str:
    """Percent-encode a cookie value the way encodeURIComponent does."""
    return urllib.parse.quote(value, safe=_URI_COMPONENT_SAFE)


def percent_decode(value: str) -> str:
    """Percent-decode a cookie value.

    Skips the decode entirely when there is no ``%``. Raises
    UnicodeDecodeError when the escapes do not form valid UTF-8.
    """
    if "%" not in value:
        return value
    return urllib.parse.unquote(value, errors="strict")


def _is_field_content(value: str) -> bool:
    return FIELD_CONTENT_RE.fullmatch(value) is not None


def serialize_cookie(
    name: str,
    value: str,
    *,
    encode: Callable[[str], str] | None = None,
    max_age: int | float | str | None = None,
    domain: str | None = None,
    path: str | None = None,
    expires: datetime | None = None,
    httponly: bool = False,
    secure: bool = False,
    partitioned: bool = False,
    priority: str | None = None,
    samesite: bool | str | None = None,
) -> str:
    """Serialize a name/value pair into a ``Set-Cookie`` header value.

    Attributes are appended in a fixed order: Max-Age, Domain, Path,
    Expires, HttpOnly, Secure, Partitioned, Priority, SameSite.

    Args:
        name: Cookie name, must be RFC 7230 field-content
        value: Cookie value, encoded with ``encode`` before validation
        encode: Value encoder (defaults to percent-encoding)
        max_age: Lifetime in seconds, floored to an integer
        domain: Domain attribute
        path: Path attribute
        expires: Absolute expiry; naive datetimes are taken as UTC
        httponly: Add the HttpOnly flag
        secure: Add the Secure flag
        partitioned: Add the Partitioned flag
        priority: "low", "medium" or "high" (any case)
        samesite: True (Strict) or "lax"/"strict"/"none" (any case)

    Returns:
        Header value, e.g. ``"a=b; Max-Age=60"``

    Raises:
        InvalidCookieError: If any part would produce a malformed header
    """
    enc = encode if encode is not None else percent_encode

    if not callable(enc):
        raise InvalidCookieError("encode")

    if not isinstance(name, str) or not _is_field_content(name):
        raise InvalidCookieError("name", "argument name is invalid")

    encoded = enc(value)

    if encoded and not _is_field_content(encoded):
        raise InvalidCookieError("value", "argument val is invalid")

    parts = [f"{name}={encoded}"]

    if max_age is not None:
        try:
            seconds = float(max_age)
        except (TypeError, ValueError):
            raise InvalidCookieError("maxAge") from None
        if isinstance(max_age, bool) or not math.isfinite(seconds):
            raise InvalidCookieError("maxAge")
        parts.append(f"Max-Age={math.floor(seconds)}")

    if domain:
        if not _is_field_content(domain):
            raise InvalidCookieError("domain")
        parts.append(f"Domain={domain}")

    if path:
        if not _is_field_content(path):
            raise InvalidCookieError("path")
        parts.append(f"Path={path}")

    if expires is not None:
        if not isinstance(expires, datetime):
            raise InvalidCookieError("expires")
        if expires.tzinfo is None:
            expires = expires.replace(tzinfo=UTC)
        parts.append(f"Expires={format_datetime(expires.astimezone(UTC), usegmt=True)}")

    if httponly:
        parts.append("HttpOnly")

    if secure:
        parts.append("Secure")

    if partitioned:
        parts.append("Partitioned")

    if priority:
        rendered = _PRIORITIES.get(priority.lower()) if isinstance(priority, str) else None
        if rendered is None:
            raise InvalidCookieError("priority")
        parts.append(f"Priority={rendered}")

    if samesite:
        if samesite is True:
            rendered = "Strict"
        elif isinstance(samesite, str):
            rendered = _SAMESITE.get(samesite.lower())
        else:
            rendered = None
        if rendered is None:
            raise InvalidCookieError("sameSite")
        parts.append(f"SameSite={rendered}")

    return "; ".join(parts)


def _try_decode(value: str, decode: Callable[[str], str]) -> str:
    try:
        return decode(value)
    except Exception:  # noqa: BLE001 - keep the raw value on any decoder failure
        return value


def parse_cookie(
    headers: str | Iterable[str] | None,
    decode: Callable[[str], str] | None = None,
) -> dict[str, Any]:
    """Parse one or more ``Cookie`` header values into a name-value dict.

    Segments are split on ``;`` and then on the first ``=``. A segment
    without ``=`` maps to ``True`` (flag attributes such as HttpOnly).
    Later duplicates overwrite earlier ones, in header order and then
    left to right. Values that fail to decode are kept raw.

    Args:
        headers: A header string or a list of them
        decode: Value decoder (defaults to percent-decoding)

    Returns:
        Dict mapping names to decoded values (or True). Empty dict if no
        cookies. Never raises on malformed input.
    """
    if not headers:
        return {}
    if isinstance(headers, str):
        headers = [headers]

    dec = decode if decode is not None else percent_decode
    cookies: dict[str, Any] = {}
    for header in headers:
        if not isinstance(header, str):
            continue
        for segment in header.split(";"):
            segment = segment.strip()
            if not segment:
                continue
            if "=" not in segment:
                cookies[segment] = True
                continue
            key, _, value = segment.partition("=")
            cookies[key.strip()] = _try_decode(value.strip(), dec)
    return cookies
