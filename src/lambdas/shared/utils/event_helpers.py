"""Event helper utilities for Lambda proxy integration events.

Provides case-insensitive header lookup and Cookie header extraction for
handlers operating on raw event dicts. Supports the three shapes cookies
arrive in:

- ``multiValueHeaders`` (API Gateway REST / Netlify Functions)
- ``headers`` (single comma-joined or ``;``-joined value)
- ``cookies`` (API Gateway HTTP API / Function URL payload v2.0)
"""


def get_header(event: dict, name: str, default: str | None = None) -> str | None:
    """Get a header value with case-insensitive lookup.

    Args:
        event: Lambda proxy event dict.
        name: Header name (any case).
        default: Value to return if header is not present.

    Returns:
        Header value or default.
    """
    headers = event.get("headers") or {}
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value
    return default


def get_cookies_from_event(event: dict) -> list[str] | None:
    """Return the raw Cookie header values carried by an event.

    Args:
        event: Lambda proxy event dict.

    Returns:
        List of raw header strings, each possibly holding several
        ``;``-separated pairs. None when the event carries no cookies.
    """
    multi = event.get("multiValueHeaders") or {}
    cookies = multi.get("Cookie") or multi.get("cookie")
    if cookies:
        return list(cookies)

    # Payload v2.0 splits cookies into their own list
    if event.get("cookies"):
        return list(event["cookies"])

    header = get_header(event, "cookie")
    if header:
        return [header]

    return None
