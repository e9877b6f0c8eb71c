"""Utility functions for shared Lambda code."""

from src.lambdas.shared.utils.cookie_helpers import (
    parse_cookie,
    percent_decode,
    percent_encode,
    serialize_cookie,
)
from src.lambdas.shared.utils.event_helpers import get_cookies_from_event, get_header

__all__ = [
    "get_cookies_from_event",
    "get_header",
    "parse_cookie",
    "percent_decode",
    "percent_encode",
    "serialize_cookie",
]
