"""
Log-safety helpers for cookie and session data.

Cookie headers are fully attacker-controlled and session cookies are
bearer credentials, so neither may reach the logs verbatim:
- Names and other header fragments go through ``sanitize_for_log`` to
  prevent log injection (CWE-117)
- Cookie values go through ``mask_cookie_value`` so a logged line can
  never be replayed as a session
- Exceptions are reduced to their type with ``get_safe_error_info``

Security References:
- OWASP Logging Cheat Sheet: https://cheatsheetseries.owasp.org/cheatsheets/Logging_Cheat_Sheet.html
"""

import re
from typing import Any

# Maximum length for logged user input to prevent log flooding
MAX_LOG_INPUT_LENGTH = 200

# Characters of a cookie value kept visible when masking
MASK_VISIBLE_CHARS = 6

_CONTROL_CHARS_RE = re.compile(r"[\x00-\x1f\x7f-\x9f]")


def sanitize_for_log(value: Any, max_length: int = MAX_LOG_INPUT_LENGTH) -> str:
    """
    Sanitize a value for safe logging by removing control characters.

    Args:
        value: Value to sanitize (will be converted to string)
        max_length: Maximum length of output (default: 200)

    Returns:
        Single-line string, truncated with "..." past max_length

    Example:
        >>> sanitize_for_log("session\\n[FAKE] admin")
        'session [FAKE] admin'
    """
    text = _CONTROL_CHARS_RE.sub(" ", str(value))

    if len(text) > max_length:
        text = text[:max_length] + "..."

    return text


def mask_cookie_value(value: Any) -> str:
    """
    Mask a cookie value, keeping only a short prefix and the length.

    Example:
        >>> mask_cookie_value("abcdefghijklmnop")
        'abcdef***(16 chars)'
    """
    if value is None:
        return "<none>"
    if value is True:
        return "<flag>"
    text = str(value)
    prefix = sanitize_for_log(text[:MASK_VISIBLE_CHARS])
    return f"{prefix}***({len(text)} chars)"


def get_safe_error_info(exception: Exception) -> dict[str, str]:
    """
    Extract safe information from an exception for logging.

    Returns only the exception type: messages may echo cookie contents
    or secret material.

    Example:
        >>> get_safe_error_info(ValueError("session=abc"))
        {'error_type': 'ValueError'}
    """
    return {"error_type": type(exception).__name__}
