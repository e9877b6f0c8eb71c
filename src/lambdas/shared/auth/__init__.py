"""HMAC signing primitives for session cookies.

The session codec lives in ``src.lambdas.shared.auth.session_cookie``.
"""

from src.lambdas.shared.auth.signing import (
    generate_secret_key,
    sign,
    signature_length,
    time_safe_compare,
    verify,
)

__all__ = [
    "generate_secret_key",
    "sign",
    "signature_length",
    "time_safe_compare",
    "verify",
]
