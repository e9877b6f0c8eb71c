"""Shared error types for session cookie handling."""

from src.lambdas.shared.errors.session_errors import (
    InvalidCookieError,
    SessionConfigError,
    SessionDecodeError,
    SessionError,
)

__all__ = [
    "InvalidCookieError",
    "SessionConfigError",
    "SessionDecodeError",
    "SessionError",
]
