"""Shared models for session cookie handling."""

from src.lambdas.shared.models.session_config import (
    SESSION_COOKIE_MAX_AGE_SPAN_DEFAULT,
    SESSION_COOKIE_NAME_DEFAULT,
    SessionCookieConfig,
    clear_config_cache,
    get_session_config,
)

__all__ = [
    "SESSION_COOKIE_MAX_AGE_SPAN_DEFAULT",
    "SESSION_COOKIE_NAME_DEFAULT",
    "SessionCookieConfig",
    "clear_config_cache",
    "get_session_config",
]
