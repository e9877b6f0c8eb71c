"""Session cookie configuration.

One frozen ``SessionCookieConfig`` is built per process from environment
variables (``SessionCookieConfig.from_env``) and passed to the session
codec, instead of each helper reading ``os.environ`` on its own.

Environment variables:
    SESSION_COOKIE_SECRET: Signing key, at least 32 bytes (UTF-8)
    SESSION_COOKIE_SECRET_ID: Secrets Manager id holding {"secret": ...},
        used when SESSION_COOKIE_SECRET is not set
    SESSION_COOKIE_NAME: Cookie name (default "session")
    SESSION_COOKIE_HTTPONLY: "0" drops the HttpOnly attribute
    SESSION_COOKIE_SECURE: "0" drops the Secure attribute
    SESSION_COOKIE_SAMESITE: "Strict", "Lax" (default) or "None"
    SESSION_COOKIE_MAX_AGE_SPAN: Max-Age in seconds (default 7 days)
    SESSION_COOKIE_DOMAIN: Domain attribute, unset by default
    SESSION_COOKIE_PATH: Path attribute (default "/")
    SESSION_COOKIE_ALGORITHM: HMAC algorithm, sha1 (default), sha256, sha512
"""

import logging
import os
import re
from collections.abc import Mapping
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from src.lambdas.shared.auth.signing import SUPPORTED_ALGORITHMS
from src.lambdas.shared.errors.session_errors import SessionConfigError
from src.lambdas.shared.secrets import SecretError, get_session_secret

logger = logging.getLogger(__name__)

SESSION_COOKIE_NAME_DEFAULT = "session"
SESSION_COOKIE_MAX_AGE_SPAN_DEFAULT = 60 * 60 * 24 * 7  # 7 days
SECRET_KEY_MIN_BYTES = 32

# RFC 6265 cookie-name token characters
COOKIE_NAME_RE = re.compile(r"[A-Za-z0-9!#$%&'*+\-.^_`|~]+")

_LEADING_INT_RE = re.compile(r"\s*([+-]?\d+)")

_current_config: "SessionCookieConfig | None" = None


class SessionCookieConfig(BaseModel):
    """Signing key and Set-Cookie attribute defaults for session cookies."""

    model_config = ConfigDict(frozen=True)

    secret_key: str | None = Field(None, repr=False)
    cookie_name: str = SESSION_COOKIE_NAME_DEFAULT
    httponly: bool = True
    secure: bool = True
    samesite: Literal["strict", "lax", "none"] = "lax"
    max_age: int = SESSION_COOKIE_MAX_AGE_SPAN_DEFAULT
    domain: str | None = None
    path: str = "/"
    algorithm: Literal["sha1", "sha256", "sha512"] = "sha1"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "SessionCookieConfig":
        """Build a config from ``SESSION_COOKIE_*`` environment variables.

        Unrecognized SameSite and non-numeric Max-Age values are ignored
        and the defaults kept. An unsupported algorithm raises.

        Raises:
            SessionConfigError: If the algorithm is unsupported or the
                Secrets Manager secret cannot be loaded
        """
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}

        secret = env.get("SESSION_COOKIE_SECRET")
        secret_id = env.get("SESSION_COOKIE_SECRET_ID")
        if not secret and secret_id:
            try:
                secret = get_session_secret(secret_id)
            except SecretError as e:
                raise SessionConfigError(
                    "SESSION_COOKIE_SECRET_ID", "Secret could not be loaded."
                ) from e
        values["secret_key"] = secret

        if "SESSION_COOKIE_NAME" in env:
            values["cookie_name"] = env["SESSION_COOKIE_NAME"]

        if env.get("SESSION_COOKIE_HTTPONLY") == "0":
            values["httponly"] = False

        if env.get("SESSION_COOKIE_SECURE") == "0":
            values["secure"] = False

        samesite = env.get("SESSION_COOKIE_SAMESITE")
        if samesite in ("Strict", "Lax", "None"):
            values["samesite"] = samesite.lower()

        max_age = _LEADING_INT_RE.match(env.get("SESSION_COOKIE_MAX_AGE_SPAN") or "")
        if max_age:
            values["max_age"] = int(max_age.group(1))

        if env.get("SESSION_COOKIE_DOMAIN"):
            values["domain"] = env["SESSION_COOKIE_DOMAIN"]

        if env.get("SESSION_COOKIE_PATH"):
            values["path"] = env["SESSION_COOKIE_PATH"]

        algorithm = env.get("SESSION_COOKIE_ALGORITHM")
        if algorithm:
            if algorithm.lower() not in SUPPORTED_ALGORITHMS:
                raise SessionConfigError(
                    "SESSION_COOKIE_ALGORITHM",
                    f"Must be one of {', '.join(sorted(SUPPORTED_ALGORITHMS))}.",
                )
            values["algorithm"] = algorithm.lower()

        return cls(**values)

    def get_secret_key(self) -> str:
        """Return the signing key after checking it is usable.

        Length is measured in UTF-8 bytes, not characters.

        Raises:
            SessionConfigError: If the key is missing or shorter than 32 bytes
        """
        if not self.secret_key or not isinstance(self.secret_key, str):
            logger.error(
                "Session cookie secret missing",
                extra={"setting": "SESSION_COOKIE_SECRET"},
            )
            raise SessionConfigError("SESSION_COOKIE_SECRET", "No secret key provided.")

        secret_length = len(self.secret_key.encode("utf-8"))
        if secret_length < SECRET_KEY_MIN_BYTES:
            logger.error(
                "Session cookie secret too short",
                extra={"setting": "SESSION_COOKIE_SECRET", "secret_length": secret_length},
            )
            raise SessionConfigError(
                "SESSION_COOKIE_SECRET",
                f"The secret key must be at least {SECRET_KEY_MIN_BYTES} bytes long; "
                f"({secret_length} given).",
            )

        return self.secret_key

    def get_cookie_name(self) -> str:
        """Return the cookie name after checking it is a cookie token.

        Raises:
            SessionConfigError: If the name is empty or has characters
                outside the cookie-name token set
        """
        name = self.cookie_name
        if len(name) < 1:
            raise SessionConfigError("SESSION_COOKIE_NAME", "Cannot be an empty string.")
        if not COOKIE_NAME_RE.fullmatch(name):
            raise SessionConfigError(
                "SESSION_COOKIE_NAME",
                "Must only contain ASCII characters and no whitespace.",
            )
        return name

    def cookie_options(self) -> dict[str, Any]:
        """Keyword arguments for ``serialize_cookie``."""
        options: dict[str, Any] = {
            "httponly": self.httponly,
            "secure": self.secure,
            "samesite": self.samesite,
            "max_age": self.max_age,
            "path": self.path,
        }
        if self.domain:
            options["domain"] = self.domain
        return options


def get_session_config() -> SessionCookieConfig:
    """Return the process-wide config, reading the environment once."""
    global _current_config
    if _current_config is None:
        _current_config = SessionCookieConfig.from_env()
    return _current_config


def clear_config_cache() -> None:
    """Forget the process-wide config so the next call re-reads the environment."""
    global _current_config
    _current_config = None
