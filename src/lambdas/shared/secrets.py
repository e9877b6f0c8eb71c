"""
Session Secret Loader
=====================

Fetches the session cookie signing key from Secrets Manager for stages
that set ``SESSION_COOKIE_SECRET_ID`` instead of injecting
``SESSION_COOKIE_SECRET`` into the function environment.

The secret must be a JSON object; the key is read from one string field
(``"secret"`` by default)::

    {"secret": "<44-char base64 of 32 random bytes>"}

For On-Call Engineers:
    "Session secret not found" / "Access denied to session secret":
    1. aws secretsmanager describe-secret --secret-id <id>
    2. Lambda role needs secretsmanager:GetSecretValue on that ARN
    3. SESSION_COOKIE_SECRET_ID must match the deployed secret name

    After rotating the secret, running containers keep the old key until
    the cache entry expires (SECRETS_CACHE_TTL_SECONDS, default 5 minutes)
    or the function cold starts. Cookies signed with the old key then fail
    verification and clients are issued a new session.

Security Notes:
    - Secret values never reach logs or exception messages
    - Logs carry only the last component of the secret name
"""

import logging
import os
import time
from typing import Any, NamedTuple

import boto3
import orjson
from botocore.config import Config
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)

DEFAULT_CACHE_TTL_SECONDS = 300  # 5 minutes
DEFAULT_SECRET_FIELD = "secret"

RETRY_CONFIG = Config(
    retries={
        "max_attempts": 3,
        "mode": "adaptive",
    },
    connect_timeout=5,
    read_timeout=10,
)


class SecretError(Exception):
    """Base exception for session secret loading errors."""

    pass


class SecretNotFoundError(SecretError):
    """The secret id does not exist in this account/region."""

    pass


class SecretAccessDeniedError(SecretError):
    """The function role may not read the secret."""

    pass


class SecretRetrievalError(SecretError):
    """The secret exists but could not be read or has the wrong shape."""

    pass


class _CachedSecret(NamedTuple):
    value: dict[str, Any]
    expires_at: float


_cache: dict[str, _CachedSecret] = {}

# ClientError code -> (exception, log message)
_CLIENT_ERRORS: dict[str, tuple[type[SecretError], str]] = {
    "ResourceNotFoundException": (SecretNotFoundError, "Secret not found"),
    "AccessDeniedException": (SecretAccessDeniedError, "Access denied to secret"),
    "UnauthorizedAccess": (SecretAccessDeniedError, "Access denied to secret"),
}


def _secret_name_for_log(secret_id: str) -> str:
    """
    Reduce a secret id or ARN to its bare name.

    Example:
        >>> _secret_name_for_log("prod/web/session-cookie")
        'session-cookie'
        >>> _secret_name_for_log("arn:aws:secretsmanager:us-east-1:123:secret:session-abc123")
        'session'
    """
    if secret_id.startswith("arn:"):
        # arn:aws:secretsmanager:region:account:secret:name-randomsuffix
        parts = secret_id.split(":")
        if len(parts) >= 7:
            return parts[6].rsplit("-", 1)[0]

    return secret_id.rsplit("/", 1)[-1]


def get_secrets_client(region_name: str | None = None) -> Any:
    """
    Get a Secrets Manager client with retry configuration.

    Args:
        region_name: Region (defaults to CLOUD_REGION or AWS_REGION env var)

    Raises:
        ValueError: If no region is given or configured
    """
    region = (
        region_name or os.environ.get("CLOUD_REGION") or os.environ.get("AWS_REGION")
    )
    if not region:
        raise ValueError("CLOUD_REGION or AWS_REGION environment variable must be set")

    return boto3.client("secretsmanager", region_name=region, config=RETRY_CONFIG)


def _fetch_secret_string(secret_id: str, region_name: str | None) -> str:
    log_extra: dict[str, Any] = {"secret_name": _secret_name_for_log(secret_id)}

    try:
        response = get_secrets_client(region_name).get_secret_value(SecretId=secret_id)
    except ClientError as e:
        error_code = e.response.get("Error", {}).get("Code", "Unknown")
        log_extra["error_code"] = error_code
        error_cls, message = _CLIENT_ERRORS.get(
            error_code, (SecretRetrievalError, "Failed to retrieve secret")
        )
        logger.error(message, extra=log_extra)
        raise error_cls(f"{message}: {secret_id}") from e

    secret_string = response.get("SecretString")
    if not secret_string:
        # SecretBinary is not used for signing keys
        raise SecretRetrievalError(f"Secret is binary, not string: {secret_id}")
    return secret_string


def get_secret(
    secret_id: str,
    region_name: str | None = None,
    force_refresh: bool = False,
) -> dict[str, Any]:
    """
    Return a JSON-object secret, cached for SECRETS_CACHE_TTL_SECONDS.

    Args:
        secret_id: Secret name or ARN
        region_name: AWS region
        force_refresh: Skip the cache and fetch again

    Raises:
        SecretNotFoundError: If the secret doesn't exist
        SecretAccessDeniedError: If the function role lacks permission
        SecretRetrievalError: For other errors, or a value that is not a
            JSON object
    """
    if not force_refresh:
        entry = _cache.get(secret_id)
        if entry is not None and time.time() <= entry.expires_at:
            return entry.value

    secret_string = _fetch_secret_string(secret_id, region_name)

    try:
        value = orjson.loads(secret_string)
    except orjson.JSONDecodeError as e:
        logger.error(
            "Failed to parse secret as JSON",
            extra={"secret_name": _secret_name_for_log(secret_id)},
        )
        raise SecretRetrievalError(f"Secret is not valid JSON: {secret_id}") from e

    if not isinstance(value, dict):
        raise SecretRetrievalError(f"Secret is not a JSON object: {secret_id}")

    ttl = int(os.environ.get("SECRETS_CACHE_TTL_SECONDS", DEFAULT_CACHE_TTL_SECONDS))
    _cache[secret_id] = _CachedSecret(value, time.time() + ttl)

    logger.info(
        "Secret retrieved from Secrets Manager",
        extra={"secret_name": _secret_name_for_log(secret_id)},
    )
    return value


def get_session_secret(secret_id: str, field: str = DEFAULT_SECRET_FIELD) -> str:
    """
    Return the signing key stored under ``field`` of a JSON secret.

    Length is not checked here; ``SessionCookieConfig.get_secret_key``
    enforces the 32-byte minimum where the key is used.

    Raises:
        SecretRetrievalError: If the field is missing, empty or not a string
    """
    value = get_secret(secret_id).get(field)
    if not isinstance(value, str) or not value:
        raise SecretRetrievalError(f"Field '{field}' not found in secret: {secret_id}")
    return value


def clear_cache() -> None:
    """Drop all cached secrets; the next read goes to Secrets Manager."""
    _cache.clear()
