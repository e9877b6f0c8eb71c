"""Signed session cookies for stateless Lambda handlers.

A session cookie value is ``signature + base64(canonical_json(payload))``
with no delimiter between the two. The signature has a fixed width for a
given algorithm (27 characters for the sha1 default), which is how the
two halves are told apart.

Security considerations:
- Canonical JSON (sorted keys, compact) makes the signature independent
  of the order the payload was built in
- ``parse_session`` does NOT authenticate. It returns whatever decodes,
  including attacker-controlled fields. Call ``verify_session_string``
  (or use ``read_session_from_event``) before trusting the result
- A failed verification is a ``False`` result, never an exception;
  configuration problems (missing or short key) always raise

Usage::

    response = {"statusCode": 200, "body": "{}"}
    set_cookie(response, {"identifier": identifier})

    session = read_session_from_event(event)
    if session is None:
        return unauthorized
"""

import base64
import binascii
import logging
from datetime import UTC, datetime
from typing import Any

import orjson

from src.lambdas.shared.auth.signing import sign, signature_length, verify
from src.lambdas.shared.errors.session_errors import SessionDecodeError
from src.lambdas.shared.logging_utils import mask_cookie_value, sanitize_for_log
from src.lambdas.shared.models.session_config import (
    SessionCookieConfig,
    get_session_config,
)
from src.lambdas.shared.utils.cookie_helpers import parse_cookie, serialize_cookie
from src.lambdas.shared.utils.event_helpers import get_cookies_from_event

logger = logging.getLogger(__name__)

SIGNATURE_ENCODING = "base64"

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def canonicalize(payload: Any) -> bytes:
    """Serialize a payload to canonical JSON bytes (sorted keys, compact)."""
    return orjson.dumps(payload, option=orjson.OPT_SORT_KEYS)


def _decode_payload(encoded: str) -> bytes:
    """Decode the payload half, accepting standard or URL-safe base64."""
    normalized = encoded.replace("-", "+").replace("_", "/")
    normalized += "=" * (-len(normalized) % 4)
    return base64.b64decode(normalized, validate=True)


def split_session(
    encoded_session: str,
    algorithm: str = "sha1",
    encoding: str = SIGNATURE_ENCODING,
) -> tuple[str, str]:
    """Split a session cookie value into (signature, base64 payload)."""
    width = signature_length(algorithm, encoding)
    return encoded_session[:width], encoded_session[width:]


def create_cookie(
    payload: dict[str, Any],
    secret_key: str | bytes | None = None,
    config: SessionCookieConfig | None = None,
) -> str:
    """Sign a payload and return the session cookie value.

    Args:
        payload: JSON-serializable session data
        secret_key: Signing key; defaults to the configured (and
            length-checked) secret
        config: Session config; defaults to the process-wide one

    Returns:
        ``signature + base64(canonical_json(payload))``

    Raises:
        SessionConfigError: If no key is given and the configured one is
            missing or too short
    """
    config = config or get_session_config()
    key = secret_key or config.get_secret_key()

    session_json = canonicalize(payload)
    signature = sign(session_json, key, config.algorithm, SIGNATURE_ENCODING)

    return signature + base64.b64encode(session_json).decode("ascii")


def parse_session(
    encoded_session: str,
    config: SessionCookieConfig | None = None,
) -> Any:
    """Decode the payload of a session cookie WITHOUT verifying it.

    Only call this on a value that ``verify_session_string`` accepted.

    Raises:
        SessionDecodeError: If the payload is not base64-encoded JSON
    """
    config = config or get_session_config()
    _, data = split_session(encoded_session, config.algorithm)

    try:
        return orjson.loads(_decode_payload(data))
    except (binascii.Error, ValueError) as e:
        raise SessionDecodeError("Session payload is not base64-encoded JSON") from e


def verify_session_string(
    encoded_session: str,
    config: SessionCookieConfig | None = None,
) -> bool:
    """Return True if the session cookie's signature matches its payload.

    Raises:
        SessionConfigError: If the configured secret is missing or too short
    """
    config = config or get_session_config()
    key = config.get_secret_key()

    signature, data = split_session(encoded_session, config.algorithm)
    if not data:
        logger.debug("Session cookie shorter than its signature")
        return False

    try:
        session_bytes = _decode_payload(data)
    except (binascii.Error, ValueError):
        logger.info(
            "Session cookie payload is not base64",
            extra={"cookie": mask_cookie_value(encoded_session)},
        )
        return False

    return verify(key, session_bytes, signature, config.algorithm, SIGNATURE_ENCODING)


def _session_value_from_event(event: dict, config: SessionCookieConfig) -> str | None:
    cookies = get_cookies_from_event(event)
    if not cookies:
        return None

    value = parse_cookie(cookies).get(config.get_cookie_name())
    if not isinstance(value, str) or not value:
        return None
    return value


def _verified_value_from_event(event: dict, config: SessionCookieConfig) -> str | None:
    value = _session_value_from_event(event, config)
    if value is None:
        return None

    if not verify_session_string(value, config):
        logger.info(
            "Session cookie signature mismatch",
            extra={
                "cookie_name": sanitize_for_log(config.cookie_name),
                "cookie": mask_cookie_value(value),
            },
        )
        return None
    return value


def has_session_cookie(
    event: dict,
    config: SessionCookieConfig | None = None,
) -> bool:
    """Return True if the event carries a non-empty session cookie, verified or not."""
    config = config or get_session_config()
    return _session_value_from_event(event, config) is not None


def verify_cookie_from_event(
    event: dict,
    config: SessionCookieConfig | None = None,
) -> bool:
    """Verify the session cookie carried by a Lambda proxy event.

    Checks the signature only, not expiry or payload contents.

    Returns:
        False when the event has no session cookie or it does not verify
    """
    config = config or get_session_config()
    return _verified_value_from_event(event, config) is not None


def read_session_from_event(
    event: dict,
    config: SessionCookieConfig | None = None,
) -> Any:
    """Return the verified session payload from an event, or None.

    None covers both "no cookie" and "cookie did not verify"; use
    ``has_session_cookie`` to tell them apart.
    """
    config = config or get_session_config()
    value = _verified_value_from_event(event, config)
    if value is None:
        return None
    return parse_session(value, config)


def _set_cookie_list(response: dict) -> list[str]:
    multi = response.get("multiValueHeaders")
    if multi is None:
        multi = response["multiValueHeaders"] = {}
    set_cookies = multi.get("Set-Cookie")
    if set_cookies is None:
        set_cookies = multi["Set-Cookie"] = []
    return set_cookies


def set_cookie(
    response: dict,
    new_data: dict[str, Any],
    session: dict[str, Any] | None = None,
    config: SessionCookieConfig | None = None,
) -> dict:
    """Add a signed session cookie to a Lambda proxy response.

    ``new_data`` is merged over ``session`` (the current session payload,
    if any). A single ``headers["Set-Cookie"]`` is moved into
    ``multiValueHeaders`` so both cookies survive.

    Returns:
        The same response dict, mutated
    """
    config = config or get_session_config()
    set_cookies = _set_cookie_list(response)

    headers = response.get("headers")
    if headers and headers.get("Set-Cookie"):
        set_cookies.append(headers.pop("Set-Cookie"))

    cookie_value = create_cookie({**(session or {}), **new_data}, config=config)
    set_cookies.append(
        serialize_cookie(config.get_cookie_name(), cookie_value, **config.cookie_options())
    )

    return response


def rm_cookie(response: dict, config: SessionCookieConfig | None = None) -> dict:
    """Add a Set-Cookie that expires the session cookie immediately."""
    config = config or get_session_config()
    _set_cookie_list(response).append(
        serialize_cookie(
            config.get_cookie_name(),
            "deleted",
            domain=config.domain,
            path=config.path,
            expires=_EPOCH,
        )
    )
    return response
