"""
Session Lambda Handler
======================

Issues and refreshes the signed session cookie.

For On-Call Engineers:
    Every response carries a fresh Set-Cookie for the session cookie.
    A 401 means the request carried a session cookie whose signature did
    not verify (tampered, or signed with a rotated secret), or that
    SESSION_COOKIE_SECRET is missing or shorter than 32 bytes. The two are
    told apart by log level: configuration problems log at ERROR.

For Developers:
    Handler workflow:
    1. Read the session cookie from the event, if any
    2. Present and invalid -> 401
    3. Present and valid with an identifier -> re-sign with a new "ts"
    4. Otherwise -> issue a new session with a random identifier

Security Notes:
    - The payload is only parsed after its signature verifies
    - Identifiers come from the secrets CSPRNG
"""

import logging
import secrets
import time

from src.lambdas.shared.auth.session_cookie import (
    has_session_cookie,
    read_session_from_event,
    set_cookie,
)
from src.lambdas.shared.models.session_config import get_session_config
from src.lambdas.shared.utils.error_handler import handle_request
from src.lambdas.shared.utils.response_builder import (
    json_response,
    unauthorized_response,
)

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

IDENTIFIER_BYTES = 16


def lambda_handler(event: dict, context) -> dict:
    """Lambda entry point."""
    return handle_request(_handle, event, context)


def _handle(event: dict, context) -> dict:
    config = get_session_config()

    session = read_session_from_event(event, config)
    if session is None and has_session_cookie(event, config):
        return unauthorized_response("Invalid session")

    identifier = session.get("identifier") if isinstance(session, dict) else None

    # An existing session keeps its identifier
    if identifier:
        response = json_response(200, {"identifier": identifier, "refreshed": True})
        return set_cookie(
            response,
            {"identifier": identifier, "ts": str(int(time.time() * 1000))},
            session=session,
            config=config,
        )

    identifier = secrets.token_hex(IDENTIFIER_BYTES)
    logger.info("Issuing new session")

    response = json_response(200, {"identifier": identifier, "refreshed": False})
    return set_cookie(response, {"identifier": identifier}, config=config)
