"""
Signout Lambda Handler
======================

Clears the session cookie. There is no server-side session to revoke:
the browser is told to expire the cookie immediately.
"""

import logging

from src.lambdas.shared.auth.session_cookie import rm_cookie
from src.lambdas.shared.models.session_config import get_session_config
from src.lambdas.shared.utils.error_handler import handle_request
from src.lambdas.shared.utils.event_helpers import get_cookies_from_event
from src.lambdas.shared.utils.response_builder import json_response

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


def lambda_handler(event: dict, context) -> dict:
    """Lambda entry point."""
    return handle_request(_handle, event, context)


def _handle(event: dict, context) -> dict:
    cookies = get_cookies_from_event(event) or []
    logger.info("Clearing session cookie", extra={"cookie_headers": len(cookies)})

    return rm_cookie(json_response(200, {"signed_out": True}), get_session_config())
