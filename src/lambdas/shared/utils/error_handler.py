"""Top-level error handler for session-aware Lambda handlers.

Wraps handler functions so session failures never crash the invocation:
SessionError (bad configuration, undecodable session) becomes a 401,
anything else a 500 with the traceback logged.

Usage:
    from src.lambdas.shared.utils.error_handler import handle_request

    def lambda_handler(event, context):
        return handle_request(_handle, event, context)
"""

import logging
import traceback

from src.lambdas.shared.errors.session_errors import SessionConfigError, SessionError
from src.lambdas.shared.logging_utils import get_safe_error_info
from src.lambdas.shared.utils.response_builder import (
    error_response,
    unauthorized_response,
)

logger = logging.getLogger(__name__)


def _request_fields(event: dict) -> dict[str, str]:
    return {
        "path": event.get("path") or event.get("rawPath") or "unknown",
        "method": event.get("httpMethod") or "unknown",
    }


def handle_request(handler_fn, event: dict, context) -> dict:
    """Execute a handler function with structured error handling.

    Args:
        handler_fn: Callable taking (event, context) and returning a proxy
            integration response dict.
        event: Lambda proxy event dict.
        context: Lambda context object.

    Returns:
        Whatever handler_fn returns, or a structured 401/500 response.
    """
    try:
        return handler_fn(event, context)
    except SessionError as exc:
        # ERROR for configuration, INFO for client-supplied cookies
        log = logger.error if isinstance(exc, SessionConfigError) else logger.info
        log(
            "Session rejected",
            extra={**_request_fields(event), **get_safe_error_info(exc)},
        )
        return unauthorized_response()
    except Exception as exc:
        logger.error(
            "Unhandled exception in handler",
            extra={
                **_request_fields(event),
                "error_type": type(exc).__name__,
                "traceback": traceback.format_exc(),
            },
        )
        return error_response(500, "Internal server error")
