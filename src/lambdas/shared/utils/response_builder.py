"""Response builder utilities for Lambda proxy integration responses.

Produces responses in the proxy integration format:
    {"statusCode": int, "headers": dict, "multiValueHeaders": dict,
     "body": str, "isBase64Encoded": bool}

``multiValueHeaders`` is always present so ``set_cookie`` and
``rm_cookie`` can append several ``Set-Cookie`` values.
"""

import orjson


def json_response(
    status_code: int,
    body: dict | list,
    headers: dict[str, str] | None = None,
) -> dict:
    """Build a JSON proxy integration response.

    Args:
        status_code: HTTP status code.
        body: Response body (will be serialized with orjson).
        headers: Additional response headers.

    Returns:
        Proxy integration response dict.
    """
    response_headers = {"Content-Type": "application/json"}
    if headers:
        response_headers.update(headers)
    return {
        "statusCode": status_code,
        "headers": response_headers,
        "multiValueHeaders": {},
        "body": orjson.dumps(body).decode(),
        "isBase64Encoded": False,
    }


def error_response(status_code: int, detail: str) -> dict:
    """Build an error response with a detail message."""
    return json_response(status_code, {"detail": detail})


def unauthorized_response(detail: str = "Authentication required") -> dict:
    """Build a 401 response for a missing, invalid or unverifiable session."""
    return error_response(401, detail)
